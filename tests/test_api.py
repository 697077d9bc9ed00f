"""
Tests for the RSVP gateway API.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from rsvp_gateway.api.app import create_app
from rsvp_gateway.repositories import HttpxTransport
from rsvp_gateway.security import SECURITY_HEADERS

from conftest import ADMIN_PASSWORD, ADMIN_TOKEN, UPSTREAM_BASE

ADMIN = {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def client(upstream):
    """Create a test client wired to the in-memory upstream."""
    app = create_app(transport=HttpxTransport(base_url=UPSTREAM_BASE, transport=upstream.transport))
    with TestClient(app) as test_client:
        yield test_client


def rsvp_form(n: int = 1, **overrides) -> dict:
    form = {"name": f"Guest Number {n}", "email": f"guest-{n}@example.com", "attendance": "yes"}
    form.update(overrides)
    return form


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "RSVP Gateway API"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["upstream_healthy"] is True


def test_health_reports_unreachable_upstream(client, upstream):
    upstream.fail("GET", "/health", httpx.ConnectError("down"))
    data = client.get("/health").json()
    assert data["status"] == "unhealthy"
    assert data["upstream_healthy"] is False


def test_security_headers(client):
    response = client.get("/")
    for key, value in SECURITY_HEADERS.items():
        assert response.headers[key] == value


def test_submit_rsvp(client, upstream):
    response = client.post("/rsvps", json=rsvp_form(plusOne=True, dietary="<b>vegan</b>"))
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "RSVP submitted successfully"
    stored = upstream.items[data["id"]]
    assert stored["dietary"] == "bvegan/b"
    assert stored["plusOne"] is True


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"name": "A"}, "Name must be at least 2 characters"),
        ({"email": "not-an-email"}, "Invalid email address"),
        ({"attendance": "perhaps"}, "Invalid attendance value"),
    ],
)
def test_submit_rsvp_rejects_invalid_input(client, upstream, overrides, error):
    response = client.post("/rsvps", json=rsvp_form(**overrides))
    assert response.status_code == 400
    assert response.json()["error"] == error
    assert upstream.count("POST", "/rsvps") == 0


def test_submit_rsvp_missing_fields(client):
    response = client.post("/rsvps", json={"name": "Ada"})
    assert response.status_code == 422
    details = response.json()["details"]
    assert "email" in details
    assert "attendance" in details


def test_submit_rsvp_duplicate_email(client):
    assert client.post("/rsvps", json=rsvp_form()).status_code == 200
    response = client.post("/rsvps", json=rsvp_form())
    assert response.status_code == 409
    assert response.json()["error"] == "This action conflicts with existing data."


def test_submit_rsvp_rate_limited(client, upstream):
    for n in range(10):
        assert client.post("/rsvps", json=rsvp_form(n)).status_code == 200

    response = client.post("/rsvps", json=rsvp_form(99))
    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) > 0
    data = response.json()
    assert data["code"] == "rate_limited"
    assert data["reset_at"] > 0
    assert upstream.count("POST", "/rsvps") == 10


def test_rate_limit_is_per_client(client):
    for n in range(10):
        client.post("/rsvps", json=rsvp_form(n), headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

    blocked = client.post("/rsvps", json=rsvp_form(50), headers={"X-Forwarded-For": "203.0.113.7"})
    other = client.post("/rsvps", json=rsvp_form(51), headers={"X-Forwarded-For": "198.51.100.2"})
    assert blocked.status_code == 429
    assert other.status_code == 200


def test_list_rsvps_is_cached(client, upstream):
    upstream.seed(attendance="yes")
    upstream.seed(attendance="no")

    assert len(client.get("/rsvps").json()) == 2
    assert len(client.get("/rsvps", params={"attendance": "no"}).json()) == 1
    client.get("/rsvps")
    assert upstream.count("GET", "/rsvps") == 2


def test_submit_refreshes_list(client, upstream):
    client.get("/rsvps")
    client.post("/rsvps", json=rsvp_form())
    assert len(client.get("/rsvps").json()) == 1


def test_search_and_paginate(client, upstream):
    for _ in range(12):
        upstream.seed()
    upstream.seed(name="Ada Lovelace")

    assert [r["name"] for r in client.get("/rsvps/search", params={"q": "lovelace"}).json()] == ["Ada Lovelace"]

    page = client.get("/rsvps/paginated", params={"page": 2, "limit": 10}).json()
    assert page["total"] == 13
    assert page["page"] == 2
    assert page["totalPages"] == 2
    assert len(page["items"]) == 3


def test_get_rsvp_not_found(client):
    response = client.get("/rsvps/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "The requested resource was not found.", "code": "client_error"}


def test_upstream_unreachable(client, upstream):
    upstream.fail("GET", "/rsvps", httpx.ConnectError("refused"))
    response = client.get("/rsvps")
    assert response.status_code == 503
    assert response.json()["code"] == "network"


def test_upstream_server_error(client, upstream):
    upstream.fail("GET", "/rsvps", httpx.Response(500, json={"message": "stack trace here"}))
    response = client.get("/rsvps")
    assert response.status_code == 500
    assert response.json()["error"] == "An internal server error occurred. Please try again later."


def test_login(client):
    response = client.post("/auth/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["token"] == ADMIN_TOKEN


def test_login_rate_limited(client, upstream):
    for _ in range(5):
        assert client.post("/auth/login", json={"password": "guess"}).status_code == 401

    response = client.post("/auth/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 429
    assert response.json()["error"] == "Too many login attempts. Please try again later."
    assert upstream.count("POST", "/auth/login") == 5


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/rsvps/stats"),
        ("GET", "/rsvps/export/csv"),
        ("PUT", "/rsvps/1"),
        ("PATCH", "/rsvps/1"),
        ("DELETE", "/rsvps/1"),
    ],
)
def test_admin_routes_require_token(client, upstream, method, path):
    upstream.seed()
    kwargs = {"json": {"attendance": "no"}} if method in ("PUT", "PATCH") else {}

    missing = client.request(method, path, **kwargs)
    forged = client.request(method, path, headers={"Authorization": "Bearer forged"}, **kwargs)

    assert missing.status_code == 401
    assert missing.json()["error"] == "No token provided"
    assert forged.status_code == 401
    assert forged.json()["error"] == "Invalid token"


def test_admin_update_and_delete(client, upstream):
    item = upstream.seed()
    client.get(f"/rsvps/{item['id']}")

    updated = client.put(f"/rsvps/{item['id']}", json={"attendance": "no"}, headers=ADMIN)
    assert updated.status_code == 200
    assert updated.json()["attendance"] == "no"
    assert client.get(f"/rsvps/{item['id']}").json()["attendance"] == "no"

    deleted = client.delete(f"/rsvps/{item['id']}", headers=ADMIN)
    assert deleted.status_code == 200
    assert client.get(f"/rsvps/{item['id']}").status_code == 404


def test_admin_stats_and_export(client, upstream):
    upstream.seed(name="Ada", attendance="yes")
    upstream.seed(name="Bob", attendance="no")

    stats = client.get("/rsvps/stats", headers=ADMIN)
    assert stats.json() == {"total": 2, "attending": 1}

    export = client.get("/rsvps/export/csv", params={"attendance": "yes"}, headers=ADMIN)
    assert export.status_code == 200
    assert export.text.splitlines()[1].startswith("1,Ada,")


def test_admin_update_sanitizes_text_fields(client, upstream):
    item = upstream.seed()

    response = client.put(
        f"/rsvps/{item['id']}",
        json={"name": " <b>Ada</b> ", "dietary": "<script>nuts</script>"},
        headers=ADMIN,
    )

    assert response.status_code == 200
    assert upstream.items[item["id"]]["name"] == "bAda/b"
    assert upstream.items[item["id"]]["dietary"] == "scriptnuts/script"


def test_admin_patch_sanitizes_and_validates(client, upstream):
    item = upstream.seed()

    patched = client.patch(f"/rsvps/{item['id']}", json={"plusOneName": "'Bob'"}, headers=ADMIN)
    assert patched.status_code == 200
    assert upstream.items[item["id"]]["plusOneName"] == "Bob"

    bad_email = client.patch(f"/rsvps/{item['id']}", json={"email": "<x>@nowhere"}, headers=ADMIN)
    short_name = client.put(f"/rsvps/{item['id']}", json={"name": "<A>"}, headers=ADMIN)
    assert bad_email.status_code == 400
    assert bad_email.json()["error"] == "Invalid email address"
    assert short_name.status_code == 400
    assert upstream.count("PUT", f"/rsvps/{item['id']}") == 0
