"""Shared fixtures: a controllable clock and an in-memory upstream."""

import json
from urllib.parse import unquote

import httpx
import pytest

from rsvp_gateway.entities import ServiceConfig
from rsvp_gateway.repositories import HttpxTransport
from rsvp_gateway.services import ApiClient, ExpiringCache, RateLimiter, ResourceService, RSVPService

UPSTREAM_BASE = "http://upstream.test/api"
ADMIN_PASSWORD = "wedding123"
ADMIN_TOKEN = "admin-token"


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """In-memory RSVP resource endpoint speaking JSON over httpx.MockTransport."""

    def __init__(self) -> None:
        self.items: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], object] = {}
        self._next_id = 1

    # -- helpers -------------------------------------------------------

    def seed(self, **fields) -> dict:
        item = {
            "id": str(self._next_id),
            "name": fields.get("name", f"Guest {self._next_id}"),
            "email": fields.get("email", f"guest{self._next_id}@example.com"),
            "attendance": fields.get("attendance", "yes"),
            "dietary": fields.get("dietary", ""),
            "plusOne": fields.get("plusOne", False),
            "createdAt": "2026-01-01T00:00:00Z",
            "updatedAt": "2026-01-01T00:00:00Z",
        }
        self.items[item["id"]] = item
        self._next_id += 1
        return item

    def fail(self, method: str, path: str, outcome: object) -> None:
        """Make the next request to (method, path) return or raise outcome."""
        self.failures[(method, path)] = outcome

    def count(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call == (method, path))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # -- routing -------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        method = request.method
        self.calls.append((method, path))

        outcome = self.failures.pop((method, path), None)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome

        params = dict(request.url.params)
        body = json.loads(request.content) if request.content else None
        parts = [unquote(p) for p in path.strip("/").split("/")]

        if parts == ["health"]:
            return httpx.Response(200, json={"status": "ok"})
        if parts[0] == "auth":
            return self._auth(method, parts[1], request, body)
        if parts[0] != "rsvps":
            return httpx.Response(404, json={"message": "Not found"})
        return self._rsvps(method, parts[1:], params, body)

    def _auth(self, method: str, action: str, request: httpx.Request, body: dict | None) -> httpx.Response:
        if action == "login" and method == "POST":
            if body and body.get("password") == ADMIN_PASSWORD:
                return httpx.Response(200, json={"success": True, "token": ADMIN_TOKEN, "message": "Login successful"})
            return httpx.Response(401, json={"success": False, "message": "Invalid credentials"})
        if action == "validate" and method == "GET":
            if request.headers.get("authorization") == f"Bearer {ADMIN_TOKEN}":
                return httpx.Response(200, json={"valid": True})
            return httpx.Response(401, json={"valid": False, "message": "Invalid token"})
        return httpx.Response(405, json={"message": "Method not allowed"})

    def _filtered(self, params: dict) -> list[dict]:
        items = list(self.items.values())
        if "attendance" in params:
            items = [i for i in items if i["attendance"] == params["attendance"]]
        return items

    def _rsvps(self, method: str, rest: list[str], params: dict, body: dict | None) -> httpx.Response:
        if not rest:
            if method == "GET":
                return httpx.Response(200, json=self._filtered(params))
            if method == "POST":
                if any(i["email"].lower() == body["email"].lower() for i in self.items.values()):
                    return httpx.Response(409, json={"error": "An RSVP already exists for this email address"})
                created = self.seed(**{k: v for k, v in body.items() if v is not None})
                return httpx.Response(201, json={"data": created, "message": "RSVP submitted successfully"})

        head = rest[0]
        if head == "search":
            q = params.get("q", "").lower()
            return httpx.Response(200, json=[i for i in self.items.values() if q in i["name"].lower()])
        if head == "paginated":
            page, limit = int(params["page"]), int(params["limit"])
            items = self._filtered(params)
            start = (page - 1) * limit
            return httpx.Response(
                200,
                json={
                    "items": items[start:start + limit],
                    "total": len(items),
                    "page": page,
                    "totalPages": -(-len(items) // limit),
                },
            )
        if head == "stats":
            values = list(self.items.values())
            attending = sum(1 for i in values if i["attendance"] == "yes")
            return httpx.Response(200, json={"total": len(values), "attending": attending})
        if head == "export":
            rows = ["id,name,email,attendance"] + [
                f"{i['id']},{i['name']},{i['email']},{i['attendance']}" for i in self._filtered(params)
            ]
            return httpx.Response(200, text="\n".join(rows), headers={"content-type": "text/csv"})
        if head == "by-email":
            for item in self.items.values():
                if item["email"] == rest[1]:
                    return httpx.Response(200, json=item)
            return httpx.Response(404, json={"message": "RSVP not found"})
        if head == "bulk":
            if method == "POST":
                created = [self.seed(**item) for item in body["items"]]
                return httpx.Response(201, json={"data": created})
            if method == "PUT":
                updated = []
                for update in body["updates"]:
                    self.items[update["id"]].update(update["data"])
                    updated.append(self.items[update["id"]])
                return httpx.Response(200, json={"data": updated})
            if method == "DELETE":
                for item_id in params["ids"].split(","):
                    self.items.pop(item_id, None)
                return httpx.Response(204)

        item = self.items.get(head)
        if item is None:
            return httpx.Response(404, json={"message": "RSVP not found"})
        if method == "GET":
            return httpx.Response(200, json={"data": item})
        if method in ("PUT", "PATCH"):
            item.update(body)
            return httpx.Response(200, json={"data": item})
        if method == "DELETE":
            del self.items[head]
            return httpx.Response(204)
        return httpx.Response(405, json={"message": "Method not allowed"})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def transport(upstream):
    return HttpxTransport(base_url=UPSTREAM_BASE, transport=upstream.transport)


@pytest.fixture
def api_client(transport):
    return ApiClient(transport, timeout=5.0)


@pytest.fixture
def cache(clock):
    return ExpiringCache(default_ttl=300.0, clock=clock)


@pytest.fixture
def service(api_client, cache):
    return ResourceService(
        config=ServiceConfig(endpoint="/rsvps", cache_ttl=300.0),
        api_client=api_client,
        cache=cache,
    )


@pytest.fixture
def rsvp_service(api_client, clock):
    return RSVPService(api_client=api_client, cache=ExpiringCache(default_ttl=120.0, clock=clock))


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock, sweep_interval=1800)
