#!/usr/bin/env python3
"""
Demo script for the RSVP gateway.

Runs the cache, the rate limiter and the resource dispatcher against a
small in-process upstream, so no server needs to be running.
"""

import asyncio
import json
import time

import httpx

from rsvp_gateway import ApiClient, ExpiringCache, HttpxTransport, RateLimiter, ResourceService, ServiceError
from rsvp_gateway.logging_config import setup_logging


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


class DemoUpstream:
    """Tiny RSVP endpoint that counts the requests it receives."""

    def __init__(self) -> None:
        self.items = {
            "1": {"id": "1", "name": "Ada Lovelace", "attendance": "yes"},
            "2": {"id": "2", "name": "Alan Turing", "attendance": "maybe"},
        }
        self.requests = 0

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        parts = request.url.path.strip("/").split("/")[1:]
        if parts == ["rsvps"] and request.method == "GET":
            return httpx.Response(200, json=list(self.items.values()))
        if parts == ["rsvps"] and request.method == "POST":
            item = {"id": str(len(self.items) + 1), **json.loads(request.content)}
            self.items[item["id"]] = item
            return httpx.Response(201, json={"data": item, "message": "RSVP submitted successfully"})
        if len(parts) == 2 and parts[1] in self.items:
            return httpx.Response(200, json={"data": self.items[parts[1]]})
        return httpx.Response(404, json={"message": "RSVP not found"})


def demo_expiring_cache() -> None:
    """Demonstrate TTL semantics of the expiring cache."""
    print_section("Expiring Cache")

    now = [1000.0]
    cache = ExpiringCache(default_ttl=5.0, clock=lambda: now[0])

    cache.set("/rsvps:fetch_all:[null]", ["Ada", "Alan"])
    print(f"\n  t=0s   hit: {cache.get('/rsvps:fetch_all:[null]')}")

    now[0] += 4.9
    print(f"  t=4.9s hit: {cache.get('/rsvps:fetch_all:[null]')}")

    now[0] += 0.1
    print(f"  t=5.0s miss: {cache.get('/rsvps:fetch_all:[null]', 'expired')}")

    cache.set("a:fetch_all:[]", 1)
    cache.set("a:fetch_by_id:[\"1\"]", 2)
    removed = cache.invalidate("fetch_all")
    print(f"\n  invalidate('fetch_all') removed {removed}, kept {cache.keys()}")


def demo_rate_limiter() -> None:
    """Demonstrate fixed-window rate limiting."""
    print_section("Rate Limiter (3 requests / 60s)")

    now = [0.0]
    limiter = RateLimiter(clock=lambda: now[0], sweep_interval=60)

    for attempt in range(1, 5):
        decision = limiter.check_and_consume("rsvp:203.0.113.7", 3, 60)
        mark = "✓ allowed" if decision.allowed else "✗ denied"
        print(f"  request {attempt}: {mark} (window resets at t={decision.reset_at:.0f}s)")

    now[0] = 60.0
    decision = limiter.check_and_consume("rsvp:203.0.113.7", 3, 60)
    print(f"  t=60s:     {'✓ allowed' if decision.allowed else '✗ denied'} (new window)")


async def demo_dispatcher() -> None:
    """Demonstrate cached reads, invalidation and error mapping."""
    print_section("Resource Dispatcher")

    upstream = DemoUpstream()
    transport = HttpxTransport(base_url="http://demo.local/api", transport=httpx.MockTransport(upstream.handle))
    service = ResourceService.for_endpoint("/rsvps", ApiClient(transport), cache_ttl=60)

    for _ in range(3):
        start = time.time()
        items = await service.fetch_all()
        duration = (time.time() - start) * 1000
        print(f"  fetch_all -> {len(items)} items in {duration:.2f}ms (upstream requests: {upstream.requests})")

    created = await service.create({"name": "Grace Hopper", "attendance": "yes"})
    print(f"\n  created {created['name']} (id {created['id']})")
    items = await service.fetch_all()
    print(f"  fetch_all after create -> {len(items)} items (upstream requests: {upstream.requests})")

    print(f"\n  exists('1')  -> {await service.exists('1')}")
    print(f"  exists('99') -> {await service.exists('99')}")

    try:
        await service.fetch_by_id("99")
    except ServiceError as e:
        print(f"\n  fetch_by_id('99') failed: [{e.status_code}] {e.message}")

    await service.api_client.close()


def main() -> None:
    """Run all demos."""
    setup_logging(level="WARNING")

    print("\n🚀 RSVP Gateway Demo")
    print("=" * 70)

    try:
        demo_expiring_cache()
        demo_rate_limiter()
        asyncio.run(demo_dispatcher())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except ServiceError as e:
        print(f"\n❌ Error: {e.message}")


if __name__ == "__main__":
    main()
