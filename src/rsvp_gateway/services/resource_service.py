"""Generic resource dispatcher.

Every CRUD operation against a resource endpoint passes through here:
reads consult the cache first, writes invalidate it afterwards, and all
failures are normalized into ServiceError.

Invalidation policy:
    create / bulk_create      -> every fetch_all variant
    update / partial_update   -> everything
    delete / bulk_*           -> everything (once per batch)
"""

import logging
from typing import Any
from urllib.parse import quote

from rsvp_gateway.entities import Page, ServiceConfig
from rsvp_gateway.errors import ServiceError, is_not_found_error
from rsvp_gateway.services.api_client import ApiClient
from rsvp_gateway.services.expiring_cache import ExpiringCache, build_cache_key
from rsvp_gateway.services.guard import service_operation

logger = logging.getLogger(__name__)

_MISS = object()


class ResourceService:
    """CRUD dispatcher for one resource endpoint.

    Depends on an ApiClient (transport + normalization) and owns an
    ExpiringCache. Instances are independent; construct one per resource
    and share it through the application context.

    Example:
        ```python
        service = ResourceService(
            config=ServiceConfig(endpoint="/rsvps", cache_ttl=120),
            api_client=ApiClient(HttpxTransport.create()),
        )
        items = await service.fetch_all({"attendance": "yes"})
        ```
    """

    def __init__(
        self,
        config: ServiceConfig,
        api_client: ApiClient,
        cache: ExpiringCache | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Endpoint and caching configuration (required).
            api_client: Client used for every transport call (required).
            cache: Read cache. Defaults to an in-memory cache using config.cache_ttl.
        """
        self._config = config
        self._api = api_client
        self._cache = cache if cache is not None else ExpiringCache(default_ttl=config.cache_ttl)

    @classmethod
    def for_endpoint(
        cls,
        endpoint: str,
        api_client: ApiClient,
        cache_ttl: float = 300.0,
        caching_enabled: bool = True,
    ) -> "ResourceService":
        """Factory method building the ServiceConfig from plain arguments.

        Args:
            endpoint: Resource path (e.g. "/rsvps")
            api_client: Client used for every transport call
            cache_ttl: Default TTL for cached reads, in seconds
            caching_enabled: Whether reads are cached at all

        Returns:
            Configured ResourceService
        """
        return cls(
            config=ServiceConfig(endpoint=endpoint, cache_ttl=cache_ttl, caching_enabled=caching_enabled),
            api_client=api_client,
        )

    # -- cache helpers -----------------------------------------------------

    def cache_key(self, operation: str, *params: Any) -> str:
        return build_cache_key(self._config.endpoint, operation, *params)

    def _cached(self, key: str) -> Any:
        if not self._config.caching_enabled:
            return _MISS
        return self._cache.get(key, _MISS)

    def _remember(self, key: str, value: Any, ttl: float | None = None) -> None:
        if self._config.caching_enabled:
            self._cache.set(key, value, ttl if ttl is not None else self._config.cache_ttl)

    def invalidate(self, pattern: str | None = None) -> int:
        """Drop cached reads whose key contains pattern, or all of them."""
        return self._cache.invalidate(pattern)

    async def _cached_get(
        self,
        key: str,
        path: str,
        params: dict[str, Any] | None = None,
        ttl: float | None = None,
    ) -> Any:
        cached = self._cached(key)
        if cached is not _MISS:
            return cached

        response = await self._api.get(path, params=params)
        self._remember(key, response.value, ttl)
        return response.value

    def _item_path(self, item_id: Any) -> str:
        return f"{self._config.endpoint}/{quote(str(item_id), safe='')}"

    # -- reads -------------------------------------------------------------

    async def fetch_all(self, filters: dict[str, Any] | None = None) -> list[Any]:
        """Fetch every item, optionally filtered. Cached per filter set."""
        with service_operation("fetch all items"):
            filters = filters or None
            key = self.cache_key("fetch_all", filters)
            return await self._cached_get(key, self._config.endpoint, params=filters)

    async def fetch_by_id(self, item_id: Any) -> Any:
        """Fetch one item. Cached per id.

        Raises:
            ServiceError: wrapping a 404 TypedError if the endpoint has no such id
        """
        with service_operation(f"fetch item with ID {item_id}"):
            key = self.cache_key("fetch_by_id", str(item_id))
            return await self._cached_get(key, self._item_path(item_id))

    async def fetch_with_relations(self, item_id: Any, relations: list[str]) -> Any:
        """Fetch one item with related records included."""
        with service_operation(f"fetch item with relations: {', '.join(relations)}"):
            key = self.cache_key("fetch_with_relations", str(item_id), list(relations))
            return await self._cached_get(key, self._item_path(item_id), params={"include": ",".join(relations)})

    async def exists(self, item_id: Any) -> bool:
        """Check whether an item exists.

        Only a not-found failure maps to False; any other error propagates.
        """
        with service_operation(f"check if item with ID {item_id} exists"):
            try:
                await self.fetch_by_id(item_id)
            except ServiceError as e:
                if e.error is not None and is_not_found_error(e.error):
                    return False
                raise
            return True

    async def search(self, query: str, filters: dict[str, Any] | None = None) -> list[Any]:
        """Search items. Cached with a shorter TTL than full listings."""
        with service_operation(f'search items with query "{query}"'):
            params = {"q": query, **(filters or {})}
            key = self.cache_key("search", params)
            return await self._cached_get(
                key,
                f"{self._config.endpoint}/search",
                params=params,
                ttl=self._config.search_ttl,
            )

    async def get_paginated(
        self,
        page: int = 1,
        limit: int = 10,
        filters: dict[str, Any] | None = None,
    ) -> Page:
        """Fetch one page. Cached per (page, limit, filters)."""
        with service_operation(f"fetch paginated results (page {page})"):
            params = {"page": str(page), "limit": str(limit), **(filters or {})}
            key = self.cache_key("get_paginated", params)

            cached = self._cached(key)
            if cached is not _MISS:
                return Page.from_payload(cached, page, limit)

            response = await self._api.get(f"{self._config.endpoint}/paginated", params=params)
            result = Page.from_payload(response.value, page, limit)
            self._remember(
                key,
                {"items": result.items, "total": result.total, "page": result.page, "totalPages": result.total_pages},
            )
            return result

    # -- writes ------------------------------------------------------------

    async def create(self, payload: dict[str, Any]) -> Any:
        """Create an item and return it with server-assigned fields.

        A new id cannot collide with a cached one, so only list reads are
        invalidated.
        """
        with service_operation("create new item"):
            response = await self._api.post(self._config.endpoint, payload)
            self.invalidate("fetch_all")
            return response.value

    async def update(self, item_id: Any, payload: dict[str, Any]) -> Any:
        with service_operation(f"update item with ID {item_id}"):
            response = await self._api.put(self._item_path(item_id), payload)
            self.invalidate()
            return response.value

    async def partial_update(self, item_id: Any, payload: dict[str, Any]) -> Any:
        with service_operation(f"partially update item with ID {item_id}"):
            response = await self._api.patch(self._item_path(item_id), payload)
            self.invalidate()
            return response.value

    async def delete(self, item_id: Any) -> None:
        with service_operation(f"delete item with ID {item_id}"):
            await self._api.delete(self._item_path(item_id))
            self.invalidate()

    async def bulk_create(self, items: list[dict[str, Any]]) -> list[Any]:
        with service_operation("bulk create items"):
            response = await self._api.post(f"{self._config.endpoint}/bulk", {"items": items})
            self.invalidate("fetch_all")
            return response.value

    async def bulk_update(self, updates: list[dict[str, Any]]) -> list[Any]:
        """Update several items.

        Args:
            updates: Entries of the form ``{"id": ..., "data": {...}}``
        """
        with service_operation("bulk update items"):
            response = await self._api.put(f"{self._config.endpoint}/bulk", {"updates": updates})
            self.invalidate()
            return response.value

    async def bulk_delete(self, ids: list[Any]) -> None:
        with service_operation("bulk delete items"):
            await self._api.delete(
                f"{self._config.endpoint}/bulk",
                params={"ids": ",".join(str(i) for i in ids)},
            )
            self.invalidate()

    # -- accessors ---------------------------------------------------------

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def cache(self) -> ExpiringCache:
        """Get the underlying cache (for testing)."""
        return self._cache

    @property
    def api_client(self) -> ApiClient:
        """Get the underlying API client (for testing)."""
        return self._api
