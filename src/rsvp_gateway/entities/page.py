"""Paginated result entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Page:
    """One page of a paginated listing."""

    items: list[Any] = field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0

    @classmethod
    def from_payload(cls, payload: Any, page: int, limit: int) -> "Page":
        """Build a Page from an upstream payload.

        Accepts both ``totalPages`` and ``total_pages``; derives the page
        count from ``total`` and ``limit`` when the upstream omits it.
        """
        if isinstance(payload, list):
            payload = {"items": payload, "total": len(payload)}
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected paginated payload: {payload!r}")

        items = list(payload.get("items") or [])
        total = int(payload.get("total", len(items)))
        total_pages = payload.get("totalPages", payload.get("total_pages"))
        if total_pages is None:
            total_pages = -(-total // limit) if limit > 0 else 0

        return cls(
            items=items,
            total=total,
            page=int(payload.get("page", page)),
            total_pages=int(total_pages),
        )
