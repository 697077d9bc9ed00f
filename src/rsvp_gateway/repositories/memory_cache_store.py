"""In-memory implementation of CacheStore."""

from rsvp_gateway.entities import CacheEntryEntity


class InMemoryCacheStore:
    """Dict-backed cache storage.

    Satisfies the CacheStore protocol through structural typing. Not
    synchronized on its own; ExpiringCache serializes access.

    Known limitation: unbounded, and private to one process.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntryEntity] = {}

    def get(self, key: str) -> CacheEntryEntity | None:
        return self._entries.get(key)

    def set(self, key: str, entry: CacheEntryEntity) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._entries)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)
