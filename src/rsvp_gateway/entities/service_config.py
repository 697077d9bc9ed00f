"""Service configuration entity."""

from dataclasses import dataclass

# Search results are more volatile than full listings
SEARCH_TTL_DIVISOR = 12


@dataclass(frozen=True)
class ServiceConfig:
    """Per-resource configuration for a ResourceService.

    Attributes:
        endpoint: Resource path against which verbs are issued (e.g. "/rsvps")
        cache_ttl: Default time-to-live for cached reads, in seconds
        caching_enabled: When False, every read goes to the transport
    """

    endpoint: str
    cache_ttl: float = 300.0
    caching_enabled: bool = True

    @property
    def search_ttl(self) -> float:
        return self.cache_ttl / SEARCH_TTL_DIVISOR
