import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream resource endpoint
    upstream_base_url: str = os.getenv("UPSTREAM_BASE_URL", "http://localhost:3000/api")
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "10.0"))

    # Cache
    cache_backend: str = os.getenv("CACHE_BACKEND", "memory")
    cache_ttl: float = float(os.getenv("CACHE_TTL", "300"))  # 5 minutes default
    rsvp_cache_ttl: float = float(os.getenv("RSVP_CACHE_TTL", "120"))
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "rsvp_gateway")

    # Redis (only used when CACHE_BACKEND=redis)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Rate limiting
    rate_limit_sweep_interval: float = float(os.getenv("RATE_LIMIT_SWEEP_INTERVAL", "1800"))
    rsvp_rate_limit: int = int(os.getenv("RSVP_RATE_LIMIT", "10"))
    rsvp_rate_window: float = float(os.getenv("RSVP_RATE_WINDOW", "3600"))
    login_rate_limit: int = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    login_rate_window: float = float(os.getenv("LOGIN_RATE_WINDOW", "900"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "false").lower() == "true"

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    @property
    def uses_redis(self) -> bool:
        """Check if the cache should be backed by Redis.

        Returns:
            True if CACHE_BACKEND is "redis", False otherwise
        """
        return self.cache_backend.lower() == "redis"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend.lower() not in ("memory", "redis"):
            raise ValueError(f"CACHE_BACKEND must be 'memory' or 'redis', got {self.cache_backend!r}")

        if self.cache_ttl <= 0 or self.rsvp_cache_ttl <= 0:
            raise ValueError("CACHE_TTL and RSVP_CACHE_TTL must be positive")

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")

        if self.rsvp_rate_limit < 1 or self.login_rate_limit < 1:
            raise ValueError("Rate limits must allow at least one request per window")

        if min(self.rsvp_rate_window, self.login_rate_window, self.rate_limit_sweep_interval) <= 0:
            raise ValueError("Rate limit windows and the sweep interval must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
