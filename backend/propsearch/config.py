"""Application configuration.

Settings are read from environment variables (optionally from a ``.env``
file) once at startup.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


@dataclass(frozen=True)
class Settings:
    """Process configuration for the API and the amenity cache."""

    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_timeout: float = 5.0
    redis_connect_attempts: int = 3

    amenity_cache_ttl: int = 7200
    cache_sweep_interval: int = 600

    default_search_radius: int = 5000
    max_search_radius: int = 50000
    default_page_size: int = 20
    max_page_size: int = 100

    google_maps_api_key: str = ""
    allowed_origins: tuple[str, ...] = field(default=DEFAULT_ALLOWED_ORIGINS)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        load_dotenv()

        origins = os.getenv("ALLOWED_ORIGINS")
        return cls(
            redis_enabled=os.getenv("REDIS_ENABLED", "true").lower() != "false",
            redis_host=os.getenv("REDIS_HOST", "localhost"),
            redis_port=_env_int("REDIS_PORT", 6379),
            redis_password=os.getenv("REDIS_PASSWORD") or None,
            redis_timeout=_env_float("REDIS_TIMEOUT", 5.0),
            redis_connect_attempts=_env_int("REDIS_CONNECT_ATTEMPTS", 3),
            amenity_cache_ttl=_env_int("AMENITY_CACHE_TTL", 7200),
            cache_sweep_interval=_env_int("CACHE_SWEEP_INTERVAL", 600),
            default_search_radius=_env_int("DEFAULT_SEARCH_RADIUS", 5000),
            max_search_radius=_env_int("MAX_SEARCH_RADIUS", 50000),
            default_page_size=_env_int("DEFAULT_PAGE_SIZE", 20),
            max_page_size=_env_int("MAX_PAGE_SIZE", 100),
            google_maps_api_key=os.getenv("GOOGLE_MAPS_API_KEY", ""),
            allowed_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else DEFAULT_ALLOWED_ORIGINS
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
