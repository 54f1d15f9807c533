"""Amenity cache: in-memory tier plus optional Redis tier."""

from .service import (
    DEFAULT_RADIUS,
    AmenityCache,
    CacheKey,
    CacheStats,
    RemoteResult,
    create_amenity_cache,
)
from .tiers import CacheTier, MemoryCacheTier, RedisCacheTier, connect_redis_tier

__all__ = [
    "DEFAULT_RADIUS",
    "AmenityCache",
    "CacheKey",
    "CacheStats",
    "RemoteResult",
    "create_amenity_cache",
    "CacheTier",
    "MemoryCacheTier",
    "RedisCacheTier",
    "connect_redis_tier",
]
