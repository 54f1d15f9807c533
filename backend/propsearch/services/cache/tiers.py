"""Storage tiers for the amenity cache.

Both tiers implement :class:`CacheTier`, a minimal async key-value
interface keyed by string tokens:

- :class:`MemoryCacheTier` - in-process, always present.
- :class:`RedisCacheTier` - shared and networked, optional. Its methods
  raise whatever the Redis client raises; callers decide how to degrade.
"""

import asyncio
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from propsearch.config import Settings
from propsearch.utils.cache import TTLCache

logger = logging.getLogger(__name__)

# Characters with special meaning in Redis MATCH patterns
_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class CacheTier(ABC):
    """Abstract key-value tier with per-key expiry."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under ``key``, or None if missing/expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``. Returns the count deleted."""

    async def close(self) -> None:
        """Release any held resources."""
        return None


class MemoryCacheTier(CacheTier):
    """Local tier over a thread-safe :class:`TTLCache`.

    Values are stored as-is (no copies, no serialization). Expired entries
    are dropped lazily on read and by :meth:`sweep`.
    """

    def __init__(
        self,
        default_ttl: int = 7200,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = TTLCache(default_ttl=default_ttl, clock=clock)

    async def get(self, key: str) -> Any | None:
        return self._store.get(key)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._store.set(key, value, ttl_seconds)

    async def delete_prefix(self, prefix: str) -> int:
        return self._store.delete_prefix(prefix)

    def sweep(self) -> int:
        return self._store.sweep()

    def count(self) -> int:
        return len(self._store)


class RedisCacheTier(CacheTier):
    """Remote tier backed by Redis.

    Values are strings; expiry is enforced by Redis itself via ``SET ... EX``.

    Attributes:
        _client: The Redis async client instance.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._client.set(key, value, ex=ttl_seconds)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete keys sharing ``prefix``.

        Uses SCAN rather than KEYS so a large keyspace is walked
        incrementally instead of blocking the server.
        """
        pattern = f"{escape_glob(prefix)}*"
        deleted_count = 0

        cursor = 0
        while True:
            cursor, keys = await self._client.scan(cursor=cursor, match=pattern, count=100)
            if keys:
                deleted_count += await self._client.delete(*keys)
            if cursor == 0:
                break

        return deleted_count

    async def close(self) -> None:
        await self._client.aclose()


async def connect_redis_tier(settings: Settings) -> RedisCacheTier | None:
    """Connect to Redis if enabled, or return None to run local-only.

    Makes up to ``settings.redis_connect_attempts`` ping attempts with a short
    linear backoff. Never raises: an unreachable server is logged and the
    caller gets None.
    """
    if not settings.redis_enabled:
        logger.info("[CACHE] Redis disabled in configuration, using in-memory cache only")
        return None

    client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        socket_timeout=settings.redis_timeout,
        socket_connect_timeout=settings.redis_timeout,
        decode_responses=True,
    )

    attempts = max(1, settings.redis_connect_attempts)
    for attempt in range(1, attempts + 1):
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.warning(
                f"[CACHE] Redis connection attempt {attempt}/{attempts} "
                f"to {settings.redis_host}:{settings.redis_port} failed: {e}"
            )
            if attempt < attempts:
                await asyncio.sleep(min(attempt * 0.05, 0.5))
            continue

        logger.info(f"[CACHE] Redis connected at {settings.redis_host}:{settings.redis_port}")
        return RedisCacheTier(client)

    logger.warning("[CACHE] Redis unavailable, using in-memory cache only")
    try:
        await client.aclose()
    except (RedisError, OSError) as e:
        logger.debug(f"[CACHE] Error closing unused Redis client: {e}")
    return None
