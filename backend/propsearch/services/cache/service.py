"""Two-tier amenity cache.

Caches ranked nearby-amenity lists per (property id, amenity type, radius).
A local in-memory tier is always used; a shared Redis tier is used when
available. The Redis tier is untrusted: every call to it is bounded by a
timeout and any failure degrades that single operation to a miss or no-op.

Cache key format: ``amenity:{subject_id}:{amenity_type}:{radius}``

Consistency between tiers is eventual only. ``set`` writes Redis first and
then always writes the local tier; a Redis hit on ``get`` is returned without
being copied into the local tier.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel, TypeAdapter

from propsearch.config import Settings
from propsearch.models import AmenityType, NearbyAmenity

from .tiers import CacheTier, MemoryCacheTier, connect_redis_tier

logger = logging.getLogger(__name__)

T = TypeVar("T")

NAMESPACE = "amenity"
KEY_SEPARATOR = ":"
DEFAULT_RADIUS = 5000
DEFAULT_TTL = 7200

_ENTRY_ADAPTER = TypeAdapter(list[NearbyAmenity])


def _check_subject_id(subject_id: str) -> None:
    if not isinstance(subject_id, str) or not subject_id:
        raise ValueError("subject_id cannot be empty")
    if KEY_SEPARATOR in subject_id:
        raise ValueError(f"subject_id cannot contain '{KEY_SEPARATOR}'")


@dataclass(frozen=True)
class CacheKey:
    """Composite cache key.

    Two keys are equal iff subject id, amenity type and radius are equal.
    ``token`` is the storage key used by both tiers.
    """

    subject_id: str
    category: AmenityType
    radius: int = DEFAULT_RADIUS

    def __post_init__(self) -> None:
        _check_subject_id(self.subject_id)
        object.__setattr__(self, "category", AmenityType(self.category))
        if isinstance(self.radius, bool) or not isinstance(self.radius, int) or self.radius <= 0:
            raise ValueError("radius must be a positive integer number of meters")

    @property
    def token(self) -> str:
        return KEY_SEPARATOR.join(
            (NAMESPACE, self.subject_id, self.category.value, str(self.radius))
        )

    @staticmethod
    def subject_prefix(subject_id: str) -> str:
        """Token prefix shared by every key of one subject."""
        _check_subject_id(subject_id)
        return f"{NAMESPACE}{KEY_SEPARATOR}{subject_id}{KEY_SEPARATOR}"

    @staticmethod
    def namespace_prefix() -> str:
        return f"{NAMESPACE}{KEY_SEPARATOR}"


@dataclass(frozen=True)
class RemoteResult(Generic[T]):
    """Outcome of a single remote-tier call.

    ``ok`` is False when there is no remote tier or when the call failed or
    timed out; the failure itself has already been logged.
    """

    ok: bool
    value: Optional[T] = None


class CacheStats(BaseModel):
    remote_available: bool
    local_entry_count: int


class AmenityCache:
    """Read-through cache for nearby amenity lists.

    One instance is created per process (see :func:`create_amenity_cache`)
    and handed to the services that need it.

    Attributes:
        _local: Always-present in-process tier.
        _remote: Optional shared tier, None when Redis is disabled or
            was unreachable at startup.
        _default_ttl: TTL in seconds used when ``set`` is given none.
        _remote_timeout: Upper bound in seconds for any single remote call.
    """

    def __init__(
        self,
        local: MemoryCacheTier,
        remote: CacheTier | None = None,
        default_ttl: int = DEFAULT_TTL,
        remote_timeout: float = 5.0,
    ) -> None:
        self._local = local
        self._remote = remote
        self._default_ttl = default_ttl
        self._remote_timeout = remote_timeout
        self._sweeper: asyncio.Task | None = None

    async def _call_remote(
        self, operation: str, call: Callable[[CacheTier], Awaitable[T]]
    ) -> RemoteResult[T]:
        """Run ``call`` against the remote tier, capturing any failure.

        Cancelling the caller also cancels the in-flight Redis call; either
        way it never outlives ``_remote_timeout``.
        """
        if self._remote is None:
            return RemoteResult(ok=False)
        try:
            value = await asyncio.wait_for(call(self._remote), timeout=self._remote_timeout)
        except Exception as e:
            logger.warning(f"[CACHE] Redis {operation} error: {e!r}")
            return RemoteResult(ok=False)
        return RemoteResult(ok=True, value=value)

    async def get(
        self,
        subject_id: str,
        category: AmenityType,
        radius: int = DEFAULT_RADIUS,
    ) -> list[NearbyAmenity] | None:
        """Return the cached amenity list, or None on a miss in both tiers."""
        key = CacheKey(subject_id, category, radius)
        token = key.token

        async def fetch(tier: CacheTier) -> list[NearbyAmenity] | None:
            raw = await tier.get(token)
            if raw is None:
                return None
            return _ENTRY_ADAPTER.validate_json(raw)

        result = await self._call_remote("get", fetch)
        if result.ok and result.value is not None:
            logger.debug(f"[CACHE] HIT (redis) {token}")
            return result.value

        entry = await self._local.get(token)
        if entry is None:
            logger.debug(f"[CACHE] MISS {token}")
        else:
            logger.debug(f"[CACHE] HIT (memory) {token}")
        return entry

    async def set(
        self,
        subject_id: str,
        category: AmenityType,
        entry: Sequence[NearbyAmenity],
        ttl_seconds: Optional[int] = None,
        radius: int = DEFAULT_RADIUS,
    ) -> None:
        """Store ``entry`` in both tiers for ``ttl_seconds``.

        The local write always happens, whatever the outcome of the remote
        write.
        """
        key = CacheKey(subject_id, category, radius)
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")
        token = key.token

        async def store(tier: CacheTier) -> None:
            payload = _ENTRY_ADAPTER.dump_json(list(entry)).decode("utf-8")
            await tier.set(token, payload, ttl)

        await self._call_remote("set", store)
        await self._local.set(token, list(entry), ttl)

    async def invalidate(self, subject_id: str) -> None:
        """Remove every cached entry for ``subject_id``, any type or radius."""
        prefix = CacheKey.subject_prefix(subject_id)

        result = await self._call_remote("invalidate", lambda tier: tier.delete_prefix(prefix))
        removed_local = await self._local.delete_prefix(prefix)
        logger.info(
            f"[CACHE] Invalidated {subject_id}: "
            f"{result.value if result.ok else 0} redis, {removed_local} memory"
        )

    async def clear(self) -> None:
        """Remove every amenity entry from both tiers.

        Only keys in the ``amenity:`` namespace are touched; other data in a
        shared Redis database is left alone.
        """
        prefix = CacheKey.namespace_prefix()

        await self._call_remote("clear", lambda tier: tier.delete_prefix(prefix))
        removed_local = await self._local.delete_prefix(prefix)
        logger.info(f"[CACHE] Cleared {removed_local} memory entries")

    def get_stats(self) -> CacheStats:
        return CacheStats(
            remote_available=self._remote is not None,
            local_entry_count=self._local.count(),
        )

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def start_sweeper(self, interval_seconds: float) -> None:
        """Start the periodic local expiry sweep on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_loop(interval_seconds))

    async def _sweep_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self._local.sweep()
            if removed:
                logger.debug(f"[CACHE] Swept {removed} expired memory entries")

    async def close(self) -> None:
        """Stop the sweeper and release the Redis connection."""
        if self._sweeper is not None:
            self._sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None
        await self._call_remote("close", lambda tier: tier.close())


async def create_amenity_cache(settings: Settings) -> AmenityCache:
    """Build the process-wide amenity cache from configuration."""
    remote = await connect_redis_tier(settings)
    local = MemoryCacheTier(default_ttl=settings.amenity_cache_ttl)
    return AmenityCache(
        local,
        remote,
        default_ttl=settings.amenity_cache_ttl,
        remote_timeout=settings.redis_timeout,
    )
