"""Test doubles shared by the unit tests."""

import asyncio
import re
from typing import Optional

from redis.exceptions import ConnectionError as RedisConnectionError

from propsearch.models import AmenityType, Coordinates, NearbyAmenity


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _glob_to_regex(pattern: str) -> re.Pattern:
    parts = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis`` (string values only).

    Set ``broken = True`` to make every call fail like a dropped connection.
    """

    def __init__(self, clock: Optional[FakeClock] = None, broken: bool = False) -> None:
        self.clock = clock or FakeClock()
        self.data: dict[str, tuple[str, Optional[float]]] = {}
        self.broken = broken
        self.closed = False

    def _check(self) -> None:
        if self.broken:
            raise RedisConnectionError("Connection refused")

    def _live(self, key: str) -> bool:
        item = self.data.get(key)
        if item is None:
            return False
        _, expires_at = item
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return False
        return True

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> Optional[str]:
        self._check()
        return self.data[key][0] if self._live(key) else None

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self._check()
        expires_at = self.clock() + ex if ex is not None else None
        self.data[key] = (value, expires_at)
        return True

    async def scan(self, cursor: int = 0, match: Optional[str] = None, count: int = 10):
        self._check()
        regex = _glob_to_regex(match) if match else None
        keys = [k for k in list(self.data) if self._live(k) and (regex is None or regex.match(k))]
        return 0, keys

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self) -> None:
        self.closed = True


class SlowRedis(FakeRedis):
    """A Redis that never answers reads in time."""

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(10)
        return None


def make_amenities(
    amenity_type: AmenityType = AmenityType.HOSPITAL, count: int = 3, tag: str = "a"
) -> list[NearbyAmenity]:
    return [
        NearbyAmenity(
            type=amenity_type,
            name=f"{tag} place {i}",
            address=f"{i} Test Street",
            distance=100 * (i + 1),
            duration=60 * (i + 1),
            place_id=f"{tag}_{amenity_type.value}_{i}",
            rating=4.0,
            user_ratings_total=10 + i,
            coordinates=Coordinates(lat=19.0 + i / 1000, lng=72.8),
        )
        for i in range(count)
    ]
