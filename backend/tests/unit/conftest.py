"""Shared fixtures for unit tests."""

import pytest

from propsearch.services.cache import AmenityCache, MemoryCacheTier, RedisCacheTier

from tests.unit.fakes import FakeClock, FakeRedis


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture
def local_cache(clock: FakeClock) -> AmenityCache:
    """Cache with no remote tier."""
    return AmenityCache(MemoryCacheTier(clock=clock), None, default_ttl=7200)


@pytest.fixture
def dual_cache(clock: FakeClock, fake_redis: FakeRedis) -> AmenityCache:
    """Cache with both tiers sharing one fake clock."""
    return AmenityCache(
        MemoryCacheTier(clock=clock),
        RedisCacheTier(fake_redis),
        default_ttl=7200,
        remote_timeout=1.0,
    )
