"""Unit tests for the cache storage tiers and Redis connection setup."""

import pytest

from propsearch.config import Settings
from propsearch.services.cache import (
    AmenityCache,
    MemoryCacheTier,
    RedisCacheTier,
    connect_redis_tier,
    create_amenity_cache,
)
from propsearch.services.cache import tiers
from propsearch.services.cache.tiers import escape_glob

from tests.unit.fakes import FakeClock, FakeRedis


class TestEscapeGlob:
    def test_plain_text_unchanged(self) -> None:
        assert escape_glob("amenity:42:") == "amenity:42:"

    def test_metacharacters_escaped(self) -> None:
        assert escape_glob("a*b?c[d]") == r"a\*b\?c\[d\]"

    def test_backslash_escaped(self) -> None:
        assert escape_glob("a\\b") == "a\\\\b"


class TestMemoryCacheTier:
    @pytest.mark.asyncio
    async def test_roundtrip_and_expiry(self) -> None:
        clock = FakeClock()
        tier = MemoryCacheTier(clock=clock)
        value = ["x"]
        await tier.set("k", value, 10)

        assert await tier.get("k") is value
        clock.advance(10)
        assert await tier.get("k") is None

    @pytest.mark.asyncio
    async def test_count_and_delete_prefix(self) -> None:
        tier = MemoryCacheTier()
        await tier.set("amenity:1:a", 1, 60)
        await tier.set("amenity:2:a", 2, 60)

        assert tier.count() == 2
        assert await tier.delete_prefix("amenity:1:") == 1
        assert tier.count() == 1


class TestRedisCacheTier:
    @pytest.mark.asyncio
    async def test_set_uses_expiry(self, fake_redis: FakeRedis, clock: FakeClock) -> None:
        tier = RedisCacheTier(fake_redis)
        await tier.set("k", "v", 30)

        assert await tier.get("k") == "v"
        clock.advance(30)
        assert await tier.get("k") is None

    @pytest.mark.asyncio
    async def test_delete_prefix(self, fake_redis: FakeRedis) -> None:
        tier = RedisCacheTier(fake_redis)
        for key in ("amenity:1:a:5", "amenity:1:b:5", "amenity:11:a:5", "other:1:"):
            await tier.set(key, "v", 60)

        assert await tier.delete_prefix("amenity:1:") == 2
        assert sorted(fake_redis.data) == ["amenity:11:a:5", "other:1:"]

    @pytest.mark.asyncio
    async def test_delete_prefix_no_matches(self, fake_redis: FakeRedis) -> None:
        assert await RedisCacheTier(fake_redis).delete_prefix("amenity:") == 0

    @pytest.mark.asyncio
    async def test_close(self, fake_redis: FakeRedis) -> None:
        await RedisCacheTier(fake_redis).close()
        assert fake_redis.closed is True


class TestConnectRedisTier:
    @pytest.mark.asyncio
    async def test_disabled_returns_none(self) -> None:
        assert await connect_redis_tier(Settings(redis_enabled=False)) is None

    @pytest.mark.asyncio
    async def test_connects_on_successful_ping(self, monkeypatch) -> None:
        fake = FakeRedis()
        monkeypatch.setattr(tiers.redis, "Redis", lambda **kwargs: fake)

        tier = await connect_redis_tier(Settings())

        assert isinstance(tier, RedisCacheTier)

    @pytest.mark.asyncio
    async def test_gives_up_after_bounded_attempts(self, monkeypatch) -> None:
        pings = []

        class Unreachable(FakeRedis):
            async def ping(self) -> bool:
                pings.append(1)
                return await super().ping()

        fake = Unreachable(broken=True)
        monkeypatch.setattr(tiers.redis, "Redis", lambda **kwargs: fake)

        tier = await connect_redis_tier(Settings(redis_connect_attempts=3))

        assert tier is None
        assert len(pings) == 3
        assert fake.closed is True

    @pytest.mark.asyncio
    async def test_passes_connection_settings(self, monkeypatch) -> None:
        captured = {}

        def factory(**kwargs):
            captured.update(kwargs)
            return FakeRedis()

        monkeypatch.setattr(tiers.redis, "Redis", factory)
        settings = Settings(
            redis_host="cache.internal",
            redis_port=6380,
            redis_password="secret",
            redis_timeout=2.5,
        )

        await connect_redis_tier(settings)

        assert captured["host"] == "cache.internal"
        assert captured["port"] == 6380
        assert captured["password"] == "secret"
        assert captured["socket_timeout"] == 2.5
        assert captured["socket_connect_timeout"] == 2.5


class TestCreateAmenityCache:
    @pytest.mark.asyncio
    async def test_local_only_when_redis_disabled(self) -> None:
        cache = await create_amenity_cache(Settings(redis_enabled=False, amenity_cache_ttl=123))

        assert isinstance(cache, AmenityCache)
        assert cache.default_ttl == 123
        assert cache.get_stats().remote_available is False

    @pytest.mark.asyncio
    async def test_local_only_when_redis_unreachable(self, monkeypatch) -> None:
        monkeypatch.setattr(tiers.redis, "Redis", lambda **kwargs: FakeRedis(broken=True))

        cache = await create_amenity_cache(Settings(redis_connect_attempts=2))

        assert cache.get_stats().remote_available is False
