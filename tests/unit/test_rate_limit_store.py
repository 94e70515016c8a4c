"""Tests for rate limit stores."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from sms_delivery.domain.exceptions import RateLimitStoreError
from sms_delivery.infrastructure.rate_limit_store import (
    HASH_PREFIX_LENGTH,
    InMemoryRateLimitStore,
    RedisRateLimitStore,
    hash_destination,
)


class TestHashDestination:
    def test_consistent(self) -> None:
        assert hash_destination("+15551234567") == hash_destination("+15551234567")

    def test_different_numbers_differ(self) -> None:
        assert hash_destination("+15551234567") != hash_destination("+15551234568")

    def test_short_hex_without_raw_number(self) -> None:
        key = hash_destination("+15551234567")

        assert len(key) == HASH_PREFIX_LENGTH
        int(key, 16)
        assert "5551234567" not in key


class TestInMemoryRateLimitStore:
    @pytest.mark.asyncio
    async def test_missing_key_is_zero(self, store: InMemoryRateLimitStore) -> None:
        assert await store.get("sms:abc") == 0
        assert await store.ttl("sms:abc") == 0

    @pytest.mark.asyncio
    async def test_increment_initializes_and_counts(self, store: InMemoryRateLimitStore) -> None:
        assert await store.increment("sms:abc", 60) == 1
        assert await store.increment("sms:abc", 60) == 2
        assert await store.get("sms:abc") == 2

    @pytest.mark.asyncio
    async def test_increment_keeps_window_start(self, store: InMemoryRateLimitStore, clock) -> None:
        """Later increments do not extend the window."""
        await store.increment("sms:abc", 60)
        clock.advance(40)
        await store.increment("sms:abc", 60)

        assert await store.ttl("sms:abc") == 20

        clock.advance(20)
        assert await store.get("sms:abc") == 0

    @pytest.mark.asyncio
    async def test_expired_entry_evicted_lazily(self, store: InMemoryRateLimitStore, clock) -> None:
        await store.increment("sms:abc", 60)
        clock.advance(61)

        # Still held until the key is touched again
        assert len(store) == 1
        assert await store.get("sms:abc") == 0
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_increment_after_expiry_starts_new_window(self, store: InMemoryRateLimitStore, clock) -> None:
        await store.increment("sms:abc", 60)
        await store.increment("sms:abc", 60)
        clock.advance(60)

        assert await store.increment("sms:abc", 60) == 1
        assert await store.ttl("sms:abc") == 60

    @pytest.mark.asyncio
    async def test_set_overwrites(self, store: InMemoryRateLimitStore, clock) -> None:
        await store.increment("otp:abc", 60)
        await store.set("otp:abc", 5, 30)

        assert await store.get("otp:abc") == 5
        clock.advance(30)
        assert await store.get("otp:abc") == 0

    @pytest.mark.asyncio
    async def test_keys_independent(self, store: InMemoryRateLimitStore) -> None:
        await store.increment("sms:abc", 60)

        assert await store.get("otp:abc") == 0


class TestRedisRateLimitStore:
    def _make_store(self) -> tuple[RedisRateLimitStore, MagicMock, AsyncMock]:
        redis_mock = MagicMock()
        script_mock = AsyncMock()
        redis_mock.register_script.return_value = script_mock
        redis_mock.get = AsyncMock()
        redis_mock.set = AsyncMock()
        redis_mock.ttl = AsyncMock()
        redis_mock.aclose = AsyncMock()
        return RedisRateLimitStore(redis_mock, key_prefix="test"), redis_mock, script_mock

    @pytest.mark.asyncio
    async def test_increment_runs_script_with_prefixed_key(self) -> None:
        store, _, script_mock = self._make_store()
        script_mock.return_value = 3

        count = await store.increment("sms:abc", 3600)

        assert count == 3
        script_mock.assert_awaited_once_with(keys=["test:sms:abc"], args=[3600])

    @pytest.mark.asyncio
    async def test_get_parses_bytes(self) -> None:
        store, redis_mock, _ = self._make_store()
        redis_mock.get.return_value = b"7"

        assert await store.get("sms:abc") == 7
        redis_mock.get.assert_awaited_once_with("test:sms:abc")

    @pytest.mark.asyncio
    async def test_get_missing_is_zero(self) -> None:
        store, redis_mock, _ = self._make_store()
        redis_mock.get.return_value = None

        assert await store.get("sms:abc") == 0

    @pytest.mark.asyncio
    async def test_set_uses_expiry(self) -> None:
        store, redis_mock, _ = self._make_store()

        await store.set("sms:abc", 2, 60)

        redis_mock.set.assert_awaited_once_with("test:sms:abc", 2, ex=60)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw, expected", [(42, 42), (-1, 0), (-2, 0)])
    async def test_ttl_clamps_negative(self, raw: int, expected: int) -> None:
        store, redis_mock, _ = self._make_store()
        redis_mock.ttl.return_value = raw

        assert await store.ttl("sms:abc") == expected

    @pytest.mark.asyncio
    async def test_backend_error_wrapped(self) -> None:
        store, _, script_mock = self._make_store()
        script_mock.side_effect = RedisConnectionError("down")

        with pytest.raises(RateLimitStoreError):
            await store.increment("sms:abc", 60)

    @pytest.mark.asyncio
    async def test_close_closes_client(self) -> None:
        store, redis_mock, _ = self._make_store()

        await store.close()

        redis_mock.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_error_wrapped(self) -> None:
        store, redis_mock, _ = self._make_store()
        redis_mock.aclose.side_effect = RedisConnectionError("down")

        with pytest.raises(RateLimitStoreError):
            await store.close()
