"""Rate limit counter stores.

The in-memory store is for single-process deployments and tests. Use the
Redis store when more than one process sends SMS, so every process shares
the same counters.
"""

import hashlib
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..domain.exceptions import RateLimitStoreError
from ..domain.ports import RateLimitStore

logger = structlog.get_logger()

# Length of the hex prefix kept from the destination hash
HASH_PREFIX_LENGTH = 16

# Increment a counter and start its window on creation, in one EVAL call.
_INCREMENT_LUA = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return count
"""


def hash_destination(phone: str) -> str:
    """Return a short SHA-256 prefix of a phone number for use as a key."""
    return hashlib.sha256(phone.encode()).hexdigest()[:HASH_PREFIX_LENGTH]


@dataclass
class _Entry:
    count: int
    expires_at: float


class InMemoryRateLimitStore(RateLimitStore):
    """
    In-memory implementation of RateLimitStore.

    Expired entries are dropped lazily when their key is next read; there is
    no background sweep. Memory grows with the number of distinct keys seen
    in the current windows.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Initialize the store.

        Args:
            clock: Returns the current time in seconds; tests pass a fake
        """
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> int:
        entry = self._live_entry(key)
        return entry.count if entry else 0

    async def set(self, key: str, count: int, ttl: int) -> None:
        self._entries[key] = _Entry(count=count, expires_at=self._clock() + ttl)

    async def increment(self, key: str, ttl: int) -> int:
        # No await between read and write: atomic within the event loop.
        entry = self._live_entry(key)
        if entry is None:
            entry = _Entry(count=0, expires_at=self._clock() + ttl)
            self._entries[key] = entry
        entry.count += 1
        return entry.count

    async def ttl(self, key: str) -> int:
        entry = self._live_entry(key)
        if entry is None:
            return 0
        return max(0, math.ceil(entry.expires_at - self._clock()))

    def __len__(self) -> int:
        return len(self._entries)


class RedisRateLimitStore(RateLimitStore):
    """
    Redis implementation of RateLimitStore.

    ``increment`` runs as a Lua script so the increment and the expiry of a
    new window happen in a single round trip, atomic across processes.
    Backend errors are raised as RateLimitStoreError.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "sms-delivery") -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._increment_script = self._redis.register_script(_INCREMENT_LUA)

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "sms-delivery") -> "RedisRateLimitStore":
        """Create a store with its own connection pool."""
        return cls(Redis.from_url(url), key_prefix=key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    async def get(self, key: str) -> int:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as e:
            raise RateLimitStoreError(f"Redis GET failed: {e}") from e
        return int(value) if value is not None else 0

    async def set(self, key: str, count: int, ttl: int) -> None:
        try:
            await self._redis.set(self._key(key), count, ex=ttl)
        except RedisError as e:
            raise RateLimitStoreError(f"Redis SET failed: {e}") from e

    async def increment(self, key: str, ttl: int) -> int:
        try:
            result = await self._increment_script(keys=[self._key(key)], args=[ttl])
        except RedisError as e:
            raise RateLimitStoreError(f"Redis increment failed: {e}") from e
        return int(result)

    async def ttl(self, key: str) -> int:
        try:
            remaining = await self._redis.ttl(self._key(key))
        except RedisError as e:
            raise RateLimitStoreError(f"Redis TTL failed: {e}") from e
        # -2: missing key, -1: no expiry
        return max(0, int(remaining))

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except RedisError as e:
            raise RateLimitStoreError(f"Redis close failed: {e}") from e
        logger.debug("Closed Redis rate limit store")
