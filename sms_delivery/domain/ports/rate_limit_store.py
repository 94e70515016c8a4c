"""
Outbound port for rate limit counters.

This port defines the counter operations the delivery service needs.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod


class RateLimitStore(ABC):
    """
    Outbound port for windowed send counters.

    A key past its expiry is treated as absent (count zero). The store is
    the only component that reads or writes counter records.
    """

    @abstractmethod
    async def get(self, key: str) -> int:
        """
        Return the current count for a key.

        Args:
            key: Counter key

        Returns:
            Current count, 0 if missing or expired
        """
        ...

    @abstractmethod
    async def set(self, key: str, count: int, ttl: int) -> None:
        """
        Overwrite the count for a key and expire it after ``ttl`` seconds.

        Args:
            key: Counter key
            count: New count
            ttl: Seconds until the record expires
        """
        ...

    @abstractmethod
    async def increment(self, key: str, ttl: int) -> int:
        """
        Atomically increment a key, creating it if needed.

        The expiry is set to ``now + ttl`` only when the key is created;
        later increments in the same window keep the initial expiry.

        Args:
            key: Counter key
            ttl: Window length in seconds

        Returns:
            The count after incrementing
        """
        ...

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Return seconds until the key expires, 0 if missing or expired."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
