"""Shared fakes for SMS delivery tests."""

import pytest

from sms_delivery.domain.models import DeliveryResult, ErrorKind, Message, ProviderName
from sms_delivery.domain.ports import RateLimitStore, SmsProvider
from sms_delivery.infrastructure.rate_limit_store import InMemoryRateLimitStore


class FakeClock:
    """Manually advanced clock for rate limit windows."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider(SmsProvider):
    """Provider that records calls and returns queued results."""

    def __init__(self, results: list[DeliveryResult] | None = None, configured: bool = True) -> None:
        self.calls: list[Message] = []
        self._results = list(results or [])
        self._configured = configured

    @property
    def name(self) -> ProviderName:
        return ProviderName.TWILIO

    def validate_config(self) -> bool:
        return self._configured

    def estimated_cost(self, message: Message) -> float:
        return 0.75

    async def send_sms(self, message: Message) -> DeliveryResult:
        self.calls.append(message)
        if self._results:
            return self._results.pop(0)
        return DeliveryResult(success=True, message_id=f"SM{len(self.calls)}", cost=0.75)


class BrokenStore(RateLimitStore):
    """Store whose backend is always down."""

    async def get(self, key: str) -> int:
        raise ConnectionError("store unavailable")

    async def set(self, key: str, count: int, ttl: int) -> None:
        raise ConnectionError("store unavailable")

    async def increment(self, key: str, ttl: int) -> int:
        raise ConnectionError("store unavailable")

    async def ttl(self, key: str) -> int:
        raise ConnectionError("store unavailable")


def failure(error: str = "Twilio Error 21211: invalid 'To' number") -> DeliveryResult:
    return DeliveryResult.failure(error, ErrorKind.VENDOR)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore(clock=clock)


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def make_provider():
    return StubProvider


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()


@pytest.fixture
def make_failure():
    return failure
