"""
Value objects shared by every layer of the SMS delivery service.

None of these carry identity: a Message lives for one send attempt and a
DeliveryResult is the only thing that ever crosses the service boundary.
"""

from dataclasses import dataclass
from enum import Enum


class ProviderName(str, Enum):
    """Supported SMS vendors."""

    TWILIO = "twilio"
    AWS_SNS = "aws-sns"
    CUSTOM = "custom"


class ErrorKind(str, Enum):
    """Failure categories reported in a DeliveryResult."""

    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    CONFIGURATION = "configuration"
    VENDOR = "vendor"
    VENDOR_RETRYABLE = "vendor_retryable"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class Message:
    """A single outbound SMS."""

    to: str  # E.164
    body: str
    sender: str | None = None


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of a send attempt.

    A failed result always carries ``error``. ``retry_after`` is advisory:
    callers decide whether to retry.
    """

    success: bool
    message_id: str | None = None
    error: str | None = None
    retry_after: int | None = None  # seconds
    cost: float | None = None  # estimated, US cents
    error_kind: ErrorKind | None = None

    def __post_init__(self) -> None:
        if not self.success and not self.error:
            raise ValueError("Failed DeliveryResult requires an error message")

    @property
    def is_retryable(self) -> bool:
        return not self.success and bool(self.retry_after)

    @classmethod
    def failure(
        cls,
        error: str,
        kind: ErrorKind,
        retry_after: int | None = None,
    ) -> "DeliveryResult":
        return cls(success=False, error=error, retry_after=retry_after, error_kind=kind)


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Vendor selection plus the credentials that vendor needs.

    Built once at startup; providers validate presence, not correctness.
    """

    provider: ProviderName = ProviderName.CUSTOM
    # Twilio
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_phone_number: str | None = None
    # AWS SNS
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_region: str | None = None
    aws_endpoint_url: str | None = None  # For LocalStack
    sns_sender_id: str | None = None
    # Custom webhook
    custom_webhook_url: str | None = None
    custom_webhook_api_key: str | None = None
    custom_webhook_timeout_seconds: float = 10.0


@dataclass(frozen=True, slots=True)
class RateLimitPolicy:
    """Windows and caps for the general and OTP send limits."""

    window_seconds: int = 3600
    max_attempts: int = 10
    otp_window_seconds: int = 3600
    otp_max_sends: int = 3
