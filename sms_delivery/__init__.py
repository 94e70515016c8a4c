"""Async SMS delivery with validation, rate limiting and pluggable vendors."""

from .application.services import (
    PhoneVerificationSender,
    SmsDeliveryService,
    VerificationSendResult,
)
from .domain import DeliveryResult, ErrorKind, Message, ProviderConfig, ProviderName, RateLimitPolicy
from .infrastructure.rate_limit_store import InMemoryRateLimitStore, RedisRateLimitStore

__all__ = [
    "DeliveryResult",
    "ErrorKind",
    "InMemoryRateLimitStore",
    "Message",
    "PhoneVerificationSender",
    "ProviderConfig",
    "ProviderName",
    "RateLimitPolicy",
    "RedisRateLimitStore",
    "SmsDeliveryService",
    "VerificationSendResult",
]
