from .exceptions import ConfigurationError, RateLimitStoreError, SmsDeliveryError
from .models import (
    DeliveryResult,
    ErrorKind,
    Message,
    ProviderConfig,
    ProviderName,
    RateLimitPolicy,
)

__all__ = [
    "ConfigurationError",
    "DeliveryResult",
    "ErrorKind",
    "Message",
    "ProviderConfig",
    "ProviderName",
    "RateLimitPolicy",
    "RateLimitStoreError",
    "SmsDeliveryError",
]
