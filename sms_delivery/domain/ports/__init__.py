from .rate_limit_store import RateLimitStore
from .sms_provider import SmsProvider

__all__ = [
    "RateLimitStore",
    "SmsProvider",
]
