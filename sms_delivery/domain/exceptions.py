"""Internal exceptions. None of these escape SmsDeliveryService."""


class SmsDeliveryError(Exception):
    """Base class for SMS delivery failures raised inside the package."""


class ConfigurationError(SmsDeliveryError):
    """The selected provider cannot be built from the given configuration."""


class RateLimitStoreError(SmsDeliveryError):
    """The rate limit backend could not be reached or returned garbage."""
