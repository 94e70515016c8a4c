from .sns import SnsProvider
from .twilio_sms import TwilioProvider
from .webhook import WebhookProvider

__all__ = [
    "SnsProvider",
    "TwilioProvider",
    "WebhookProvider",
]
