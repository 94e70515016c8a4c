"""
Factory for creating SMS provider instances.

This factory creates the provider implementation selected by configuration.
It encapsulates the creation logic so the delivery service only ever sees
the SmsProvider port.
"""

from ...domain.exceptions import ConfigurationError
from ...domain.models import ProviderConfig, ProviderName
from ...domain.ports import SmsProvider
from ...providers import SnsProvider, TwilioProvider, WebhookProvider


def create_provider(config: ProviderConfig) -> SmsProvider:
    """
    Create the provider selected by ``config.provider``.

    Missing credentials do not fail here; they are reported by the
    provider's ``validate_config``.

    Args:
        config: Provider selection and credentials

    Returns:
        SmsProvider implementation for the configured vendor

    Raises:
        ConfigurationError: If the provider name is not supported
    """
    match config.provider:
        case ProviderName.TWILIO:
            return TwilioProvider(
                account_sid=config.twilio_account_sid,
                auth_token=config.twilio_auth_token,
                from_number=config.twilio_phone_number,
            )
        case ProviderName.AWS_SNS:
            return SnsProvider(
                access_key_id=config.aws_access_key_id,
                secret_access_key=config.aws_secret_access_key,
                region=config.aws_region,
                sender_id=config.sns_sender_id,
                endpoint_url=config.aws_endpoint_url,
            )
        case ProviderName.CUSTOM:
            return WebhookProvider(
                webhook_url=config.custom_webhook_url,
                api_key=config.custom_webhook_api_key,
                timeout=config.custom_webhook_timeout_seconds,
            )
        case _:
            raise ConfigurationError(f"Unsupported SMS provider: {config.provider}")
