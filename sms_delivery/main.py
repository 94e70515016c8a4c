"""
Composition root for the SMS delivery service.

The auth service calls ``create_sms_service`` once at startup and passes the
result (or a PhoneVerificationSender wrapping it) to the code that needs it.
Running this module sends a single test message:

    python -m sms_delivery.main +15551234567 "Hello"
"""

import asyncio
import json
import sys

import structlog

from .application.services import PhoneVerificationSender, SmsDeliveryService
from .config import Settings, settings as default_settings
from .domain.ports import RateLimitStore
from .infrastructure.adapters import create_provider
from .infrastructure.logging import configure_logging
from .infrastructure.rate_limit_store import InMemoryRateLimitStore, RedisRateLimitStore

logger = structlog.get_logger()


def create_rate_limit_store(settings: Settings) -> RateLimitStore:
    """Create the Redis store when enabled, otherwise an in-process one."""
    if settings.enable_redis:
        logger.info("Using Redis rate limit store")
        return RedisRateLimitStore.from_url(settings.redis_connection_url)
    logger.info("Using in-memory rate limit store")
    return InMemoryRateLimitStore()


def create_sms_service(
    settings: Settings | None = None,
    rate_limit_store: RateLimitStore | None = None,
) -> SmsDeliveryService:
    """Wire up the provider and rate limit store from settings."""
    settings = settings or default_settings
    return SmsDeliveryService(
        provider=create_provider(settings.provider_config()),
        rate_limit_store=rate_limit_store if rate_limit_store is not None else create_rate_limit_store(settings),
        policy=settings.rate_limit_policy(),
        provider_timeout_seconds=settings.sms_provider_timeout_seconds,
    )


def create_phone_verification_sender(
    service: SmsDeliveryService,
    settings: Settings | None = None,
) -> PhoneVerificationSender:
    settings = settings or default_settings
    return PhoneVerificationSender(
        service,
        expiry_minutes=settings.phone_otp_expiry_minutes,
        app_name=settings.app_name,
        message_template=settings.otp_message_template,
    )


async def main(argv: list[str]) -> int:
    """Send one message, or print health info when no message is given."""
    configure_logging(default_settings.service_name, default_settings.log_level)
    service = create_sms_service()

    try:
        if len(argv) < 2:
            print(json.dumps(service.get_health_info(), indent=2))
            return 0

        result = await service.send_message(argv[0], argv[1])
        print(json.dumps({"success": result.success, "message_id": result.message_id, "error": result.error}))
        return 0 if result.success else 1
    finally:
        await service.shutdown()


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
