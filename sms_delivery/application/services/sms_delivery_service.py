"""
Application service for SMS delivery.

This service orchestrates validation, rate limiting and provider dispatch.
It depends on abstractions (ports), not concrete implementations, and never
raises: every outcome is returned as a DeliveryResult.
"""

import asyncio
from datetime import UTC, datetime

import structlog

from ...domain.models import DeliveryResult, ErrorKind, Message, RateLimitPolicy
from ...domain.ports import RateLimitStore, SmsProvider
from ...infrastructure.logging import Timer, mask_phone_number
from ...infrastructure.rate_limit_store import hash_destination
from .message_validator import validate_message

logger = structlog.get_logger()

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 30.0
DEFAULT_OTP_EXPIRY_MINUTES = 10

OTP_MESSAGE_TEMPLATE = "Your verification code is: {code}. This code expires in {expiry} minutes."

RATE_LIMIT_ERROR = "Rate limit exceeded"
OTP_RATE_LIMIT_ERROR = "Too many OTP requests. Please try again later."
NOT_CONFIGURED_ERROR = "SMS service is not properly configured"
PROVIDER_TIMEOUT_ERROR = "SMS provider timed out"
INTERNAL_ERROR = "Internal service error"


def format_otp_message(
    code: str,
    expiry_minutes: int,
    template_params: dict[str, str] | None = None,
) -> str:
    """
    Build an OTP message body.

    ``custom_message`` replaces the default text and may use the ``{code}``
    and ``{expiry}`` placeholders. ``app_name`` is prefixed to either.
    """
    params = template_params or {}
    template = params.get("custom_message") or OTP_MESSAGE_TEMPLATE
    message = template.replace("{code}", code).replace("{expiry}", str(expiry_minutes))

    app_name = params.get("app_name")
    if app_name:
        message = f"{app_name}: {message}"
    return message


class SmsDeliveryService:
    """
    Application service that sends SMS through a single provider.

    This service:
    - Validates destination and body before anything else
    - Enforces the general per-destination limit and the stricter OTP limit
    - Delegates to the configured SmsProvider
    - Converts unexpected exceptions into a generic failure

    Rate limit store failures fail open: the send proceeds and a warning is
    logged.
    """

    def __init__(
        self,
        provider: SmsProvider,
        rate_limit_store: RateLimitStore,
        policy: RateLimitPolicy | None = None,
        provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize with injected dependencies.

        Args:
            provider: SmsProvider implementation for the configured vendor
            rate_limit_store: RateLimitStore implementation
            policy: Rate limit windows and caps
            provider_timeout_seconds: Upper bound on a single provider call
        """
        self._provider = provider
        self._store = rate_limit_store
        self._policy = policy or RateLimitPolicy()
        self._provider_timeout = provider_timeout_seconds

        logger.info(
            "SMS service initialized",
            provider=provider.name.value,
            configured=provider.validate_config(),
        )

    @property
    def provider(self) -> SmsProvider:
        return self._provider

    async def send_message(
        self,
        to: str,
        body: str,
        sender: str | None = None,
    ) -> DeliveryResult:
        """
        Send an SMS with validation and rate limiting.

        Args:
            to: Destination in E.164 format
            body: Message text
            sender: Optional sender override

        Returns:
            DeliveryResult; failures carry an error and an ErrorKind
        """
        try:
            return await self._send_message(to, body, sender)
        except Exception:
            logger.exception("Unexpected error in send_message", to=mask_phone_number(to))
            return DeliveryResult.failure(INTERNAL_ERROR, ErrorKind.INTERNAL)

    async def send_otp(
        self,
        to: str,
        code: str,
        expiry_minutes: int = DEFAULT_OTP_EXPIRY_MINUTES,
        template_params: dict[str, str] | None = None,
    ) -> DeliveryResult:
        """
        Send a one-time code.

        At most ``policy.otp_max_sends`` successful sends per destination
        per OTP window. Failed sends do not count towards that cap.

        Args:
            to: Destination in E.164 format
            code: The one-time code
            expiry_minutes: Code lifetime shown in the message
            template_params: Optional ``app_name`` and ``custom_message``

        Returns:
            DeliveryResult
        """
        try:
            body = format_otp_message(code, expiry_minutes, template_params)
            otp_key = f"otp:{hash_destination(to)}"

            if await self._otp_limit_reached(otp_key):
                logger.warning("OTP rate limit exceeded", to=mask_phone_number(to))
                return DeliveryResult.failure(
                    OTP_RATE_LIMIT_ERROR,
                    ErrorKind.RATE_LIMITED,
                    retry_after=self._policy.otp_window_seconds,
                )

            result = await self.send_message(to, body)

            if result.success:
                await self._record_otp_send(otp_key)

            return result
        except Exception:
            logger.exception("Unexpected error in send_otp", to=mask_phone_number(to))
            return DeliveryResult.failure(INTERNAL_ERROR, ErrorKind.INTERNAL)

    def get_health_info(self) -> dict:
        """Return provider and rate limiting status for health checks."""
        return {
            "provider": self._provider.name.value,
            "configured": self._provider.validate_config(),
            "rate_limiting_enabled": self._store is not None,
            "rate_limit_store": type(self._store).__name__,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    async def shutdown(self) -> None:
        """Release the rate limit store."""
        logger.info("SMS service shutting down")
        await self._store.close()

    async def _send_message(self, to: str, body: str, sender: str | None) -> DeliveryResult:
        validation = validate_message(to, body)
        if not validation.valid:
            logger.info("SMS rejected by validation", reason=validation.error, to=mask_phone_number(to))
            return DeliveryResult.failure(validation.error, ErrorKind.VALIDATION)

        rate_key = f"sms:{hash_destination(to)}"

        # Read-only check first so a configuration failure leaves counters untouched.
        if await self._over_limit(rate_key):
            return await self._rate_limited(rate_key, to)

        if not self._provider.validate_config():
            logger.error("SMS provider is not configured", provider=self._provider.name.value)
            return DeliveryResult.failure(NOT_CONFIGURED_ERROR, ErrorKind.CONFIGURATION)

        if not await self._record_attempt(rate_key):
            return await self._rate_limited(rate_key, to)

        message = Message(to=to, body=body, sender=sender)
        with Timer() as timer:
            try:
                result = await asyncio.wait_for(
                    self._provider.send_sms(message),
                    timeout=self._provider_timeout,
                )
            except TimeoutError:
                logger.error(
                    "SMS provider call timed out",
                    provider=self._provider.name.value,
                    timeout_seconds=self._provider_timeout,
                    to=mask_phone_number(to),
                )
                result = DeliveryResult.failure(PROVIDER_TIMEOUT_ERROR, ErrorKind.TIMEOUT)

        logger.info(
            "SMS send attempt completed",
            success=result.success,
            provider=self._provider.name.value,
            cost=result.cost,
            has_error=result.error is not None,
            retry_after=result.retry_after,
            duration_ms=timer.duration_ms,
        )
        return result

    async def _over_limit(self, key: str) -> bool:
        try:
            count = await self._store.get(key)
        except Exception as e:
            logger.warning("Rate limit check failed, allowing send", error=str(e))
            return False
        return count >= self._policy.max_attempts

    async def _record_attempt(self, key: str) -> bool:
        """Count this attempt. Returns False if it lands over the limit."""
        try:
            count = await self._store.increment(key, self._policy.window_seconds)
        except Exception as e:
            logger.warning("Rate limit increment failed, allowing send", error=str(e))
            return True
        return count <= self._policy.max_attempts

    async def _rate_limited(self, key: str, to: str) -> DeliveryResult:
        try:
            remaining = await self._store.ttl(key)
        except Exception as e:
            logger.warning("Rate limit TTL lookup failed", error=str(e))
            remaining = 0
        retry_after = remaining if remaining > 0 else self._policy.window_seconds

        logger.warning("Rate limit exceeded", to=mask_phone_number(to), retry_after=retry_after)
        return DeliveryResult.failure(RATE_LIMIT_ERROR, ErrorKind.RATE_LIMITED, retry_after=retry_after)

    async def _otp_limit_reached(self, key: str) -> bool:
        try:
            count = await self._store.get(key)
        except Exception as e:
            logger.warning("OTP rate limit check failed, allowing send", error=str(e))
            return False
        return count >= self._policy.otp_max_sends

    async def _record_otp_send(self, key: str) -> None:
        try:
            await self._store.increment(key, self._policy.otp_window_seconds)
        except Exception as e:
            logger.warning("OTP rate limit increment failed", error=str(e))
