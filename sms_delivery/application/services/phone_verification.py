"""
Callbacks handed to the authentication framework for phone sign-in.

The auth framework generates the code and owns user-facing retry policy. It
only needs to know whether the code went out; the actual reason for a
failure is logged here and never shown to the end user.
"""

from dataclasses import dataclass

import structlog

from .sms_delivery_service import SmsDeliveryService

logger = structlog.get_logger()

USER_FACING_ERROR = "Unable to send verification code, try again later."


@dataclass(frozen=True, slots=True)
class VerificationSendResult:
    """What the auth framework gets back from an OTP callback."""

    success: bool
    error: str | None = None
    retry_after: int | None = None


class PhoneVerificationSender:
    """Adapts SmsDeliveryService to the auth framework's OTP callbacks."""

    def __init__(
        self,
        service: SmsDeliveryService,
        expiry_minutes: int = 5,
        app_name: str | None = None,
        message_template: str | None = None,
    ) -> None:
        self._service = service
        self._expiry_minutes = expiry_minutes
        self._template_params: dict[str, str] = {}
        if app_name:
            self._template_params["app_name"] = app_name
        if message_template:
            self._template_params["custom_message"] = message_template

    async def send_verification_code(self, phone_number: str, code: str) -> VerificationSendResult:
        return await self._send(phone_number, code, purpose="verification")

    async def send_password_reset_code(self, phone_number: str, code: str) -> VerificationSendResult:
        return await self._send(phone_number, code, purpose="password_reset")

    async def _send(self, phone_number: str, code: str, purpose: str) -> VerificationSendResult:
        result = await self._service.send_otp(
            phone_number,
            code,
            expiry_minutes=self._expiry_minutes,
            template_params=self._template_params or None,
        )

        if not result.success:
            logger.error(
                "Failed to send OTP",
                purpose=purpose,
                error=result.error,
                error_kind=result.error_kind.value if result.error_kind else None,
            )
            return VerificationSendResult(
                success=False,
                error=USER_FACING_ERROR,
                retry_after=result.retry_after,
            )

        logger.info("OTP sent", purpose=purpose, message_id=result.message_id)
        return VerificationSendResult(success=True)
