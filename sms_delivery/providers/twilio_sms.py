import math

import structlog
from twilio.base.exceptions import TwilioRestException
from twilio.http.async_http_client import AsyncTwilioHttpClient
from twilio.rest import Client

from ..domain.models import DeliveryResult, ErrorKind, Message, ProviderName
from ..domain.ports import SmsProvider
from ..infrastructure.logging import mask_phone_number

logger = structlog.get_logger()

# Rate limiting, queue overflow and unreachable handset
RETRYABLE_ERROR_CODES = frozenset({20429, 30001, 30003})
RETRYABLE_HTTP_STATUSES = frozenset({429, 503})
RETRY_AFTER_SECONDS = 30

SEGMENT_LENGTH = 160
COST_PER_SEGMENT_CENTS = 0.75


class TwilioProvider(SmsProvider):
    """Twilio Programmable Messaging provider."""

    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None,
    ) -> None:
        self._from_number = from_number
        self._client: Client | None = None
        if account_sid and auth_token:
            self._client = Client(
                account_sid,
                auth_token,
                http_client=AsyncTwilioHttpClient(pool_connections=False),
            )

    @property
    def name(self) -> ProviderName:
        return ProviderName.TWILIO

    def validate_config(self) -> bool:
        return self._client is not None and bool(self._from_number)

    def estimated_cost(self, message: Message) -> float:
        segments = math.ceil(len(message.body) / SEGMENT_LENGTH)
        return COST_PER_SEGMENT_CENTS * segments

    async def send_sms(self, message: Message) -> DeliveryResult:
        """Send an SMS via the Twilio REST API."""
        if self._client is None:
            return DeliveryResult.failure("Twilio credentials are not configured", ErrorKind.CONFIGURATION)

        logger.info(
            "Sending SMS via Twilio",
            to=mask_phone_number(message.to),
            body_length=len(message.body),
        )

        try:
            twilio_message = await self._client.messages.create_async(
                body=message.body,
                from_=message.sender or self._from_number,
                to=message.to,
            )
        except TwilioRestException as e:
            retryable = is_retryable_error(e)
            logger.error(
                "Twilio delivery failed",
                code=e.code,
                status=e.status,
                retryable=retryable,
                to=mask_phone_number(message.to),
            )
            return DeliveryResult.failure(
                f"Twilio Error {e.code}: {e.msg}",
                ErrorKind.VENDOR_RETRYABLE if retryable else ErrorKind.VENDOR,
                retry_after=RETRY_AFTER_SECONDS if retryable else None,
            )
        except Exception as e:
            logger.error("Twilio delivery failed", error=str(e), to=mask_phone_number(message.to))
            return DeliveryResult.failure(str(e) or "Unknown Twilio error", ErrorKind.VENDOR)

        cost = self.estimated_cost(message)
        logger.info(
            "SMS sent via Twilio",
            message_id=twilio_message.sid,
            status=twilio_message.status,
            cost=cost,
        )
        return DeliveryResult(success=True, message_id=twilio_message.sid, cost=cost)


def is_retryable_error(error: TwilioRestException) -> bool:
    """Twilio throttling and transient carrier faults are worth retrying."""
    return error.code in RETRYABLE_ERROR_CODES or error.status in RETRYABLE_HTTP_STATUSES
