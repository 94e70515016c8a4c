import time
from datetime import UTC, datetime

import httpx
import structlog

from ..domain.models import DeliveryResult, ErrorKind, Message, ProviderName
from ..domain.ports import SmsProvider
from ..infrastructure.logging import mask_phone_number

logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 10.0
RETRY_AFTER_SECONDS = 30
USER_AGENT = "SMS-Service/1.0"

COST_PER_MESSAGE_CENTS = 1.0


class WebhookProvider(SmsProvider):
    """
    Operator-hosted webhook provider.

    Posts a JSON envelope to the configured URL. Without a URL it runs in
    log-only mode: nothing is sent and a synthetic message ID is returned,
    which keeps development environments working without vendor accounts.
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._webhook_url = webhook_url or ""
        self._api_key = api_key or ""
        self._timeout = timeout

    @property
    def name(self) -> ProviderName:
        return ProviderName.CUSTOM

    @property
    def log_only(self) -> bool:
        return not self._webhook_url

    def validate_config(self) -> bool:
        # Log-only mode is a valid configuration.
        return True

    def estimated_cost(self, message: Message) -> float:
        return COST_PER_MESSAGE_CENTS

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def send_sms(self, message: Message) -> DeliveryResult:
        """Post the message to the webhook, or log it in log-only mode."""
        if self.log_only:
            logger.warning("No webhook URL configured, logging message only")
            logger.info(
                "Would send SMS",
                to=mask_phone_number(message.to),
                body_length=len(message.body),
            )
            logger.debug("Would send SMS body", body=message.body)
            return DeliveryResult(success=True, message_id=f"custom-mock-{_now_ms()}")

        payload = {
            "to": message.to,
            "body": message.body,
            "from": message.sender,
            "timestamp": datetime.now(UTC).isoformat(),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._webhook_url, headers=self._headers(), json=payload)
                response.raise_for_status()
                data = _json_or_empty(response)

        except httpx.TimeoutException:
            error_msg = f"Webhook request timed out after {self._timeout:g}s"
            logger.error("Webhook delivery failed", error=error_msg, to=mask_phone_number(message.to))
            return DeliveryResult.failure(error_msg, ErrorKind.TIMEOUT)

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            retryable = status == 429 or status >= 500
            error_msg = f"Webhook error: HTTP {status}"
            logger.error(
                "Webhook delivery failed",
                error=error_msg,
                retryable=retryable,
                to=mask_phone_number(message.to),
            )
            return DeliveryResult.failure(
                error_msg,
                ErrorKind.VENDOR_RETRYABLE if retryable else ErrorKind.VENDOR,
                retry_after=RETRY_AFTER_SECONDS if retryable else None,
            )

        except httpx.RequestError as e:
            logger.error("Webhook delivery failed", error=str(e), to=mask_phone_number(message.to))
            return DeliveryResult.failure(
                f"Webhook connection error: {e}",
                ErrorKind.VENDOR_RETRYABLE,
                retry_after=RETRY_AFTER_SECONDS,
            )

        except Exception as e:
            logger.error("Webhook delivery failed", error=str(e), to=mask_phone_number(message.to))
            return DeliveryResult.failure(str(e) or "Unknown custom provider error", ErrorKind.VENDOR)

        message_id = data.get("messageId") or f"custom-{_now_ms()}"
        cost = self.estimated_cost(message)
        logger.info("SMS sent via webhook", message_id=message_id, cost=cost)
        return DeliveryResult(success=True, message_id=message_id, cost=cost)


def _json_or_empty(response: httpx.Response) -> dict:
    """Webhooks may answer 2xx with no body; that still counts as sent."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _now_ms() -> int:
    return int(time.time() * 1000)
