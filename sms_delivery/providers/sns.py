import structlog
from aiobotocore.session import get_session
from botocore.exceptions import ClientError

from ..domain.models import DeliveryResult, ErrorKind, Message, ProviderName
from ..domain.ports import SmsProvider
from ..infrastructure.logging import mask_phone_number

logger = structlog.get_logger()

RETRYABLE_ERROR_CODES = frozenset(
    {
        "Throttling",
        "ThrottledException",
        "InternalError",
        "InternalErrorException",
        "ServiceUnavailable",
    }
)
RETRY_AFTER_SECONDS = 60

COST_PER_MESSAGE_CENTS = 0.75


class SnsProvider(SmsProvider):
    """AWS SNS direct-publish SMS provider."""

    def __init__(
        self,
        access_key_id: str | None,
        secret_access_key: str | None,
        region: str | None,
        sender_id: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._region = region
        self._sender_id = sender_id
        self._endpoint_url = endpoint_url
        self._session = get_session()

    @property
    def name(self) -> ProviderName:
        return ProviderName.AWS_SNS

    def validate_config(self) -> bool:
        return bool(self._access_key_id and self._secret_access_key and self._region)

    def estimated_cost(self, message: Message) -> float:
        return COST_PER_MESSAGE_CENTS

    def _client_kwargs(self) -> dict:
        client_kwargs = {
            "region_name": self._region,
            "aws_access_key_id": self._access_key_id,
            "aws_secret_access_key": self._secret_access_key,
        }
        if self._endpoint_url:
            client_kwargs["endpoint_url"] = self._endpoint_url
        return client_kwargs

    def _publish_params(self, message: Message) -> dict:
        attributes = {
            "AWS.SNS.SMS.SMSType": {
                "DataType": "String",
                "StringValue": "Transactional",
            }
        }
        sender_id = message.sender or self._sender_id
        if sender_id:
            attributes["AWS.SNS.SMS.SenderID"] = {
                "DataType": "String",
                "StringValue": sender_id,
            }
        return {
            "PhoneNumber": message.to,
            "Message": message.body,
            "MessageAttributes": attributes,
        }

    async def send_sms(self, message: Message) -> DeliveryResult:
        """Publish an SMS via SNS."""
        logger.info(
            "Sending SMS via AWS SNS",
            to=mask_phone_number(message.to),
            body_length=len(message.body),
        )

        try:
            async with self._session.create_client("sns", **self._client_kwargs()) as client:
                response = await client.publish(**self._publish_params(message))
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code", "Unknown")
            retryable = code in RETRYABLE_ERROR_CODES
            logger.error(
                "AWS SNS delivery failed",
                code=code,
                retryable=retryable,
                to=mask_phone_number(message.to),
            )
            return DeliveryResult.failure(
                f"AWS SNS Error: {code} - {error.get('Message', str(e))}",
                ErrorKind.VENDOR_RETRYABLE if retryable else ErrorKind.VENDOR,
                retry_after=RETRY_AFTER_SECONDS if retryable else None,
            )
        except Exception as e:
            logger.error("AWS SNS delivery failed", error=str(e), to=mask_phone_number(message.to))
            return DeliveryResult.failure(str(e) or "Unknown AWS SNS error", ErrorKind.VENDOR)

        message_id = response.get("MessageId")
        cost = self.estimated_cost(message)
        logger.info("SMS sent via AWS SNS", message_id=message_id, cost=cost)
        return DeliveryResult(success=True, message_id=message_id, cost=cost)
