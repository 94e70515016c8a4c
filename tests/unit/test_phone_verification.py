import pytest

from sms_delivery.application.services import PhoneVerificationSender, SmsDeliveryService
from sms_delivery.application.services.phone_verification import USER_FACING_ERROR

PHONE = "+15551234567"


class TestPhoneVerificationSender:
    @pytest.mark.asyncio
    async def test_verification_code_sent(self, stub_provider, store) -> None:
        sender = PhoneVerificationSender(SmsDeliveryService(stub_provider, store), expiry_minutes=5, app_name="Acme")

        result = await sender.send_verification_code(PHONE, "987654")

        assert result.success is True
        assert result.error is None
        assert stub_provider.calls[0].body == (
            "Acme: Your verification code is: 987654. This code expires in 5 minutes."
        )

    @pytest.mark.asyncio
    async def test_password_reset_uses_template(self, stub_provider, store) -> None:
        sender = PhoneVerificationSender(
            SmsDeliveryService(stub_provider, store),
            expiry_minutes=15,
            message_template="Reset code {code} ({expiry} min)",
        )

        await sender.send_password_reset_code(PHONE, "111222")

        assert stub_provider.calls[0].body == "Reset code 111222 (15 min)"

    @pytest.mark.asyncio
    async def test_failure_hides_vendor_error(self, make_provider, store, make_failure) -> None:
        sender = PhoneVerificationSender(SmsDeliveryService(make_provider([make_failure()]), store))

        result = await sender.send_verification_code(PHONE, "987654")

        assert result.success is False
        assert result.error == USER_FACING_ERROR

    @pytest.mark.asyncio
    async def test_rate_limited_carries_retry_after(self, stub_provider, store) -> None:
        sender = PhoneVerificationSender(SmsDeliveryService(stub_provider, store))

        for _ in range(3):
            await sender.send_verification_code(PHONE, "1")
        result = await sender.send_password_reset_code(PHONE, "2")

        assert result.success is False
        assert result.retry_after == 3600
