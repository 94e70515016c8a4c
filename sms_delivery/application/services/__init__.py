from .message_validator import ValidationResult, validate_message
from .phone_verification import PhoneVerificationSender, VerificationSendResult
from .sms_delivery_service import SmsDeliveryService, format_otp_message

__all__ = [
    "PhoneVerificationSender",
    "SmsDeliveryService",
    "ValidationResult",
    "VerificationSendResult",
    "format_otp_message",
    "validate_message",
]
