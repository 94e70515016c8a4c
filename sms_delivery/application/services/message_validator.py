"""
Message validation applied before any SMS leaves the service.

Checks run in a fixed order and the first failure wins:
- E.164 destination
- Non-empty body
- Body length (ten concatenated segments)
- Spam phrases
"""

import re
from dataclasses import dataclass

MAX_BODY_LENGTH = 1600

E164_PATTERN = re.compile(r"\+[1-9][0-9]{1,14}")

# Spam patterns (case-insensitive)
SPAM_PATTERNS = [
    r"click here",
    r"urgent.{0,10}act now",
    r"congratulations.{0,20}won",
    r"free money",
    r"viagra",
    r"casino",
]

_spam_patterns = [re.compile(p, re.IGNORECASE) for p in SPAM_PATTERNS]

INVALID_PHONE_ERROR = "Invalid phone number format. Use E.164 format (+1234567890)"
EMPTY_BODY_ERROR = "Message body cannot be empty"
BODY_TOO_LONG_ERROR = f"Message body exceeds maximum length ({MAX_BODY_LENGTH} characters)"
CONTENT_NOT_ALLOWED_ERROR = "Message content not allowed"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of message validation."""

    valid: bool
    error: str | None = None


VALID = ValidationResult(valid=True)


def is_valid_phone_number(phone: str) -> bool:
    """E.164: '+', a non-zero country code digit, at most 15 digits."""
    return E164_PATTERN.fullmatch(phone) is not None


def contains_spam_indicators(body: str) -> bool:
    return any(pattern.search(body) for pattern in _spam_patterns)


def validate_message(to: str, body: str) -> ValidationResult:
    """
    Validate a destination and body.

    Args:
        to: Destination phone number
        body: Message text

    Returns:
        ValidationResult, with the first rule violated in ``error``
    """
    if not is_valid_phone_number(to):
        return ValidationResult(valid=False, error=INVALID_PHONE_ERROR)

    if not body or not body.strip():
        return ValidationResult(valid=False, error=EMPTY_BODY_ERROR)

    if len(body) > MAX_BODY_LENGTH:
        return ValidationResult(valid=False, error=BODY_TOO_LONG_ERROR)

    if contains_spam_indicators(body):
        return ValidationResult(valid=False, error=CONTENT_NOT_ALLOWED_ERROR)

    return VALID
