"""Identifier normalization and channel classification.

A user identifies themselves with either an email address or a phone
number. Both the issuance and the verification step must normalize the
raw input identically, otherwise a code issued for "9876543210" could
never be confirmed as "+91 98765 43210".
"""

import re
from enum import Enum

from app.core.config import settings

_NON_DIGITS = re.compile(r"[^0-9]")

# A bare local mobile number (no country code)
_LOCAL_NUMBER_LENGTH = 10


class NotificationChannel(str, Enum):
    """Delivery channel for a verification code.

    The value is what the API reports back to clients in ``channel``.
    """

    CHAT = "chat"
    EMAIL = "email"


def is_email(identifier: str) -> bool:
    """Return True if the identifier is shaped like an email address."""
    return "@" in identifier


def normalize_phone(phone: str, country_code: str | None = None) -> str:
    """Strip formatting from a phone number and add the country code.

    Args:
        phone: Raw phone number, any formatting.
        country_code: Code prefixed to bare local numbers. Defaults to
            ``settings.default_country_code``.

    Returns:
        Digits only. Ten-digit numbers get the country code prefixed.
    """
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == _LOCAL_NUMBER_LENGTH:
        prefix = settings.default_country_code if country_code is None else country_code
        digits = prefix + digits
    return digits


def normalize_identifier(identifier: str, country_code: str | None = None) -> str:
    """Normalize a raw identifier to its stored form.

    Emails are trimmed and lower-cased; anything else is treated as a phone
    number (see normalize_phone).

    Args:
        identifier: Raw user input.
        country_code: Optional override for the default country code.

    Returns:
        Normalized identifier. May be empty if the input had no usable
        characters; callers must reject that.
    """
    if is_email(identifier):
        return identifier.strip().lower()
    return normalize_phone(identifier, country_code)


def select_channel(identifier: str) -> NotificationChannel:
    """Pick the delivery channel from the identifier's shape.

    Pure classification: ``@`` means email, everything else goes to chat.
    """
    if is_email(identifier):
        return NotificationChannel.EMAIL
    return NotificationChannel.CHAT


def mask_identifier(identifier: str) -> str:
    """Mask an identifier for log output.

    Keeps enough of the value to correlate log lines without writing the
    full address or number to logs.

    Examples:
        "user@example.com" -> "us***@example.com"
        "919876543210" -> "********3210"
    """
    if is_email(identifier):
        local, _, domain = identifier.partition("@")
        return f"{local[:2]}***@{domain}"
    if len(identifier) <= 4:
        return "*" * len(identifier)
    return "*" * (len(identifier) - 4) + identifier[-4:]
