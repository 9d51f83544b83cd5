"""
Phone Number Matching

Applicant records carry phone numbers in inconsistent formats
("0911234567", "+251 91 123 4567", ...). Two numbers identify the same
person when the last 8 digits, after stripping every non-digit, are equal.
"""

import re

from chenaniah.core.exceptions import ServiceError

PHONE_KEY_LENGTH = 8

# Width of every stored phone column
PHONE_MAX_LENGTH = 30
# Lookups only use the digits, so any formatting up to this length is accepted
PHONE_LOOKUP_MAX_LENGTH = 100

_NON_DIGITS = re.compile(r"\D")


class InvalidPhoneError(ServiceError):
    """Raised when a phone number has too few digits to be matched."""

    def __init__(self, message: str = "Phone number too short"):
        super().__init__(message=message, error_code="INVALID_PHONE", status_code=400)


def digits_only(phone: str | None) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", phone or "")


def phone_key(phone: str | None) -> str | None:
    """
    Return the match key (trailing 8 digits) for a phone number.

    Returns None when the number has fewer than 8 digits.
    """
    digits = digits_only(phone)
    if len(digits) < PHONE_KEY_LENGTH:
        return None
    return digits[-PHONE_KEY_LENGTH:]


def require_phone_key(phone: str | None) -> str:
    """
    Return the match key for a phone number or raise.

    Raises:
        InvalidPhoneError: If the number has fewer than 8 digits
    """
    if not phone or not phone.strip():
        raise InvalidPhoneError("Phone number is required")
    key = phone_key(phone)
    if key is None:
        raise InvalidPhoneError()
    return key


def matches_key(phone: str | None, key: str) -> bool:
    """Check whether a stored phone number belongs to the given match key."""
    return phone_key(phone) == key


def phones_match(first: str | None, second: str | None) -> bool:
    """Check whether two phone numbers identify the same person."""
    first_key = phone_key(first)
    return first_key is not None and first_key == phone_key(second)
