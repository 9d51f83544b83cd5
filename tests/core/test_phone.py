"""
Unit tests for phone number matching.
"""

import pytest

from chenaniah.core.phone import (
    InvalidPhoneError,
    digits_only,
    matches_key,
    phone_key,
    phones_match,
    require_phone_key,
)


class TestPhoneKey:
    """Tests for the 8-digit match key."""

    def test_strips_formatting(self):
        assert digits_only("+251 (91) 123-4567") == "251911234567"

    def test_local_and_international_forms_share_a_key(self):
        assert phone_key("0911234567") == phone_key("+251911234567") == "11234567"

    def test_short_numbers_have_no_key(self):
        assert phone_key("1234567") is None
        assert phone_key(None) is None
        assert phone_key("") is None

    def test_exactly_eight_digits(self):
        assert phone_key("12-34-56-78") == "12345678"


class TestRequirePhoneKey:
    def test_returns_key(self):
        assert require_phone_key("+251 911 234 567") == "11234567"

    def test_missing_phone(self):
        with pytest.raises(InvalidPhoneError) as exc_info:
            require_phone_key("   ")
        assert exc_info.value.message == "Phone number is required"
        assert exc_info.value.error_code == "INVALID_PHONE"

    def test_too_short(self):
        with pytest.raises(InvalidPhoneError) as exc_info:
            require_phone_key("12345")
        assert exc_info.value.message == "Phone number too short"
        assert exc_info.value.status_code == 400


class TestPhonesMatch:
    def test_equivalent_formats_match(self):
        assert phones_match("0911234567", "+251911234567")
        assert matches_key("+251-911-234-567", "11234567")

    def test_different_numbers_do_not_match(self):
        assert not phones_match("0911234567", "0922345678")

    def test_short_numbers_never_match(self):
        assert not phones_match("12345", "12345")
