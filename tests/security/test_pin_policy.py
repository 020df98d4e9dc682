import pytest

from src.shop_attendance.shop_attendance.core.exceptions import ValidationError
from src.shop_attendance.shop_attendance.security.pin_policy import (
    is_default_owner_pin,
    is_weak_owner_pin,
    validate_owner_pin,
    validate_staff_pin,
    weak_pin_reason,
)


def test_owner_pin_must_be_six_digits():
    assert validate_owner_pin(" 482915 ") == "482915"
    for bad in ("", "12345", "1234567", "12a456"):
        with pytest.raises(ValidationError, match="PIN must be exactly 6 digits"):
            validate_owner_pin(bad)


def test_staff_pin_must_be_four_digits():
    assert validate_staff_pin("0042") == "0042"
    with pytest.raises(ValidationError, match="Please enter your 4-digit PIN"):
        validate_staff_pin("")
    with pytest.raises(ValidationError, match="exactly 4 digits"):
        validate_staff_pin("12345")


def test_default_pin():
    assert is_default_owner_pin("000000")
    assert is_default_owner_pin(None)
    assert not is_default_owner_pin("482915")


@pytest.mark.parametrize(
    "pin, reason",
    [
        ("000000", "This is the default PIN. Please change it for security."),
        ("777777", "Avoid using the same digit 6 times."),
        ("123456", "This is a very common PIN. Please choose something more secure."),
        ("112233", "Avoid repeating patterns. Use unique digits."),
        ("121212", "Please choose a stronger PIN. Avoid simple patterns."),
    ],
)
def test_weak_pin_reasons(pin, reason):
    assert is_weak_owner_pin(pin)
    assert weak_pin_reason(pin) == reason


def test_strong_pin_has_no_reason():
    assert not is_weak_owner_pin("482915")
    assert weak_pin_reason("482915") is None
