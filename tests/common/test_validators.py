import pytest

from src.shop_attendance.shop_attendance.common.validators import optional_float, optional_int, require_digits
from src.shop_attendance.shop_attendance.core.exceptions import ValidationError


def test_optional_int():
    assert optional_int(None, "limit", default=30) == 30
    assert optional_int("", "limit", default=30) == 30
    assert optional_int("5", "limit", default=30) == 5

    with pytest.raises(ValidationError, match="limit is not a whole number"):
        optional_int("ten", "limit", default=30)
    with pytest.raises(ValidationError, match="at least 1"):
        optional_int(0, "limit", default=30)


def test_optional_float():
    assert optional_float(None, "latitude") is None
    assert optional_float("53.4", "latitude") == 53.4
    with pytest.raises(ValidationError, match="latitude is not a number"):
        optional_float("north", "latitude")


def test_require_digits():
    assert require_digits(" 1234 ", "PIN", 4) == "1234"
    with pytest.raises(ValidationError, match="exactly 4 digits"):
        require_digits("12a4", "PIN", 4)
