from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_digits(value: str, field_name: str, length: int) -> str:
    v = (value or "").strip()
    if len(v) != length or not v.isdigit():
        raise ValidationError(f"{field_name} must be exactly {length} digits")
    return v


def optional_float(value, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a number")


def optional_int(value, field_name: str, *, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a whole number")
    if number < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return number
