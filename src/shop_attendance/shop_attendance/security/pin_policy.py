"""Owner and staff PIN format and strength rules."""

from __future__ import annotations

import re
from typing import Optional

from ..common.validators import require_digits
from ..core.constants import DEFAULT_OWNER_PIN
from ..core.exceptions import ValidationError

OWNER_PIN_LENGTH = 6
STAFF_PIN_LENGTH = 4

WEAK_OWNER_PINS = frozenset(
    [str(d) * OWNER_PIN_LENGTH for d in range(10)]
    + ["123456", "654321", "112233", "121212", "123123", "000123", "123000"]
)

_PAIRS = re.compile(r"^(.)\1(.)\2(.)\3$")


def validate_owner_pin(pin: str) -> str:
    v = (pin or "").strip()
    if len(v) != OWNER_PIN_LENGTH or not v.isdigit():
        raise ValidationError("PIN must be exactly 6 digits")
    return v


def validate_staff_pin(pin: str) -> str:
    v = (pin or "").strip()
    if not v:
        raise ValidationError("Please enter your 4-digit PIN")
    return require_digits(v, "PIN", STAFF_PIN_LENGTH)


def is_default_owner_pin(pin: Optional[str]) -> bool:
    return not pin or pin == DEFAULT_OWNER_PIN


def is_weak_owner_pin(pin: str) -> bool:
    return pin in WEAK_OWNER_PINS


def weak_pin_reason(pin: str) -> Optional[str]:
    if not is_weak_owner_pin(pin):
        return None
    if is_default_owner_pin(pin):
        return "This is the default PIN. Please change it for security."
    if len(set(pin)) == 1:
        return "Avoid using the same digit 6 times."
    if pin in ("123456", "654321"):
        return "This is a very common PIN. Please choose something more secure."
    if _PAIRS.match(pin):
        return "Avoid repeating patterns. Use unique digits."
    return "Please choose a stronger PIN. Avoid simple patterns."
