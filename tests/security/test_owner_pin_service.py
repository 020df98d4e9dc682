from dataclasses import replace
from datetime import datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.shop_attendance.shop_attendance.core.enums import NotificationType
from src.shop_attendance.shop_attendance.core.exceptions import (
    IncorrectPinError,
    LockedOutError,
    NotFoundError,
    ValidationError,
)
from src.shop_attendance.shop_attendance.security.attempt_store import InMemoryPinAttemptStore
from src.shop_attendance.shop_attendance.security.guard import PinSecurityGuard
from src.shop_attendance.shop_attendance.security.owner_pin_service import PIN_NOT_SET_MESSAGE, OwnerPinService


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock(fixed_now):
    return FakeClock(fixed_now)


@pytest.fixture
def owner_pins(env, clock):
    guard = PinSecurityGuard(InMemoryPinAttemptStore(), clock=clock)
    return OwnerPinService(env.shops, guard, notifier=env.notifier)


def test_correct_pin_unlocks(owner_pins, fixed_now):
    result = owner_pins.verify_owner_pin(1, "482915", now=fixed_now)

    assert result.shop_id == 1
    assert result.unlocked_at == fixed_now


def test_wrong_pin_reports_remaining_and_notifies(env, owner_pins):
    with pytest.raises(IncorrectPinError) as exc:
        owner_pins.verify_owner_pin(1, "111222", ip_address="10.0.0.7")

    assert exc.value.remaining_attempts == 4
    assert str(exc.value) == "Incorrect PIN. 4 attempts remaining."

    [note] = env.notifications.rows
    assert note.notification_type == NotificationType.LOGIN_ATTEMPT
    assert note.ip_address == "10.0.0.7"


def test_fifth_wrong_pin_locks_even_the_correct_pin_out(owner_pins, clock):
    for _ in range(4):
        with pytest.raises(IncorrectPinError):
            owner_pins.verify_owner_pin(1, "111222")

    with pytest.raises(LockedOutError) as exc:
        owner_pins.verify_owner_pin(1, "111222")
    assert str(exc.value) == "Too many failed attempts. Locked out for 15 minutes."

    with pytest.raises(LockedOutError, match="Try again in 15 minutes"):
        owner_pins.verify_owner_pin(1, "482915")

    clock.now += timedelta(minutes=15)
    assert owner_pins.verify_owner_pin(1, "482915").shop_id == 1


def test_malformed_pin_is_rejected_before_counting(owner_pins):
    for _ in range(6):
        with pytest.raises(ValidationError):
            owner_pins.verify_owner_pin(1, "12")

    assert owner_pins.verify_owner_pin(1, "482915").shop_id == 1


def test_unset_or_default_pin_cannot_unlock(env, shop, owner_pins):
    env.shops.shops[1] = replace(shop, owner_pin_hash=None)
    with pytest.raises(ValidationError, match="PIN not set"):
        owner_pins.verify_owner_pin(1, "000000")

    env.shops.shops[1] = replace(shop, owner_pin_hash=generate_password_hash("000000"))
    with pytest.raises(ValidationError) as exc:
        owner_pins.verify_owner_pin(1, "000000")
    assert str(exc.value) == PIN_NOT_SET_MESSAGE


def test_unknown_shop(owner_pins):
    with pytest.raises(NotFoundError):
        owner_pins.verify_owner_pin(42, "482915")


def test_change_pin_rules(owner_pins):
    with pytest.raises(ValidationError, match="PINs do not match"):
        owner_pins.set_owner_pin(1, "583920", "583921")
    with pytest.raises(ValidationError, match="very common PIN"):
        owner_pins.set_owner_pin(1, "123456", "123456")
    with pytest.raises(ValidationError, match="must be different"):
        owner_pins.set_owner_pin(1, "482915", "482915")


def test_change_pin_then_verify_new_one(owner_pins):
    with pytest.raises(IncorrectPinError):
        owner_pins.verify_owner_pin(1, "583920")

    owner_pins.set_owner_pin(1, "583920", "583920")

    assert owner_pins.verify_owner_pin(1, "583920").shop_id == 1
    with pytest.raises(IncorrectPinError) as exc:
        owner_pins.verify_owner_pin(1, "482915")
    assert exc.value.remaining_attempts == 4
