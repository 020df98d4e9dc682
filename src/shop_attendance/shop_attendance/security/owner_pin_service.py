from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_OWNER_PIN
from ..core.exceptions import IncorrectPinError, LockedOutError, NotFoundError, ValidationError
from ..notifications.service import SecurityNotifier
from ..shops.model import ShopLocationConfig
from ..shops.repository import ShopRepository
from .guard import PinSecurityGuard
from .pin_policy import is_weak_owner_pin, validate_owner_pin, weak_pin_reason

logger = logging.getLogger(__name__)

PIN_NOT_SET_MESSAGE = 'PIN not set. Please use "Reset with password" below to create your PIN.'


def owner_pin_identifier(shop_id: int) -> str:
    return f"owner-pin-{shop_id}"


@dataclass(frozen=True)
class OwnerPinResult:
    shop_id: int
    unlocked_at: datetime


class OwnerPinService:
    """Owner console PIN: verification with lockout, and PIN changes."""

    def __init__(
        self,
        shops: ShopRepository,
        guard: PinSecurityGuard,
        *,
        notifier: Optional[SecurityNotifier] = None,
    ):
        self._shops = shops
        self._guard = guard
        self._notifier = notifier

    def _get_shop(self, shop_id: int) -> ShopLocationConfig:
        shop = self._shops.get_location_config(int(shop_id))
        if not shop:
            raise NotFoundError("Shop not found")
        return shop

    @staticmethod
    def _pin_is_set(shop: ShopLocationConfig) -> bool:
        if not shop.owner_pin_hash:
            return False
        return not check_password_hash(shop.owner_pin_hash, DEFAULT_OWNER_PIN)

    def verify_owner_pin(
        self,
        shop_id: int,
        pin: str,
        *,
        now: datetime | None = None,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> OwnerPinResult:
        identifier = owner_pin_identifier(shop_id)

        if self._guard.is_locked_out(identifier):
            raise LockedOutError(self._guard.lockout_minutes_remaining(identifier))

        pin = validate_owner_pin(pin)
        shop = self._get_shop(shop_id)
        if not self._pin_is_set(shop):
            raise ValidationError(PIN_NOT_SET_MESSAGE)

        outcome = self._guard.attempt(identifier, lambda: check_password_hash(shop.owner_pin_hash, pin))
        if outcome.success:
            logger.info("Owner console unlocked for shop %s", shop_id)
            return OwnerPinResult(shop_id=int(shop_id), unlocked_at=now or now_local())

        if self._notifier is not None:
            self._notifier.failed_owner_login(
                shop_id=int(shop_id),
                remaining_attempts=outcome.remaining_attempts,
                locked=outcome.locked_out,
                device_info=device_info,
                ip_address=ip_address,
            )
        if outcome.locked_out:
            raise LockedOutError(outcome.lockout_minutes, just_locked=outcome.just_locked)
        raise IncorrectPinError(outcome.remaining_attempts)

    def set_owner_pin(self, shop_id: int, new_pin: str, confirm_pin: str) -> None:
        new_pin = validate_owner_pin(new_pin)
        if new_pin != (confirm_pin or "").strip():
            raise ValidationError("PINs do not match")
        if is_weak_owner_pin(new_pin):
            raise ValidationError(weak_pin_reason(new_pin) or "Please choose a stronger PIN")

        shop = self._get_shop(shop_id)
        if self._pin_is_set(shop) and check_password_hash(shop.owner_pin_hash, new_pin):
            raise ValidationError("New PIN must be different from current PIN")

        if not self._shops.update_owner_pin_hash(shop.shop_id, generate_password_hash(new_pin)):
            raise ValidationError("Failed to update PIN. Please try again.")

        self._guard.record_successful_attempt(owner_pin_identifier(shop_id))
        logger.info("Owner PIN changed for shop %s", shop_id)
