from __future__ import annotations

import logging
from typing import Optional

from ..common.side_effects import BestEffortRunner
from ..core.enums import NotificationType
from ..geo.distance import format_distance
from ..geo.geocoder import ReverseGeocoder, fallback_place_name
from .model import ShopNotification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class SecurityNotifier:
    """Writes owner-facing audit notifications on the side channel.

    ``notify`` returns immediately; the place-name lookup and the insert run
    on the best-effort runner and a failure there is only logged.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        *,
        runner: Optional[BestEffortRunner] = None,
        geocoder: Optional[ReverseGeocoder] = None,
    ):
        self._notifications = notifications
        self._runner = runner or BestEffortRunner()
        self._geocoder = geocoder

    def notify(
        self,
        shop_id: int,
        notification_type: NotificationType,
        *,
        title: str,
        message: str,
        employee_id: Optional[int] = None,
        employee_name: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        distance_from_shop: Optional[float] = None,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        try:
            self._runner.submit(
                self._write,
                ShopNotification(
                    shop_id=int(shop_id),
                    notification_type=notification_type,
                    title=title,
                    message=message,
                    employee_id=employee_id,
                    employee_name=employee_name,
                    latitude=latitude,
                    longitude=longitude,
                    distance_from_shop=round(distance_from_shop, 2) if distance_from_shop is not None else None,
                    device_info=(device_info or "")[:255] or None,
                    ip_address=ip_address,
                ),
                description=f"{notification_type.value} notification for shop {shop_id}",
            )
        except Exception:
            logger.exception("Could not queue %s notification for shop %s", notification_type.value, shop_id)

    def _write(self, notification: ShopNotification) -> None:
        location_name = None
        if notification.latitude is not None and notification.longitude is not None:
            if self._geocoder is not None:
                location_name = self._geocoder.place_name(notification.latitude, notification.longitude)
            else:
                location_name = fallback_place_name(notification.latitude, notification.longitude)

        self._notifications.insert(
            ShopNotification(
                shop_id=notification.shop_id,
                notification_type=notification.notification_type,
                title=notification.title,
                message=notification.message,
                employee_id=notification.employee_id,
                employee_name=notification.employee_name,
                latitude=notification.latitude,
                longitude=notification.longitude,
                distance_from_shop=notification.distance_from_shop,
                location_name=location_name,
                device_info=notification.device_info,
                ip_address=notification.ip_address,
            )
        )

    # Convenience builders used by the clock and owner-PIN paths

    def clock_in_attempt(
        self,
        *,
        shop_id: int,
        employee_id: int,
        employee_name: str,
        latitude: Optional[float],
        longitude: Optional[float],
        distance_meters: Optional[float],
        blocked: bool,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        where = format_distance(distance_meters) if distance_meters is not None else "an unknown distance"
        if blocked:
            title = "Blocked clock-in attempt"
            message = f"{employee_name} tried to clock in {where} from the shop."
        else:
            title = "Remote clock-in needs review"
            message = f"{employee_name} clocked in {where} from the shop."
        self.notify(
            shop_id,
            NotificationType.CLOCK_IN_ATTEMPT,
            title=title,
            message=message,
            employee_id=employee_id,
            employee_name=employee_name,
            latitude=latitude,
            longitude=longitude,
            distance_from_shop=distance_meters,
            device_info=device_info,
            ip_address=ip_address,
        )

    def failed_owner_login(
        self,
        *,
        shop_id: int,
        remaining_attempts: int,
        locked: bool,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        if locked:
            message = "Owner PIN entered incorrectly too many times. Owner access is locked."
        else:
            message = f"Incorrect owner PIN entered. {remaining_attempts} attempt(s) remaining."
        self.notify(
            shop_id,
            NotificationType.LOGIN_ATTEMPT,
            title="Failed owner PIN attempt",
            message=message,
            device_info=device_info,
            ip_address=ip_address,
        )

    # Owner inbox

    def list_recent(self, shop_id: int, *, unread_only: bool = False, limit: int = 50):
        return self._notifications.list_for_shop(int(shop_id), unread_only=unread_only, limit=limit)

    def mark_read(self, shop_id: int, notification_id: int) -> bool:
        return self._notifications.mark_read(int(shop_id), int(notification_id))
