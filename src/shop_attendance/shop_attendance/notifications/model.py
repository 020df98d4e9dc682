from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class ShopNotification:
    """Security audit record shown to the shop owner."""

    shop_id: int
    notification_type: NotificationType
    title: str
    message: str
    employee_id: Optional[int] = None
    employee_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_from_shop: Optional[float] = None
    location_name: Optional[str] = None
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    notification_id: Optional[int] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
