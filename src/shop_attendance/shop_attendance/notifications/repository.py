from __future__ import annotations

from typing import Protocol, Sequence

from .model import ShopNotification


class NotificationRepository(Protocol):
    def insert(self, notification: ShopNotification) -> int:
        raise NotImplementedError

    def list_for_shop(self, shop_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[ShopNotification]:
        raise NotImplementedError

    def mark_read(self, shop_id: int, notification_id: int) -> bool:
        raise NotImplementedError
