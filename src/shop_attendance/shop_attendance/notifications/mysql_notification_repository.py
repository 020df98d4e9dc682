from __future__ import annotations

from typing import Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_optional_float, db_cursor, fetchall
from .model import ShopNotification
from .repository import NotificationRepository


def _row_to_notification(r: dict) -> ShopNotification:
    return ShopNotification(
        notification_id=int(r["notification_id"]),
        shop_id=int(r["shop_id"]),
        notification_type=NotificationType(r["notification_type"]),
        title=r["title"],
        message=r["message"],
        employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
        employee_name=r.get("employee_name"),
        latitude=as_optional_float(r.get("attempt_latitude")),
        longitude=as_optional_float(r.get("attempt_longitude")),
        distance_from_shop=as_optional_float(r.get("distance_from_shop")),
        location_name=r.get("location_name"),
        device_info=r.get("device_info"),
        ip_address=r.get("ip_address"),
        is_read=as_bool(r.get("is_read")),
        created_at=r.get("created_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, notification: ShopNotification) -> int:
        n = notification
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shop_notifications(
                    shop_id, notification_type, title, message, employee_id, employee_name,
                    attempt_latitude, attempt_longitude, distance_from_shop, location_name,
                    device_info, ip_address
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(n.shop_id),
                    n.notification_type.value,
                    n.title,
                    n.message,
                    n.employee_id,
                    n.employee_name,
                    n.latitude,
                    n.longitude,
                    n.distance_from_shop,
                    n.location_name,
                    n.device_info,
                    n.ip_address,
                ),
            )
            return int(cur.lastrowid)

    def list_for_shop(self, shop_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[ShopNotification]:
        sql = "SELECT * FROM shop_notifications WHERE shop_id=%s"
        if unread_only:
            sql += " AND is_read=0"
        sql += " ORDER BY created_at DESC LIMIT %s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(shop_id), int(limit)))
            return [_row_to_notification(r) for r in fetchall(cur)]

    def mark_read(self, shop_id: int, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shop_notifications SET is_read=1 WHERE shop_id=%s AND notification_id=%s",
                (int(shop_id), int(notification_id)),
            )
            return cur.rowcount > 0
