from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_optional_float, db_cursor, fetchone
from .model import ShopLocationConfig
from .repository import ShopRepository

_COLUMNS = """
    shop_id, shop_name, latitude, longitude, radius_meters, tag_id, tag_active,
    tag_enabled, code_enabled, require_gps, owner_pin_hash
"""


def _row_to_shop(r: dict) -> ShopLocationConfig:
    return ShopLocationConfig(
        shop_id=int(r["shop_id"]),
        shop_name=r["shop_name"],
        latitude=as_optional_float(r.get("latitude")),
        longitude=as_optional_float(r.get("longitude")),
        radius_meters=float(r.get("radius_meters") or 0) or 50,
        tag_id=r.get("tag_id"),
        tag_active=as_bool(r.get("tag_active")),
        tag_enabled=as_bool(r.get("tag_enabled")),
        code_enabled=as_bool(r.get("code_enabled")),
        require_gps=as_bool(r.get("require_gps")),
        owner_pin_hash=r.get("owner_pin_hash"),
    )


class MySQLShopRepository(ShopRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_location_config(self, shop_id: int) -> Optional[ShopLocationConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shops WHERE shop_id=%s", (int(shop_id),))
            r = fetchone(cur)
            return _row_to_shop(r) if r else None

    def update_owner_pin_hash(self, shop_id: int, owner_pin_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE shops SET owner_pin_hash=%s WHERE shop_id=%s", (owner_pin_hash, int(shop_id)))
            return cur.rowcount > 0
