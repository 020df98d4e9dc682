from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..core.enums import Channel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_optional_float, db_cursor, fetchall, fetchone
from .model import ClockEntry, ClockOutFields
from .repository import AttendanceRepository

_COLUMNS = """
    clock_entry_id, employee_id, shop_id,
    clock_in_time, clock_in_method, clock_in_latitude, clock_in_longitude, clock_in_place,
    clock_out_time, clock_out_method, clock_out_latitude, clock_out_longitude,
    hours_worked, nfc_tag_id
"""


def _row_to_entry(r: dict) -> ClockEntry:
    out_method = r.get("clock_out_method")
    return ClockEntry(
        clock_entry_id=int(r["clock_entry_id"]),
        employee_id=int(r["employee_id"]),
        shop_id=int(r["shop_id"]),
        clock_in_time=r["clock_in_time"],
        clock_in_channel=Channel(r["clock_in_method"]),
        clock_in_latitude=as_optional_float(r.get("clock_in_latitude")),
        clock_in_longitude=as_optional_float(r.get("clock_in_longitude")),
        clock_out_time=r.get("clock_out_time"),
        clock_out_channel=Channel(out_method) if out_method else None,
        clock_out_latitude=as_optional_float(r.get("clock_out_latitude")),
        clock_out_longitude=as_optional_float(r.get("clock_out_longitude")),
        hours_worked=as_optional_float(r.get("hours_worked")),
        tag_id=r.get("nfc_tag_id"),
        clock_in_place=r.get("clock_in_place"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, clock_entry_id: int) -> Optional[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clock_entries WHERE clock_entry_id=%s", (int(clock_entry_id),))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def get_open_entry(self, employee_id: int, shop_id: int) -> Optional[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_entries
                WHERE employee_id=%s AND shop_id=%s AND clock_out_time IS NULL
                ORDER BY clock_in_time DESC
                LIMIT 1
                """,
                (int(employee_id), int(shop_id)),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def insert_entry(
        self,
        *,
        employee_id: int,
        shop_id: int,
        clock_in_time: datetime,
        channel: Channel,
        latitude: Optional[float],
        longitude: Optional[float],
        tag_id: Optional[str] = None,
    ) -> int:
        # uq_clock_entries_open turns a concurrent second clock-in into a duplicate-key error
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clock_entries(
                    employee_id, shop_id, clock_in_time, clock_in_method,
                    clock_in_latitude, clock_in_longitude,
                    clock_out_time, clock_out_method, clock_out_latitude, clock_out_longitude,
                    hours_worked, nfc_tag_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,NULL,NULL,NULL,NULL,NULL,%s)
                """,
                (int(employee_id), int(shop_id), clock_in_time, channel.value, latitude, longitude, tag_id),
            )
            return int(cur.lastrowid)

    def close_entry(self, clock_entry_id: int, fields: ClockOutFields) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_entries
                SET clock_out_time=%s, clock_out_method=%s, clock_out_latitude=%s,
                    clock_out_longitude=%s, hours_worked=%s,
                    nfc_tag_id=COALESCE(%s, nfc_tag_id)
                WHERE clock_entry_id=%s AND clock_out_time IS NULL
                """,
                (
                    fields.clock_out_time,
                    fields.channel.value,
                    fields.latitude,
                    fields.longitude,
                    fields.hours_worked,
                    fields.tag_id,
                    int(clock_entry_id),
                ),
            )
            return cur.rowcount > 0

    def set_clock_in_place(self, clock_entry_id: int, place: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE clock_entries SET clock_in_place=%s WHERE clock_entry_id=%s",
                (place[:255], int(clock_entry_id)),
            )
            return cur.rowcount > 0

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_entries
                WHERE employee_id=%s
                ORDER BY clock_in_time DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def list_open_for_shop(self, shop_id: int) -> Sequence[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_entries
                WHERE shop_id=%s AND clock_out_time IS NULL
                ORDER BY clock_in_time ASC
                """,
                (int(shop_id),),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def list_for_shop_between(self, shop_id: int, *, start_date: date, end_date: date) -> Sequence[ClockEntry]:
        start = datetime.combine(start_date, datetime.min.time())
        end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_entries
                WHERE shop_id=%s AND clock_in_time >= %s AND clock_in_time < %s
                ORDER BY employee_id ASC, clock_in_time ASC
                """,
                (int(shop_id), start, end),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]
