from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import LocationConsent
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, shop_id, first_name, last_name, pin, is_active, hourly_rate,
    gps_location_consent, gps_consent_given_at, gps_consent_version
"""


def _row_to_employee(r: dict) -> Employee:
    raw_consent = r.get("gps_location_consent")
    return Employee(
        employee_id=int(r["employee_id"]),
        shop_id=int(r["shop_id"]),
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        pin=str(r["pin"]),
        is_active=as_bool(r.get("is_active")),
        location_consent=LocationConsent.from_flag(None if raw_consent is None else bool(int(raw_consent))),
        consent_given_at=r.get("gps_consent_given_at"),
        consent_version=r.get("gps_consent_version"),
        hourly_rate=float(r.get("hourly_rate") or 0),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def get_by_pin(self, shop_id: int, pin: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE shop_id=%s AND pin=%s AND is_active=1 LIMIT 1",
                (int(shop_id), pin),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def list_for_shop(self, shop_id: int, *, active_only: bool = True) -> Sequence[Employee]:
        sql = f"SELECT {_COLUMNS} FROM employees WHERE shop_id=%s"
        if active_only:
            sql += " AND is_active=1"
        sql += " ORDER BY first_name, last_name"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(shop_id),))
            return [_row_to_employee(r) for r in fetchall(cur)]

    def update_consent(
        self,
        employee_id: int,
        *,
        consent: LocationConsent,
        given_at: datetime,
        policy_version: str,
    ) -> bool:
        flag = consent.as_flag()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET gps_location_consent=%s, gps_consent_given_at=%s, gps_consent_version=%s
                WHERE employee_id=%s
                """,
                (None if flag is None else int(flag), given_at, policy_version, int(employee_id)),
            )
            return cur.rowcount > 0
