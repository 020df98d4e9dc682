from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ApprovalStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import RemoteApprovalRequest, StandingApproval
from .repository import ApprovalRepository

_REQUEST_COLUMNS = """
    request_id, employee_id, shop_id, clock_entry_id, requested_at,
    request_latitude, request_longitude, distance_from_shop,
    status, reviewed_by, rejection_reason, reviewed_at
"""

_APPROVAL_COLUMNS = """
    approval_id, employee_id, shop_id, days_of_week, start_date, end_date,
    is_active, notes, created_by
"""


def _row_to_request(r: dict) -> RemoteApprovalRequest:
    return RemoteApprovalRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        shop_id=int(r["shop_id"]),
        clock_entry_id=int(r["clock_entry_id"]) if r.get("clock_entry_id") is not None else None,
        requested_at=r["requested_at"],
        latitude=float(r["request_latitude"]),
        longitude=float(r["request_longitude"]),
        distance_from_shop=float(r["distance_from_shop"]),
        status=ApprovalStatus(r["status"]),
        reviewed_by=r.get("reviewed_by"),
        rejection_reason=r.get("rejection_reason"),
        reviewed_at=r.get("reviewed_at"),
    )


def _parse_days(value: str) -> frozenset[int]:
    return frozenset(int(d) for d in (value or "").split(",") if d.strip())


def _row_to_approval(r: dict) -> StandingApproval:
    return StandingApproval(
        approval_id=int(r["approval_id"]),
        employee_id=int(r["employee_id"]),
        shop_id=int(r["shop_id"]),
        days_of_week=_parse_days(r.get("days_of_week")),
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_active=as_bool(r.get("is_active")),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
    )


class MySQLApprovalRepository(ApprovalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_request(
        self,
        *,
        employee_id: int,
        shop_id: int,
        clock_entry_id: Optional[int],
        requested_at: datetime,
        latitude: float,
        longitude: float,
        distance_from_shop: float,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clock_in_requests(
                    employee_id, shop_id, clock_entry_id, requested_at,
                    request_latitude, request_longitude, distance_from_shop, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(shop_id),
                    clock_entry_id,
                    requested_at,
                    latitude,
                    longitude,
                    distance_from_shop,
                    ApprovalStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_request(self, request_id: int) -> Optional[RemoteApprovalRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQUEST_COLUMNS} FROM clock_in_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        shop_id: int,
        status: Optional[ApprovalStatus] = None,
        limit: int = 200,
    ) -> Sequence[RemoteApprovalRequest]:
        clauses = ["shop_id=%s"]
        params: list[object] = [int(shop_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM clock_in_requests
                WHERE {" AND ".join(clauses)}
                ORDER BY requested_at DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def decide_request(
        self,
        *,
        request_id: int,
        status: ApprovalStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_in_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    reviewed_by,
                    reviewed_at,
                    rejection_reason,
                    int(request_id),
                    ApprovalStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def find_active_standing_approvals(
        self,
        *,
        employee_id: int,
        shop_id: int,
        weekday: int,
        on_date: date,
    ) -> Sequence[StandingApproval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_APPROVAL_COLUMNS}
                FROM remote_clock_in_approvals
                WHERE employee_id=%s AND shop_id=%s AND is_active=1
                  AND FIND_IN_SET(%s, days_of_week) > 0
                  AND start_date <= %s AND end_date >= %s
                """,
                (int(employee_id), int(shop_id), str(int(weekday)), on_date, on_date),
            )
            return [_row_to_approval(r) for r in fetchall(cur)]

    def insert_standing_approval(
        self,
        *,
        employee_id: int,
        shop_id: int,
        days_of_week: Iterable[int],
        start_date: date,
        end_date: date,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        days = ",".join(str(d) for d in sorted(set(days_of_week)))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO remote_clock_in_approvals(
                    employee_id, shop_id, days_of_week, start_date, end_date, notes, created_by, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (int(employee_id), int(shop_id), days, start_date, end_date, notes, created_by),
            )
            return int(cur.lastrowid)

    def get_standing_approval(self, approval_id: int) -> Optional[StandingApproval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_APPROVAL_COLUMNS} FROM remote_clock_in_approvals WHERE approval_id=%s",
                (int(approval_id),),
            )
            r = fetchone(cur)
            return _row_to_approval(r) if r else None

    def set_standing_approval_active(self, approval_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE remote_clock_in_approvals SET is_active=%s WHERE approval_id=%s",
                (1 if is_active else 0, int(approval_id)),
            )
            return cur.rowcount > 0

    def delete_standing_approval(self, approval_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM remote_clock_in_approvals WHERE approval_id=%s", (int(approval_id),))
            return cur.rowcount > 0

    def list_standing_approvals(self, *, shop_id: int) -> Sequence[StandingApproval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_APPROVAL_COLUMNS}
                FROM remote_clock_in_approvals
                WHERE shop_id=%s
                ORDER BY created_at DESC
                """,
                (int(shop_id),),
            )
            return [_row_to_approval(r) for r in fetchall(cur)]
