from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Channel
from .model import ClockEntry, ClockOutFields


class AttendanceRepository(Protocol):
    def get_by_id(self, clock_entry_id: int) -> Optional[ClockEntry]:
        raise NotImplementedError

    def get_open_entry(self, employee_id: int, shop_id: int) -> Optional[ClockEntry]:
        """Most recent entry of the employee at the shop with no clock-out."""

        raise NotImplementedError

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
        """Insert an open entry.

        Raises ``RaceConditionError`` if the employee already has an open entry.
        """

        raise NotImplementedError

    def close_entry(self, clock_entry_id: int, fields: ClockOutFields) -> bool:
        """Close the entry only if it is still open; False when already closed."""

        raise NotImplementedError

    def set_clock_in_place(self, clock_entry_id: int, place: str) -> bool:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[ClockEntry]:
        raise NotImplementedError

    def list_open_for_shop(self, shop_id: int) -> Sequence[ClockEntry]:
        raise NotImplementedError

    def list_for_shop_between(self, shop_id: int, *, start_date: date, end_date: date) -> Sequence[ClockEntry]:
        """Entries whose clock-in date falls in [start_date, end_date]."""

        raise NotImplementedError
