from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Channel


@dataclass(frozen=True)
class ClockEntry:
    """Domain entity: one attendance record (clock-in, later closed by a clock-out)."""

    clock_entry_id: int
    employee_id: int
    shop_id: int
    clock_in_time: datetime
    clock_in_channel: Channel
    clock_in_latitude: Optional[float] = None
    clock_in_longitude: Optional[float] = None
    clock_out_time: Optional[datetime] = None
    clock_out_channel: Optional[Channel] = None
    clock_out_latitude: Optional[float] = None
    clock_out_longitude: Optional[float] = None
    hours_worked: Optional[float] = None
    tag_id: Optional[str] = None
    clock_in_place: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None


@dataclass(frozen=True)
class ClockOutFields:
    """Values written exactly once when an open entry is closed."""

    clock_out_time: datetime
    channel: Channel
    latitude: Optional[float]
    longitude: Optional[float]
    hours_worked: float
    tag_id: Optional[str] = None
