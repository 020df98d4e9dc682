from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import FrozenSet, Optional

from ..core.enums import ApprovalStatus


@dataclass(frozen=True)
class RemoteApprovalRequest:
    """Governance record for a GPS clock-in made far from the shop.

    The clock-in has already happened when this exists; the request never
    gates it. Requests are decided once and never deleted.
    """

    request_id: int
    employee_id: int
    shop_id: int
    requested_at: datetime
    latitude: float
    longitude: float
    distance_from_shop: float
    status: ApprovalStatus
    clock_entry_id: Optional[int] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class StandingApproval:
    """Recurring exception: remote clock-ins on these weekdays skip review.

    ``days_of_week`` uses ``date.weekday()`` numbering (0 = Monday).
    """

    approval_id: int
    employee_id: int
    shop_id: int
    days_of_week: FrozenSet[int]
    start_date: date
    end_date: date
    is_active: bool = True
    notes: Optional[str] = None
    created_by: Optional[str] = None

    def covers(self, when: datetime) -> bool:
        if not self.is_active:
            return False
        if not (self.start_date <= when.date() <= self.end_date):
            return False
        return when.weekday() in self.days_of_week
