from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus
from .model import RemoteApprovalRequest, StandingApproval


class ApprovalRepository(Protocol):
    # Remote clock-in review requests
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
        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[RemoteApprovalRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        shop_id: int,
        status: Optional[ApprovalStatus] = None,
        limit: int = 200,
    ) -> Sequence[RemoteApprovalRequest]:
        raise NotImplementedError

    def decide_request(
        self,
        *,
        request_id: int,
        status: ApprovalStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Set the decision only while the request is still pending."""

        raise NotImplementedError

    # Standing approvals
    def find_active_standing_approvals(
        self,
        *,
        employee_id: int,
        shop_id: int,
        weekday: int,
        on_date: date,
    ) -> Sequence[StandingApproval]:
        raise NotImplementedError

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
        raise NotImplementedError

    def get_standing_approval(self, approval_id: int) -> Optional[StandingApproval]:
        raise NotImplementedError

    def set_standing_approval_active(self, approval_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_standing_approval(self, approval_id: int) -> bool:
        raise NotImplementedError

    def list_standing_approvals(self, *, shop_id: int) -> Sequence[StandingApproval]:
        raise NotImplementedError
