from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..attendance.model import ClockEntry, ClockOutFields
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import hours_between, now_local
from ..core.enums import ApprovalStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..geo.model import Coordinates
from .model import RemoteApprovalRequest, StandingApproval
from .repository import ApprovalRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RejectionOutcome:
    request: RemoteApprovalRequest
    closed_entry: Optional[ClockEntry]


class RemoteApprovalService:
    """Review queue for GPS clock-ins made away from the shop.

    The clock-in is recorded before a request exists, so approving only marks
    the request. Rejecting force-closes the entry the request was raised for,
    if it is still open, and then marks the request.
    """

    def __init__(self, approvals: ApprovalRepository, attendance: AttendanceRepository):
        self._approvals = approvals
        self._attendance = attendance

    def create_request(
        self,
        *,
        employee_id: int,
        shop_id: int,
        coordinates: Coordinates,
        distance_meters: float,
        clock_entry_id: Optional[int],
        now: datetime | None = None,
    ) -> RemoteApprovalRequest:
        now = now or now_local()
        request_id = self._approvals.insert_request(
            employee_id=int(employee_id),
            shop_id=int(shop_id),
            clock_entry_id=clock_entry_id,
            requested_at=now,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            distance_from_shop=round(float(distance_meters), 2),
        )
        logger.info(
            "Remote clock-in review request %s created for employee %s at shop %s (%.0fm away)",
            request_id,
            employee_id,
            shop_id,
            distance_meters,
        )
        return RemoteApprovalRequest(
            request_id=request_id,
            employee_id=int(employee_id),
            shop_id=int(shop_id),
            requested_at=now,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            distance_from_shop=round(float(distance_meters), 2),
            status=ApprovalStatus.PENDING,
            clock_entry_id=clock_entry_id,
        )

    def find_matching_standing_approval(
        self, employee_id: int, shop_id: int, at: datetime
    ) -> Optional[StandingApproval]:
        candidates = self._approvals.find_active_standing_approvals(
            employee_id=int(employee_id),
            shop_id=int(shop_id),
            weekday=at.weekday(),
            on_date=at.date(),
        )
        for approval in candidates:
            if approval.covers(at):
                return approval
        return None

    def _get_pending(self, request_id: int, shop_id: int) -> RemoteApprovalRequest:
        req = self._approvals.get_request(int(request_id))
        if not req or req.shop_id != int(shop_id):
            raise NotFoundError("Approval request not found")
        if req.status is not ApprovalStatus.PENDING:
            raise ValidationError("This request has already been reviewed")
        return req

    def approve(
        self, request_id: int, *, shop_id: int, reviewer: str, now: datetime | None = None
    ) -> RemoteApprovalRequest:
        now = now or now_local()
        req = self._get_pending(request_id, shop_id)

        decided = self._approvals.decide_request(
            request_id=req.request_id,
            status=ApprovalStatus.APPROVED,
            reviewed_by=reviewer,
            reviewed_at=now,
        )
        if not decided:
            raise ValidationError("This request has already been reviewed")

        logger.info("Remote clock-in request %s approved by %s", req.request_id, reviewer)
        return RemoteApprovalRequest(
            request_id=req.request_id,
            employee_id=req.employee_id,
            shop_id=req.shop_id,
            requested_at=req.requested_at,
            latitude=req.latitude,
            longitude=req.longitude,
            distance_from_shop=req.distance_from_shop,
            status=ApprovalStatus.APPROVED,
            clock_entry_id=req.clock_entry_id,
            reviewed_by=reviewer,
            reviewed_at=now,
        )

    def reject(
        self,
        request_id: int,
        *,
        shop_id: int,
        reviewer: str,
        reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> RejectionOutcome:
        now = now or now_local()
        req = self._get_pending(request_id, shop_id)
        reason = (reason or "").strip() or None

        # A failed close must leave the request pending.
        closed = self._force_clock_out(req, now=now)

        decided = self._approvals.decide_request(
            request_id=req.request_id,
            status=ApprovalStatus.REJECTED,
            reviewed_by=reviewer,
            reviewed_at=now,
            rejection_reason=reason,
        )
        if not decided:
            raise ValidationError("This request has already been reviewed")

        logger.info(
            "Remote clock-in request %s rejected by %s (entry closed: %s)",
            req.request_id,
            reviewer,
            closed.clock_entry_id if closed else None,
        )

        decided_req = RemoteApprovalRequest(
            request_id=req.request_id,
            employee_id=req.employee_id,
            shop_id=req.shop_id,
            requested_at=req.requested_at,
            latitude=req.latitude,
            longitude=req.longitude,
            distance_from_shop=req.distance_from_shop,
            status=ApprovalStatus.REJECTED,
            clock_entry_id=req.clock_entry_id,
            reviewed_by=reviewer,
            rejection_reason=reason,
            reviewed_at=now,
        )
        return RejectionOutcome(request=decided_req, closed_entry=closed)

    def _force_clock_out(self, req: RemoteApprovalRequest, *, now: datetime) -> Optional[ClockEntry]:
        if req.clock_entry_id is not None:
            entry = self._attendance.get_by_id(req.clock_entry_id)
        else:
            entry = self._attendance.get_open_entry(req.employee_id, req.shop_id)
        if not entry or not entry.is_open:
            # already clocked out on their own
            return None

        fields = ClockOutFields(
            clock_out_time=now,
            channel=entry.clock_in_channel,
            latitude=None,
            longitude=None,
            hours_worked=hours_between(entry.clock_in_time, now),
        )
        if not self._attendance.close_entry(entry.clock_entry_id, fields):
            logger.warning(
                "Entry %s was closed concurrently while rejecting request %s",
                entry.clock_entry_id,
                req.request_id,
            )
            return None

        return ClockEntry(
            clock_entry_id=entry.clock_entry_id,
            employee_id=entry.employee_id,
            shop_id=entry.shop_id,
            clock_in_time=entry.clock_in_time,
            clock_in_channel=entry.clock_in_channel,
            clock_in_latitude=entry.clock_in_latitude,
            clock_in_longitude=entry.clock_in_longitude,
            clock_out_time=now,
            clock_out_channel=fields.channel,
            hours_worked=fields.hours_worked,
            tag_id=entry.tag_id,
            clock_in_place=entry.clock_in_place,
        )

    def list_requests(
        self, *, shop_id: int, status: Optional[ApprovalStatus] = None, limit: int = 200
    ) -> Sequence[RemoteApprovalRequest]:
        return self._approvals.list_requests(shop_id=int(shop_id), status=status, limit=limit)

    def pending_count(self, shop_id: int) -> int:
        return len(self._approvals.list_requests(shop_id=int(shop_id), status=ApprovalStatus.PENDING, limit=1000))

    # ===== Standing approvals =====

    def create_standing_approval(
        self,
        *,
        employee_id: int,
        shop_id: int,
        days_of_week: Iterable[int],
        start_date: Optional[date],
        end_date: Optional[date],
        notes: str = "",
        created_by: Optional[str] = None,
    ) -> int:
        days = {int(d) for d in (days_of_week or [])}
        if not days:
            raise ValidationError("Please select at least one day of the week")
        if any(d < 0 or d > 6 for d in days):
            raise ValidationError("Days of the week must be between 0 (Monday) and 6 (Sunday)")
        if not start_date or not end_date:
            raise ValidationError("Start date and end date are required")
        if end_date < start_date:
            raise ValidationError("End date must be after start date")

        approval_id = self._approvals.insert_standing_approval(
            employee_id=int(employee_id),
            shop_id=int(shop_id),
            days_of_week=sorted(days),
            start_date=start_date,
            end_date=end_date,
            notes=(notes or "").strip() or None,
            created_by=created_by,
        )
        logger.info("Standing approval %s created for employee %s at shop %s", approval_id, employee_id, shop_id)
        return approval_id

    def _get_standing(self, approval_id: int, shop_id: int) -> StandingApproval:
        approval = self._approvals.get_standing_approval(int(approval_id))
        if not approval or approval.shop_id != int(shop_id):
            raise NotFoundError("Standing approval not found")
        return approval

    def set_standing_approval_active(self, approval_id: int, *, shop_id: int, is_active: bool) -> None:
        self._get_standing(approval_id, shop_id)
        if not self._approvals.set_standing_approval_active(int(approval_id), is_active=is_active):
            raise ValidationError("Failed to update approval")

    def delete_standing_approval(self, approval_id: int, *, shop_id: int) -> None:
        self._get_standing(approval_id, shop_id)
        if not self._approvals.delete_standing_approval(int(approval_id)):
            raise ValidationError("Failed to delete approval")

    def list_standing_approvals(self, *, shop_id: int) -> Sequence[StandingApproval]:
        return self._approvals.list_standing_approvals(shop_id=int(shop_id))
