from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..approvals.model import RemoteApprovalRequest
from ..approvals.service import RemoteApprovalService
from ..common.datetime_utils import format_clock_time, hours_between, now_local
from ..common.side_effects import BestEffortRunner
from ..core.constants import DEFAULT_HISTORY_LIMIT, LOCATION_TIMEOUT_SECONDS
from ..core.enums import AdmissionDecision, Channel, ClockAction
from ..core.exceptions import (
    AlreadyClockedInError,
    DomainError,
    ExternalServiceFailure,
    NotFoundError,
    PolicyViolation,
    RaceConditionError,
    ValidationError,
)
from ..employees.consent import ConsentGate
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..geo.distance import distance_meters, format_distance
from ..geo.geocoder import ReverseGeocoder, fallback_place_name
from ..geo.location import LocationProvider, acquire_location
from ..geo.model import Coordinates
from ..notifications.service import SecurityNotifier
from ..security.pin_policy import validate_staff_pin
from ..shops.model import ShopLocationConfig
from ..shops.repository import ShopRepository
from .factory import AdmissionPolicyFactory
from .model import ClockEntry, ClockOutFields
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

LOCATION_REQUIRED_MESSAGE = "Could not get your location. Please enable GPS and try again."
INVALID_TAG_MESSAGE = "Invalid or inactive NFC tag. Please contact your shop owner."
CODE_DISABLED_MESSAGE = "QR code clock-in is disabled for this shop. Please use another method."


@dataclass(frozen=True)
class ClockOptions:
    location_provider: Optional[LocationProvider] = None
    tag_id: Optional[str] = None
    require_gps: bool = False
    device_info: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class ClockResult:
    action: ClockAction
    message: str
    entry: ClockEntry
    approval_request: Optional[RemoteApprovalRequest] = None
    distance_meters: Optional[float] = None

    @property
    def needs_review(self) -> bool:
        return self.approval_request is not None


class ClockService:
    """Clock-in / clock-out toggle for one (employee, shop) pair.

    No open entry means the next action is a clock-in, an open entry means a
    clock-out. Consent is checked first, then the channel's admission
    strategy decides whether a clock-in is allowed, denied or recorded and
    flagged for review.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        shops: ShopRepository,
        approvals: RemoteApprovalService,
        consent: ConsentGate,
        *,
        policy_factory: AdmissionPolicyFactory | None = None,
        geocoder: ReverseGeocoder | None = None,
        notifier: SecurityNotifier | None = None,
        side_effects: BestEffortRunner | None = None,
        location_timeout: float = LOCATION_TIMEOUT_SECONDS,
    ):
        self._attendance = attendance
        self._employees = employees
        self._shops = shops
        self._approvals = approvals
        self._consent = consent
        self._factory = policy_factory or AdmissionPolicyFactory()
        self._geocoder = geocoder
        self._notifier = notifier
        self._side_effects = side_effects or BestEffortRunner()
        self._location_timeout = float(location_timeout)

    def _get_employee(self, employee_id: int, shop_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active or employee.shop_id != int(shop_id):
            raise NotFoundError("Employee not found")
        return employee

    def _get_shop(self, shop_id: int) -> ShopLocationConfig:
        shop = self._shops.get_location_config(int(shop_id))
        if not shop:
            raise NotFoundError("Shop not found")
        return shop

    @staticmethod
    def _check_channel(shop: ShopLocationConfig, channel: Channel, options: ClockOptions) -> None:
        if channel is Channel.TAG:
            tag = (options.tag_id or "").strip()
            if not tag or not shop.tag_enabled or not shop.tag_active or tag != shop.tag_id:
                raise ValidationError(INVALID_TAG_MESSAGE)
        elif channel is Channel.CODE and not shop.code_enabled:
            raise ValidationError(CODE_DISABLED_MESSAGE)

    def clock_toggle(
        self,
        employee_id: int,
        shop_id: int,
        channel: Channel | str,
        options: ClockOptions | None = None,
        *,
        now: datetime | None = None,
    ) -> ClockResult:
        now = now or now_local()
        channel = Channel(channel)
        options = options or ClockOptions()

        employee = self._get_employee(employee_id, shop_id)
        self._consent.check(employee, channel)

        shop = self._get_shop(shop_id)
        self._check_channel(shop, channel, options)

        open_entry = self._attendance.get_open_entry(employee.employee_id, shop.shop_id)
        if open_entry:
            return self._clock_out(employee, open_entry, channel, options, now=now)
        return self._clock_in(employee, shop, channel, options, now=now)

    def clock_toggle_by_pin(
        self,
        shop_id: int,
        pin: str,
        channel: Channel | str,
        options: ClockOptions | None = None,
        *,
        now: datetime | None = None,
    ) -> ClockResult:
        employee = self.resolve_employee_by_pin(shop_id, pin)
        return self.clock_toggle(employee.employee_id, shop_id, channel, options, now=now)

    def resolve_employee_by_pin(self, shop_id: int, pin: str) -> Employee:
        pin = validate_staff_pin(pin)
        employee = self._employees.get_by_pin(int(shop_id), pin)
        if not employee or not employee.is_active:
            raise NotFoundError("Invalid PIN. Please try again.")
        return employee

    def _clock_in(
        self,
        employee: Employee,
        shop: ShopLocationConfig,
        channel: Channel,
        options: ClockOptions,
        *,
        now: datetime,
    ) -> ClockResult:
        gps_required = channel is Channel.GPS or options.require_gps or shop.require_gps
        location = acquire_location(options.location_provider, timeout_seconds=self._location_timeout)
        if location is None and gps_required:
            raise ExternalServiceFailure(LOCATION_REQUIRED_MESSAGE)

        decision = AdmissionDecision.ALLOW
        distance: Optional[float] = None
        if location is not None and shop.has_location:
            distance = distance_meters(location.latitude, location.longitude, shop.latitude, shop.longitude)
            strategy = self._factory.for_channel(channel)
            decision = strategy.evaluate(distance=distance, consent=employee.location_consent, shop=shop)

            if decision is AdmissionDecision.DENY:
                self._notify_attempt(employee, shop, location, distance, options, blocked=True)
                logger.info(
                    "Clock-in denied for employee %s via %s: %.0fm from shop %s",
                    employee.employee_id,
                    channel.value,
                    distance,
                    shop.shop_id,
                )
                raise PolicyViolation(strategy.allowed_radius(shop), distance)

            if decision is AdmissionDecision.FLAG_FOR_REVIEW:
                standing = self._approvals.find_matching_standing_approval(employee.employee_id, shop.shop_id, now)
                if standing:
                    logger.info(
                        "Remote clock-in for employee %s covered by standing approval %s",
                        employee.employee_id,
                        standing.approval_id,
                    )
                    decision = AdmissionDecision.ALLOW

        try:
            entry_id = self._attendance.insert_entry(
                employee_id=employee.employee_id,
                shop_id=shop.shop_id,
                clock_in_time=now,
                channel=channel,
                latitude=location.latitude if location else None,
                longitude=location.longitude if location else None,
                tag_id=options.tag_id if channel is Channel.TAG else None,
            )
        except RaceConditionError as e:
            raise AlreadyClockedInError() from e

        entry = ClockEntry(
            clock_entry_id=entry_id,
            employee_id=employee.employee_id,
            shop_id=shop.shop_id,
            clock_in_time=now,
            clock_in_channel=channel,
            clock_in_latitude=location.latitude if location else None,
            clock_in_longitude=location.longitude if location else None,
            tag_id=options.tag_id if channel is Channel.TAG else None,
        )
        logger.info("Employee %s clocked in at shop %s via %s", employee.employee_id, shop.shop_id, channel.value)

        if location is not None:
            self._side_effects.submit(
                self._record_place,
                entry_id,
                location.latitude,
                location.longitude,
                description=f"place name for clock entry {entry_id}",
            )

        if decision is not AdmissionDecision.FLAG_FOR_REVIEW:
            return ClockResult(
                action=ClockAction.CLOCK_IN,
                message=f"{employee.first_name} clocked in at {format_clock_time(now)}",
                entry=entry,
                distance_meters=distance,
            )

        request = None
        try:
            request = self._approvals.create_request(
                employee_id=employee.employee_id,
                shop_id=shop.shop_id,
                coordinates=location,
                distance_meters=distance,
                clock_entry_id=entry_id,
                now=now,
            )
        except DomainError:
            # the clock-in stands; the owner still gets the notification below
            logger.exception("Could not create review request for clock entry %s", entry_id)

        self._notify_attempt(employee, shop, location, distance, options, blocked=False)
        return ClockResult(
            action=ClockAction.CLOCK_IN,
            message=(
                f"You are {format_distance(distance)} from the shop. "
                "Approval request sent to store manager. Please contact store if approval is delayed."
            ),
            entry=entry,
            approval_request=request,
            distance_meters=distance,
        )

    def _clock_out(
        self,
        employee: Employee,
        entry: ClockEntry,
        channel: Channel,
        options: ClockOptions,
        *,
        now: datetime,
    ) -> ClockResult:
        location = acquire_location(options.location_provider, timeout_seconds=self._location_timeout)
        hours = hours_between(entry.clock_in_time, now)

        fields = ClockOutFields(
            clock_out_time=now,
            channel=channel,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
            hours_worked=hours,
            tag_id=options.tag_id if channel is Channel.TAG else None,
        )
        if not self._attendance.close_entry(entry.clock_entry_id, fields):
            raise RaceConditionError("You have already clocked out. Please refresh and try again.")

        logger.info("Employee %s clocked out of entry %s (%.2fh)", employee.employee_id, entry.clock_entry_id, hours)
        closed = ClockEntry(
            clock_entry_id=entry.clock_entry_id,
            employee_id=entry.employee_id,
            shop_id=entry.shop_id,
            clock_in_time=entry.clock_in_time,
            clock_in_channel=entry.clock_in_channel,
            clock_in_latitude=entry.clock_in_latitude,
            clock_in_longitude=entry.clock_in_longitude,
            clock_out_time=now,
            clock_out_channel=channel,
            clock_out_latitude=fields.latitude,
            clock_out_longitude=fields.longitude,
            hours_worked=hours,
            tag_id=fields.tag_id or entry.tag_id,
            clock_in_place=entry.clock_in_place,
        )
        return ClockResult(
            action=ClockAction.CLOCK_OUT,
            message=f"{employee.first_name} clocked out. Worked {hours:.1f}h today.",
            entry=closed,
        )

    def _record_place(self, clock_entry_id: int, latitude: float, longitude: float) -> None:
        if self._geocoder is not None:
            place = self._geocoder.place_name(latitude, longitude)
        else:
            place = fallback_place_name(latitude, longitude)
        self._attendance.set_clock_in_place(clock_entry_id, place)

    def _notify_attempt(
        self,
        employee: Employee,
        shop: ShopLocationConfig,
        location: Coordinates,
        distance: float,
        options: ClockOptions,
        *,
        blocked: bool,
    ) -> None:
        if self._notifier is None:
            return
        self._notifier.clock_in_attempt(
            shop_id=shop.shop_id,
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            latitude=location.latitude,
            longitude=location.longitude,
            distance_meters=distance,
            blocked=blocked,
            device_info=options.device_info,
            ip_address=options.ip_address,
        )

    # ===== Read side =====

    def get_clock_status(self, employee_id: int, shop_id: int) -> Optional[ClockEntry]:
        return self._attendance.get_open_entry(int(employee_id), int(shop_id))

    def list_history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[ClockEntry]:
        return self._attendance.get_recent_for_employee(int(employee_id), int(limit))

    def get_history_ui(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        return [self._to_ui(e) for e in self.list_history(employee_id, limit=limit)]

    def list_currently_working(self, shop_id: int, *, now: datetime | None = None) -> list[dict]:
        now = now or now_local()
        names = {e.employee_id: e.full_name for e in self._employees.list_for_shop(int(shop_id), active_only=False)}
        rows = []
        for entry in self._attendance.list_open_for_shop(int(shop_id)):
            rows.append(
                {
                    "employee_id": entry.employee_id,
                    "name": names.get(entry.employee_id, "Staff"),
                    "clock_in": format_clock_time(entry.clock_in_time),
                    "method": entry.clock_in_channel.value,
                    "hours_so_far": hours_between(entry.clock_in_time, now),
                }
            )
        return rows

    def _to_ui(self, e: ClockEntry) -> dict:
        return {
            "clock_entry_id": e.clock_entry_id,
            "date": e.clock_in_time.strftime("%Y-%m-%d"),
            "clock_in": e.clock_in_time.strftime("%H:%M:%S"),
            "clock_out": e.clock_out_time.strftime("%H:%M:%S") if e.clock_out_time else "-",
            "method": e.clock_in_channel.value,
            "hours_worked": e.hours_worked,
            "place": e.clock_in_place or "",
        }
