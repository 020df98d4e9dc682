from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.shop_attendance.shop_attendance.approvals.model import RemoteApprovalRequest, StandingApproval
from src.shop_attendance.shop_attendance.approvals.service import RemoteApprovalService
from src.shop_attendance.shop_attendance.attendance.model import ClockEntry, ClockOutFields
from src.shop_attendance.shop_attendance.attendance.service import ClockService
from src.shop_attendance.shop_attendance.core.enums import ApprovalStatus, LocationConsent
from src.shop_attendance.shop_attendance.core.exceptions import RaceConditionError, StoreUnavailableError
from src.shop_attendance.shop_attendance.employees.consent import ConsentGate
from src.shop_attendance.shop_attendance.employees.model import Employee
from src.shop_attendance.shop_attendance.geo.model import Coordinates
from src.shop_attendance.shop_attendance.notifications.service import SecurityNotifier
from src.shop_attendance.shop_attendance.shops.model import ShopLocationConfig

SHOP_LAT = 53.4084
SHOP_LON = -2.9916
# meters per degree of latitude on the haversine sphere
METERS_PER_DEGREE = 111_194.93


class InMemoryShops:
    def __init__(self, *shops: ShopLocationConfig):
        self.shops = {s.shop_id: s for s in shops}

    def get_location_config(self, shop_id: int) -> Optional[ShopLocationConfig]:
        return self.shops.get(shop_id)

    def update_owner_pin_hash(self, shop_id: int, owner_pin_hash: str) -> bool:
        if shop_id not in self.shops:
            return False
        self.shops[shop_id] = replace(self.shops[shop_id], owner_pin_hash=owner_pin_hash)
        return True


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.employees = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def get_by_pin(self, shop_id: int, pin: str) -> Optional[Employee]:
        for e in self.employees.values():
            if e.shop_id == shop_id and e.pin == pin and e.is_active:
                return e
        return None

    def list_for_shop(self, shop_id: int, *, active_only: bool = True):
        return [e for e in self.employees.values() if e.shop_id == shop_id and (e.is_active or not active_only)]

    def update_consent(self, employee_id, *, consent, given_at, policy_version) -> bool:
        e = self.employees.get(employee_id)
        if not e:
            return False
        self.employees[employee_id] = replace(
            e, location_consent=consent, consent_given_at=given_at, consent_version=policy_version
        )
        return True


class InMemoryAttendance:
    """Mirrors the storage rules: one open entry per employee, conditional close."""

    def __init__(self):
        self.entries: dict[int, ClockEntry] = {}
        self._next_id = 1
        self.stale_reads = False
        self.lose_close_race = False

    def get_by_id(self, clock_entry_id: int) -> Optional[ClockEntry]:
        return self.entries.get(clock_entry_id)

    def get_open_entry(self, employee_id: int, shop_id: int) -> Optional[ClockEntry]:
        if self.stale_reads:
            return None
        for e in sorted(self.entries.values(), key=lambda x: x.clock_in_time, reverse=True):
            if e.employee_id == employee_id and e.shop_id == shop_id and e.is_open:
                return e
        return None

    def insert_entry(self, *, employee_id, shop_id, clock_in_time, channel, latitude, longitude, tag_id=None) -> int:
        if any(e.employee_id == employee_id and e.is_open for e in self.entries.values()):
            raise RaceConditionError("A conflicting record already exists.")
        entry_id = self._next_id
        self._next_id += 1
        self.entries[entry_id] = ClockEntry(
            clock_entry_id=entry_id,
            employee_id=employee_id,
            shop_id=shop_id,
            clock_in_time=clock_in_time,
            clock_in_channel=channel,
            clock_in_latitude=latitude,
            clock_in_longitude=longitude,
            tag_id=tag_id,
        )
        return entry_id

    def close_entry(self, clock_entry_id: int, fields: ClockOutFields) -> bool:
        e = self.entries.get(clock_entry_id)
        if not e or not e.is_open or self.lose_close_race:
            return False
        self.entries[clock_entry_id] = replace(
            e,
            clock_out_time=fields.clock_out_time,
            clock_out_channel=fields.channel,
            clock_out_latitude=fields.latitude,
            clock_out_longitude=fields.longitude,
            hours_worked=fields.hours_worked,
            tag_id=fields.tag_id or e.tag_id,
        )
        return True

    def set_clock_in_place(self, clock_entry_id: int, place: str) -> bool:
        e = self.entries.get(clock_entry_id)
        if not e:
            return False
        self.entries[clock_entry_id] = replace(e, clock_in_place=place)
        return True

    def get_recent_for_employee(self, employee_id: int, limit: int):
        items = [e for e in self.entries.values() if e.employee_id == employee_id]
        items.sort(key=lambda e: e.clock_in_time, reverse=True)
        return items[:limit]

    def list_open_for_shop(self, shop_id: int):
        return [e for e in self.entries.values() if e.shop_id == shop_id and e.is_open]

    def list_for_shop_between(self, shop_id: int, *, start_date: date, end_date: date):
        return [
            e
            for e in self.entries.values()
            if e.shop_id == shop_id and start_date <= e.clock_in_time.date() <= end_date
        ]


class InMemoryApprovals:
    def __init__(self):
        self.requests: dict[int, RemoteApprovalRequest] = {}
        self.standing: dict[int, StandingApproval] = {}
        self._next_id = 1
        self.fail_inserts = False

    def _id(self) -> int:
        v = self._next_id
        self._next_id += 1
        return v

    def insert_request(self, *, employee_id, shop_id, clock_entry_id, requested_at, latitude, longitude, distance_from_shop):
        if self.fail_inserts:
            raise StoreUnavailableError("The attendance store is unavailable. Please try again.")
        rid = self._id()
        self.requests[rid] = RemoteApprovalRequest(
            request_id=rid,
            employee_id=employee_id,
            shop_id=shop_id,
            requested_at=requested_at,
            latitude=latitude,
            longitude=longitude,
            distance_from_shop=distance_from_shop,
            status=ApprovalStatus.PENDING,
            clock_entry_id=clock_entry_id,
        )
        return rid

    def get_request(self, request_id):
        return self.requests.get(request_id)

    def list_requests(self, *, shop_id, status=None, limit=200):
        rows = [r for r in self.requests.values() if r.shop_id == shop_id and (status is None or r.status == status)]
        return rows[:limit]

    def decide_request(self, *, request_id, status, reviewed_by, reviewed_at, rejection_reason=None) -> bool:
        r = self.requests.get(request_id)
        if not r or r.status != ApprovalStatus.PENDING:
            return False
        self.requests[request_id] = replace(
            r, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, rejection_reason=rejection_reason
        )
        return True

    def find_active_standing_approvals(self, *, employee_id, shop_id, weekday, on_date):
        # coarse filter only; the service narrows by weekday and date range
        return [
            a for a in self.standing.values() if a.employee_id == employee_id and a.shop_id == shop_id and a.is_active
        ]

    def insert_standing_approval(self, *, employee_id, shop_id, days_of_week, start_date, end_date, notes=None, created_by=None):
        aid = self._id()
        self.standing[aid] = StandingApproval(
            approval_id=aid,
            employee_id=employee_id,
            shop_id=shop_id,
            days_of_week=frozenset(days_of_week),
            start_date=start_date,
            end_date=end_date,
            notes=notes,
            created_by=created_by,
        )
        return aid

    def get_standing_approval(self, approval_id):
        return self.standing.get(approval_id)

    def set_standing_approval_active(self, approval_id, *, is_active) -> bool:
        a = self.standing.get(approval_id)
        if not a:
            return False
        self.standing[approval_id] = replace(a, is_active=is_active)
        return True

    def delete_standing_approval(self, approval_id) -> bool:
        return self.standing.pop(approval_id, None) is not None

    def list_standing_approvals(self, *, shop_id):
        return [a for a in self.standing.values() if a.shop_id == shop_id]


class InMemoryNotifications:
    def __init__(self):
        self.rows = []

    def insert(self, notification) -> int:
        self.rows.append(replace(notification, notification_id=len(self.rows) + 1))
        return len(self.rows)

    def list_for_shop(self, shop_id, *, unread_only=False, limit=50):
        rows = [n for n in self.rows if n.shop_id == shop_id and (not unread_only or not n.is_read)]
        return list(reversed(rows))[:limit]

    def mark_read(self, shop_id, notification_id) -> bool:
        for i, n in enumerate(self.rows):
            if n.shop_id == shop_id and n.notification_id == notification_id:
                self.rows[i] = replace(n, is_read=True)
                return True
        return False


class StaticGeocoder:
    def __init__(self, name: str = "Bold Street, Liverpool"):
        self.name = name
        self.calls = 0

    def place_name(self, latitude: float, longitude: float) -> str:
        self.calls += 1
        return self.name


class FixedLocation:
    def __init__(self, coords: Optional[Coordinates]):
        self.coords = coords

    def current_position(self) -> Optional[Coordinates]:
        return self.coords


def point_north_of_shop(meters: float) -> Coordinates:
    return Coordinates(SHOP_LAT + meters / METERS_PER_DEGREE, SHOP_LON, accuracy=10.0)


@pytest.fixture
def fixed_now() -> datetime:
    # a Wednesday
    return datetime(2026, 3, 4, 9, 0, 0)


@pytest.fixture
def shop() -> ShopLocationConfig:
    return ShopLocationConfig(
        shop_id=1,
        shop_name="Corner Shop",
        latitude=SHOP_LAT,
        longitude=SHOP_LON,
        radius_meters=50,
        tag_id="TAG-0001",
        tag_active=True,
        owner_pin_hash=generate_password_hash("482915"),
    )


@pytest.fixture
def staff():
    granted = dict(location_consent=LocationConsent.GRANTED, consent_version="1.0")
    return [
        Employee(employee_id=1, shop_id=1, first_name="Alex", last_name="Morgan", pin="1234", hourly_rate=12.0, **granted),
        Employee(employee_id=2, shop_id=1, first_name="Sam", last_name="Taylor", pin="5678"),
        Employee(
            employee_id=3,
            shop_id=1,
            first_name="Jo",
            last_name="Reid",
            pin="9999",
            location_consent=LocationConsent.DENIED,
            consent_version="1.0",
        ),
        Employee(employee_id=4, shop_id=1, first_name="Kim", last_name="Lee", pin="4321", hourly_rate=10.0, **granted),
    ]


@pytest.fixture
def env(shop, staff):
    """Clock service wired to in-memory stores; side effects run inline."""

    shops = InMemoryShops(shop)
    employees = InMemoryEmployees(*staff)
    attendance = InMemoryAttendance()
    approvals = InMemoryApprovals()
    notifications = InMemoryNotifications()
    geocoder = StaticGeocoder()

    notifier = SecurityNotifier(notifications, geocoder=geocoder)
    consent = ConsentGate(employees)
    approval_service = RemoteApprovalService(approvals, attendance)
    clock = ClockService(
        attendance,
        employees,
        shops,
        approval_service,
        consent,
        geocoder=geocoder,
        notifier=notifier,
        location_timeout=1,
    )
    return SimpleNamespace(
        shops=shops,
        employees=employees,
        attendance=attendance,
        approvals=approvals,
        notifications=notifications,
        geocoder=geocoder,
        notifier=notifier,
        consent=consent,
        approval_service=approval_service,
        clock=clock,
    )


@pytest.fixture
def at_distance():
    """Location provider reporting a point the given meters north of the shop."""

    def _make(meters: float) -> FixedLocation:
        return FixedLocation(point_north_of_shop(meters))

    return _make


@pytest.fixture
def no_location() -> FixedLocation:
    return FixedLocation(None)
