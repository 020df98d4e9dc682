from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from .approvals.mysql_approval_repository import MySQLApprovalRepository
from .approvals.service import RemoteApprovalService
from .attendance.factory import AdmissionPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import ClockService
from .common.side_effects import BestEffortRunner
from .core.constants import CONSENT_POLICY_VERSION, GEOCODER_TIMEOUT_SECONDS, LOCATION_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.consent import ConsentGate
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .geo.geocoder import NOMINATIM_REVERSE_URL, NominatimGeocoder
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import SecurityNotifier
from .payroll.service import PayrollReportService
from .security.attempt_store import InMemoryPinAttemptStore, PinAttemptStore
from .security.guard import PinSecurityGuard
from .security.mysql_pin_attempt_store import MySQLPinAttemptStore
from .security.owner_pin_service import OwnerPinService
from .shops.mysql_shop_repository import MySQLShopRepository


@dataclass(frozen=True)
class Container:
    """Services the HTTP layer talks to.

    Controllers only use the service attributes, so tests can build a
    Container around in-memory repositories.
    """

    clock_service: ClockService
    approval_service: RemoteApprovalService
    consent_gate: ConsentGate
    owner_pin_service: OwnerPinService
    payroll_report_service: PayrollReportService
    notifier: SecurityNotifier
    conn: DatabaseConnection | None = None


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    shops_repo = MySQLShopRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    approvals_repo = MySQLApprovalRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    pin_store: PinAttemptStore
    if str(getattr(settings, "PIN_ATTEMPT_BACKEND", "memory")).lower() == "mysql":
        pin_store = MySQLPinAttemptStore(conn)
    else:
        pin_store = InMemoryPinAttemptStore()

    geocoder = NominatimGeocoder(
        url=getattr(settings, "GEOCODER_URL", NOMINATIM_REVERSE_URL),
        timeout_seconds=float(getattr(settings, "GEOCODER_TIMEOUT_SECONDS", GEOCODER_TIMEOUT_SECONDS)),
        user_agent=getattr(settings, "GEOCODER_USER_AGENT", "shop-attendance/1.0"),
    )
    side_effects = BestEffortRunner(ThreadPoolExecutor(max_workers=2, thread_name_prefix="side-effects"), retries=1)
    notifier = SecurityNotifier(notifications_repo, runner=side_effects, geocoder=geocoder)

    consent_gate = ConsentGate(employees_repo, policy_version=CONSENT_POLICY_VERSION)
    approval_service = RemoteApprovalService(approvals_repo, attendance_repo)
    clock_service = ClockService(
        attendance_repo,
        employees_repo,
        shops_repo,
        approval_service,
        consent_gate,
        policy_factory=AdmissionPolicyFactory(),
        geocoder=geocoder,
        notifier=notifier,
        side_effects=side_effects,
        location_timeout=float(getattr(settings, "LOCATION_TIMEOUT_SECONDS", LOCATION_TIMEOUT_SECONDS)),
    )
    owner_pin_service = OwnerPinService(shops_repo, PinSecurityGuard(pin_store), notifier=notifier)
    payroll_report_service = PayrollReportService(attendance_repo, employees_repo)

    return Container(
        clock_service=clock_service,
        approval_service=approval_service,
        consent_gate=consent_gate,
        owner_pin_service=owner_pin_service,
        payroll_report_service=payroll_report_service,
        notifier=notifier,
        conn=conn,
    )
