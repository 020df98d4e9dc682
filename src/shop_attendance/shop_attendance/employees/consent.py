from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import CONSENT_POLICY_VERSION
from ..core.enums import Channel, LocationConsent
from ..core.exceptions import ConsentDeniedError, ConsentRequiredError, NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class ConsentGate:
    """Guard clause run before any channel policy.

    DENIED blocks every clock action on every channel. An unanswered (or
    outdated) consent suspends actions on the shared premises channels until
    the employee answers the prompt; the personal-device GPS channel has no
    prompt and passes.
    """

    def __init__(self, employees: EmployeeRepository, *, policy_version: str = CONSENT_POLICY_VERSION):
        self._employees = employees
        self._policy_version = policy_version

    @property
    def policy_version(self) -> str:
        return self._policy_version

    def check(self, employee: Employee, channel: Channel) -> None:
        if employee.location_consent is LocationConsent.DENIED:
            raise ConsentDeniedError()
        if channel is not Channel.GPS and self.needs_prompt(employee):
            raise ConsentRequiredError(employee.employee_id)

    def needs_prompt(self, employee: Employee) -> bool:
        if employee.location_consent is LocationConsent.UNSET:
            return True
        # A granted consent is asked again once the policy text changes.
        return (
            employee.location_consent is LocationConsent.GRANTED
            and employee.consent_version is not None
            and employee.consent_version != self._policy_version
        )

    def record_consent(self, employee_id: int, *, granted: bool, now: Optional[datetime] = None) -> LocationConsent:
        now = now or now_local()
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")

        consent = LocationConsent.GRANTED if granted else LocationConsent.DENIED
        ok = self._employees.update_consent(
            employee.employee_id,
            consent=consent,
            given_at=now,
            policy_version=self._policy_version,
        )
        if not ok:
            raise ValidationError("Failed to save consent. Please try again.")

        logger.info("Employee %s set location consent to %s (policy %s)", employee_id, consent.value, self._policy_version)
        return consent
