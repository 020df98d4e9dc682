from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LocationConsent


@dataclass(frozen=True)
class Employee:
    """Domain entity: a staff member of one shop.

    Note: plain data object, no database access here.
    """

    employee_id: int
    shop_id: int
    first_name: str
    last_name: str
    pin: str
    is_active: bool = True
    location_consent: LocationConsent = LocationConsent.UNSET
    consent_given_at: Optional[datetime] = None
    consent_version: Optional[str] = None
    hourly_rate: float = 0.0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
