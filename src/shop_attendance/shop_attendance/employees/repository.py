from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LocationConsent
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_pin(self, shop_id: int, pin: str) -> Optional[Employee]:
        """Active employee of the shop with this staff PIN."""

        raise NotImplementedError

    def list_for_shop(self, shop_id: int, *, active_only: bool = True) -> Sequence[Employee]:
        raise NotImplementedError

    def update_consent(
        self,
        employee_id: int,
        *,
        consent: LocationConsent,
        given_at: datetime,
        policy_version: str,
    ) -> bool:
        raise NotImplementedError
