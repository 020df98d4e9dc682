from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import ClockEntry


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def worked_hours(self, entry: ClockEntry) -> float:
        raise NotImplementedError
