from __future__ import annotations

from ...attendance.model import ClockEntry
from ...common.datetime_utils import hours_between
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Stored hours_worked, recomputed when missing; open entries count 0."""

    def worked_hours(self, entry: ClockEntry) -> float:
        if not entry.clock_out_time:
            return 0.0
        if entry.hours_worked is not None:
            return max(float(entry.hours_worked), 0.0)
        return max(hours_between(entry.clock_in_time, entry.clock_out_time), 0.0)
