from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator


@dataclass(frozen=True)
class PayrollSummary:
    start: date
    end: date
    rows: list[dict]
    total_hours: float
    total_pay: float


class PayrollReportService:
    """Per-employee hours x hourly rate over a date range."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._calculator = calculator or StandardPayrollCalculator()

    def build_payroll_summary(self, shop_id: int, *, start: date, end: date) -> PayrollSummary:
        if end < start:
            raise ValidationError("End date must be after start date")

        employees = {e.employee_id: e for e in self._employees.list_for_shop(int(shop_id), active_only=False)}
        entries = self._attendance.list_for_shop_between(int(shop_id), start_date=start, end_date=end)

        summary_map: dict[int, dict] = {}
        for entry in entries:
            hours = self._calculator.worked_hours(entry)
            s = summary_map.get(entry.employee_id)
            if not s:
                emp = employees.get(entry.employee_id)
                s = {
                    "employee_id": entry.employee_id,
                    "full_name": emp.full_name if emp else "Staff",
                    "hourly_rate": float(emp.hourly_rate) if emp else 0.0,
                    "shifts": 0,
                    "total_hours": 0.0,
                }
                summary_map[entry.employee_id] = s
            if entry.clock_out_time:
                s["shifts"] += 1
            s["total_hours"] += hours

        rows = []
        for s in summary_map.values():
            total_hours = round(s["total_hours"], 2)
            rows.append({**s, "total_hours": total_hours, "total_pay": round(total_hours * s["hourly_rate"], 2)})

        rows.sort(key=lambda x: x["total_hours"], reverse=True)
        return PayrollSummary(
            start=start,
            end=end,
            rows=rows,
            total_hours=round(sum(r["total_hours"] for r in rows), 2),
            total_pay=round(sum(r["total_pay"] for r in rows), 2),
        )
