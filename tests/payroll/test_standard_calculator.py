from datetime import datetime

from src.shop_attendance.shop_attendance.attendance.model import ClockEntry
from src.shop_attendance.shop_attendance.core.enums import Channel
from src.shop_attendance.shop_attendance.payroll.calculator.standard_calculator import StandardPayrollCalculator


def _entry(**kwargs):
    return ClockEntry(
        clock_entry_id=1,
        employee_id=1,
        shop_id=1,
        clock_in_time=datetime(2025, 1, 1, 8, 0),
        clock_in_channel=Channel.TERMINAL,
        **kwargs,
    )


def test_standard_calculator_uses_stored_hours():
    calc = StandardPayrollCalculator()
    row = _entry(clock_out_time=datetime(2025, 1, 1, 17, 0), hours_worked=8.5)

    assert calc.worked_hours(row) == 8.5


def test_standard_calculator_recomputes_missing_hours():
    calc = StandardPayrollCalculator()
    row = _entry(clock_out_time=datetime(2025, 1, 1, 12, 45))

    assert calc.worked_hours(row) == 4.75


def test_open_entry_counts_nothing():
    assert StandardPayrollCalculator().worked_hours(_entry()) == 0.0
