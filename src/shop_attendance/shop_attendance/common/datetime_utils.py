from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours rounded to two decimals."""
    return round((end - start).total_seconds() / 3600, 2)


def format_clock_time(value: datetime) -> str:
    return value.strftime("%H:%M")
