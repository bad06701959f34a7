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


def day_of_week(moment: date) -> int:
    """Weekday index with Sunday as 0 (the convention stored in break_schedule)."""
    return (moment.weekday() + 1) % 7


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def format_duration(seconds: int) -> str:
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"
