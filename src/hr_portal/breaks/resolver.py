from __future__ import annotations

from datetime import datetime

from .model import BreakSchedule


def is_break_time(schedule: BreakSchedule, now: datetime) -> bool:
    """True when ``now`` falls inside the break window.

    Only the hour is compared: minutes inside the start or end hour are not
    distinguished, so a 15-16 window covers 15:00-15:59 and nothing of 16:xx.
    """

    return schedule.start_hour <= now.hour < schedule.end_hour
