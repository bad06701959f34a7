from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_BREAK_END_HOUR, DEFAULT_BREAK_START_HOUR


@dataclass(frozen=True)
class BreakSchedule:
    """Lunch-break window for one weekday (0 = Sunday); end_hour is exclusive."""

    day_of_week: int
    start_hour: int
    end_hour: int

    @classmethod
    def default_for(cls, day_of_week: int) -> "BreakSchedule":
        return cls(day_of_week=day_of_week, start_hour=DEFAULT_BREAK_START_HOUR, end_hour=DEFAULT_BREAK_END_HOUR)

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "start_hour": self.start_hour,
            "end_hour": self.end_hour,
            "label": f"{self.start_hour:02d}:00 - {self.end_hour:02d}:00",
        }
