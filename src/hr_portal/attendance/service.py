from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List

from ..common.datetime_utils import format_duration
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .model import AttendanceRecord
from .repository import AttendanceRepository


@dataclass(frozen=True)
class DayGroup:
    work_date: date
    records: List[AttendanceRecord]

    @property
    def total_seconds(self) -> int:
        return sum(r.total_working_seconds for r in self.records)


@dataclass(frozen=True)
class AttendanceHistory:
    """Read-model for the attendance report screen."""

    days: List[DayGroup] = field(default_factory=list)

    @property
    def records(self) -> List[AttendanceRecord]:
        return [r for d in self.days for r in d.records]

    @property
    def total_seconds(self) -> int:
        return sum(d.total_seconds for d in self.days)

    @property
    def average_seconds(self) -> int:
        # average per record, not per day
        records = self.records
        return self.total_seconds // len(records) if records else 0

    @property
    def wfh_count(self) -> int:
        return sum(1 for r in self.records if r.is_wfh)

    def to_dict(self) -> dict:
        return {
            "total": format_duration(self.total_seconds),
            "total_seconds": self.total_seconds,
            "average": format_duration(self.average_seconds),
            "average_seconds": self.average_seconds,
            "wfh_count": self.wfh_count,
            "days": [
                {
                    "date": d.work_date.isoformat(),
                    "total": format_duration(d.total_seconds),
                    "total_seconds": d.total_seconds,
                    "records": [r.to_dict() for r in d.records],
                }
                for d in self.days
            ],
        }


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def today_total(self, user_id: int, today: date) -> int:
        """Sum of total_working_seconds over all of the user's records for the day."""
        return sum(r.total_working_seconds for r in self._attendance.list_for_user_and_date(int(user_id), today))

    def history(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> AttendanceHistory:
        rows = self._attendance.get_recent_for_user(int(user_id), int(limit))

        grouped: dict[date, list[AttendanceRecord]] = {}
        for r in rows:
            grouped.setdefault(r.work_date, []).append(r)

        days = [DayGroup(work_date=d, records=recs) for d, recs in grouped.items()]
        days.sort(key=lambda g: g.work_date, reverse=True)
        return AttendanceHistory(days=days)

    def live_attendance(self, today: date) -> List[dict]:
        """Who is checked in right now (admin command center)."""
        return [
            {
                "user_id": r.user_id,
                "user_name": r.user_name,
                "since": r.check_in_time.strftime("%H:%M:%S"),
                "location": "WFH" if r.is_wfh else "Office",
            }
            for r in self._attendance.list_active_for_date(today)
        ]
