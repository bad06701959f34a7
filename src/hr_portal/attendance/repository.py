from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        """Most recent records first (by date, then check-in)."""

        raise NotImplementedError

    def list_for_user_and_date(self, user_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_active_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_active_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        user_name: str,
        work_date: date,
        check_in_time: datetime,
        is_wfh: bool,
    ) -> AttendanceRecord:
        """Insert an active record with zero seconds and return it."""

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        total_working_seconds: int,
        status: AttendanceStatus,
    ) -> bool:
        """Close an active record; False when it is not active anymore."""

        raise NotImplementedError
