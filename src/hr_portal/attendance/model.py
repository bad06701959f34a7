from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in session."""

    attendance_id: int
    user_id: int
    user_name: str
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    total_working_seconds: int
    status: AttendanceStatus
    is_wfh: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == AttendanceStatus.ACTIVE

    def closed(self, *, check_out_time: datetime, total_working_seconds: int, status: AttendanceStatus) -> "AttendanceRecord":
        return replace(
            self,
            check_out_time=check_out_time,
            total_working_seconds=int(total_working_seconds),
            status=status,
        )

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "date": self.work_date.isoformat(),
            "check_in": self.check_in_time.isoformat(timespec="seconds"),
            "check_out": self.check_out_time.isoformat(timespec="seconds") if self.check_out_time else None,
            "total_working_seconds": self.total_working_seconds,
            "status": self.status.value,
            "is_wfh": self.is_wfh,
        }
