from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = (
    "attendance_id, user_id, user_name, work_date, check_in_time, check_out_time, "
    "total_working_seconds, status, is_wfh, created_at"
)


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        user_name=r["user_name"],
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        total_working_seconds=int(r.get("total_working_seconds") or 0),
        status=AttendanceStatus(r["status"]),
        is_wfh=bool(r.get("is_wfh")),
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s
                ORDER BY work_date DESC, check_in_time DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_user_and_date(self, user_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND work_date=%s
                ORDER BY check_in_time ASC
                """,
                (int(user_id), work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_active_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND work_date=%s AND status=%s
                """,
                (int(user_id), work_date, AttendanceStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_active_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE work_date=%s AND status=%s
                ORDER BY check_in_time ASC
                """,
                (work_date, AttendanceStatus.ACTIVE.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        user_id: int,
        user_name: str,
        work_date: date,
        check_in_time: datetime,
        is_wfh: bool,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, user_name, work_date, check_in_time, total_working_seconds, status, is_wfh)
                VALUES(%s,%s,%s,%s,0,%s,%s)
                """,
                (int(user_id), user_name, work_date, check_in_time, AttendanceStatus.ACTIVE.value, int(bool(is_wfh))),
            )
            return AttendanceRecord(
                attendance_id=int(cur.lastrowid),
                user_id=int(user_id),
                user_name=user_name,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=None,
                total_working_seconds=0,
                status=AttendanceStatus.ACTIVE,
                is_wfh=bool(is_wfh),
            )

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        total_working_seconds: int,
        status: AttendanceStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out_time=%s, total_working_seconds=%s, status=%s
                WHERE attendance_id=%s AND status=%s
                """,
                (check_out_time, int(total_working_seconds), status.value, int(attendance_id), AttendanceStatus.ACTIVE.value),
            )
            return cur.rowcount > 0
