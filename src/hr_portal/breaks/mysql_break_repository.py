from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BreakSchedule
from .repository import BreakScheduleRepository


def _to_schedule(row: dict) -> BreakSchedule:
    return BreakSchedule(
        day_of_week=int(row["day_of_week"]),
        start_hour=int(row["start_hour"]),
        end_hour=int(row["end_hour"]),
    )


class MySQLBreakScheduleRepository(BreakScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_day(self, day_of_week: int) -> Optional[BreakSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT day_of_week, start_hour, end_hour FROM break_schedule WHERE day_of_week=%s",
                (int(day_of_week),),
            )
            row = fetchone(cur)
            return _to_schedule(row) if row else None

    def list_all(self) -> Sequence[BreakSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT day_of_week, start_hour, end_hour FROM break_schedule ORDER BY day_of_week")
            return [_to_schedule(r) for r in fetchall(cur)]

    def upsert(self, *, day_of_week: int, start_hour: int, end_hour: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO break_schedule(day_of_week, start_hour, end_hour)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE start_hour=VALUES(start_hour), end_hour=VALUES(end_hour)
                """,
                (int(day_of_week), int(start_hour), int(end_hour)),
            )
