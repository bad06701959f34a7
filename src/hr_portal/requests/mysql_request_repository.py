from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest, OvertimeRequest
from .repository import RequestRepository

_LEAVE_COLUMNS = (
    "request_id, user_id, user_name, leave_type, start_date, end_date, reason, "
    "status, created_at, decided_by, decided_at"
)
_OVERTIME_COLUMNS = (
    "request_id, user_id, user_name, project, hours, reason, status, request_date, "
    "created_at, decided_by, decided_at"
)


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        user_name=r["user_name"],
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


def _to_overtime(r: dict) -> OvertimeRequest:
    return OvertimeRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        user_name=r["user_name"],
        project=r["project"],
        # DECIMAL comes back as decimal.Decimal
        hours=float(r["hours"]),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        request_date=r["request_date"],
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


def _filters(status: Optional[RequestStatus], user_id: Optional[int]) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []
    if status is not None:
        clauses.append("status=%s")
        params.append(status.value)
    if user_id is not None:
        clauses.append("user_id=%s")
        params.append(int(user_id))
    return " AND ".join(clauses), params


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Leave requests --------
    def create_leave(
        self,
        *,
        user_id: int,
        user_name: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(user_id, user_name, leave_type, start_date, end_date, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), user_name, leave_type.value, start_date, end_date, reason, RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leaves WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_leave_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        where, params = _filters(status, user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leaves
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide_leave(self, *, request_id: int, status: RequestStatus, decided_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, decided_by=%s, decided_at=NOW()
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    # -------- Overtime requests --------
    def create_overtime(
        self,
        *,
        user_id: int,
        user_name: str,
        project: str,
        hours: float,
        reason: str,
        request_date: date,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime(user_id, user_name, project, hours, reason, status, request_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), user_name, project, float(hours), reason, RequestStatus.PENDING.value, request_date),
            )
            return int(cur.lastrowid)

    def get_overtime(self, *, request_id: int) -> Optional[OvertimeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_OVERTIME_COLUMNS} FROM overtime WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_overtime(r) if r else None

    def list_overtime_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[OvertimeRequest]:
        where, params = _filters(status, user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_OVERTIME_COLUMNS}
                FROM overtime
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_overtime(r) for r in fetchall(cur)]

    def decide_overtime(self, *, request_id: int, status: RequestStatus, decided_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE overtime
                SET status=%s, decided_by=%s, decided_at=NOW()
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0
