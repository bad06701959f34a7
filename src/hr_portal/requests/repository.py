from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveType, RequestStatus
from .model import LeaveRequest, OvertimeRequest


class RequestRepository(Protocol):
    # Leave requests
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
        raise NotImplementedError

    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leave_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def decide_leave(self, *, request_id: int, status: RequestStatus, decided_by: int) -> bool:
        """Conditional on the request still being Pending; False otherwise."""

        raise NotImplementedError

    # Overtime requests
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
        raise NotImplementedError

    def get_overtime(self, *, request_id: int) -> Optional[OvertimeRequest]:
        raise NotImplementedError

    def list_overtime_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[OvertimeRequest]:
        raise NotImplementedError

    def decide_overtime(self, *, request_id: int, status: RequestStatus, decided_by: int) -> bool:
        raise NotImplementedError
