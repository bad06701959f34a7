from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.validators import require_non_empty
from ..core.enums import LeaveType, RequestKind, RequestStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.service import SessionUser
from .approval import ApprovalWorkflow
from .balance import LeaveBalanceCalculator
from .overtime_gate import OvertimeEligibilityGate
from .repository import RequestRepository

logger = logging.getLogger(__name__)


class RequestService:
    def __init__(
        self,
        requests: RequestRepository,
        *,
        balance_calculator: Optional[LeaveBalanceCalculator] = None,
        overtime_gate: Optional[OvertimeEligibilityGate] = None,
        approval: Optional[ApprovalWorkflow] = None,
    ):
        self._requests = requests
        self._balances = balance_calculator or LeaveBalanceCalculator()
        self._gate = overtime_gate or OvertimeEligibilityGate()
        self._approval = approval or ApprovalWorkflow(requests)

    @property
    def overtime_gate(self) -> OvertimeEligibilityGate:
        return self._gate

    @staticmethod
    def _parse_leave_type(value) -> LeaveType:
        try:
            return LeaveType(value)
        except ValueError:
            raise ValidationError("Leave type must be Sick, Casual or Annual")

    def create_leave(
        self,
        *,
        current_user: SessionUser,
        leave_type,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        if current_user.role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can request leave")

        leave_type = self._parse_leave_type(leave_type)
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        reason = require_non_empty(reason, "Reason")

        request_id = self._requests.create_leave(
            user_id=current_user.user_id,
            user_name=current_user.name,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        logger.info("leave request %s created by user %s", request_id, current_user.user_id)
        return request_id

    def create_overtime(
        self,
        *,
        current_user: SessionUser,
        project: str,
        hours,
        reason: str,
        today_total_seconds: int,
        today: date,
    ) -> int:
        if current_user.role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can request overtime")

        self._gate.ensure_can_request(today_total_seconds)
        hours = self._gate.validate_hours(hours)
        project = require_non_empty(project, "Project")
        reason = require_non_empty(reason, "Reason")

        request_id = self._requests.create_overtime(
            user_id=current_user.user_id,
            user_name=current_user.name,
            project=project,
            hours=hours,
            reason=reason,
            request_date=today,
        )
        logger.info("overtime request %s (%sh) created by user %s", request_id, hours, current_user.user_id)
        return request_id

    def decide(
        self,
        *,
        kind: RequestKind,
        request_id: int,
        outcome: RequestStatus,
        current_role: Role,
        decided_by: int,
    ) -> None:
        self._approval.decide(
            kind=kind,
            request_id=request_id,
            outcome=outcome,
            current_role=current_role,
            decided_by=decided_by,
        )

    def leave_balances(self, *, user_id: int) -> list[dict]:
        mine = self._requests.list_leave_requests(user_id=int(user_id), status=RequestStatus.APPROVED, limit=1000)
        return [b.to_dict() for b in self._balances.balances(mine).values()]

    def list_my_requests(self, *, user_id: int) -> dict:
        return {
            "leaves": [r.to_dict() for r in self._requests.list_leave_requests(user_id=int(user_id), limit=200)],
            "overtime": [r.to_dict() for r in self._requests.list_overtime_requests(user_id=int(user_id), limit=200)],
        }

    def list_admin_pending(self) -> dict:
        return {
            "leaves": [r.to_dict() for r in self._requests.list_leave_requests(status=RequestStatus.PENDING, limit=500)],
            "overtime": [
                r.to_dict() for r in self._requests.list_overtime_requests(status=RequestStatus.PENDING, limit=500)
            ],
        }
