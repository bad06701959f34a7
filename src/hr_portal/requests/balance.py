from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

from ..core.constants import LEAVE_ENTITLEMENTS
from ..core.enums import LeaveType, RequestStatus
from .model import LeaveRequest


@dataclass(frozen=True)
class LeaveBalance:
    leave_type: LeaveType
    entitlement: int
    used: int

    @property
    def remaining(self) -> int:
        # signed on purpose: over-approval shows up as a negative balance
        return self.entitlement - self.used

    def to_dict(self) -> dict:
        return {
            "type": self.leave_type.value,
            "entitlement": self.entitlement,
            "used": self.used,
            "remaining": self.remaining,
        }


class LeaveBalanceCalculator:
    """Remaining leave days per type, derived from Approved requests only."""

    def __init__(self, entitlements: Mapping[LeaveType, int] = LEAVE_ENTITLEMENTS):
        self._entitlements = dict(entitlements)

    def used_days(self, requests: Iterable[LeaveRequest], leave_type: LeaveType) -> int:
        return sum(
            r.days
            for r in requests
            if r.leave_type == leave_type and r.status == RequestStatus.APPROVED
        )

    def balance(self, requests: Iterable[LeaveRequest], leave_type: LeaveType) -> LeaveBalance:
        return LeaveBalance(
            leave_type=leave_type,
            entitlement=self._entitlements[leave_type],
            used=self.used_days(requests, leave_type),
        )

    def balances(self, requests: Iterable[LeaveRequest]) -> Dict[LeaveType, LeaveBalance]:
        requests = list(requests)
        return {t: self.balance(requests, t) for t in LeaveType}
