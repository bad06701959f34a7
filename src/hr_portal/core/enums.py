from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role, drives which API surface is exposed."""

    ADMIN = "Admin"
    HR = "HR"
    EMPLOYEE = "Employee"

    @property
    def is_privileged(self) -> bool:
        return self in {Role.ADMIN, Role.HR}


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record.

    Everything except ACTIVE is a terminal checkout reason.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    IDLE_CHECKOUT = "idle-checkout"
    LUNCH_CHECKOUT = "lunch-checkout"
    SYSTEM_CHECKOUT = "system-checkout"

    @property
    def is_checkout_reason(self) -> bool:
        return self is not AttendanceStatus.ACTIVE


class SessionState(str, Enum):
    """In-memory state of a user's attendance session.

    CHECKING_IN and CHECKING_OUT mark a write in flight to the data store.
    """

    CHECKED_OUT = "checked_out"
    CHECKING_IN = "checking_in"
    ACTIVE = "active"
    CHECKING_OUT = "checking_out"


class LeaveType(str, Enum):
    SICK = "Sick"
    CASUAL = "Casual"
    ANNUAL = "Annual"


class RequestStatus(str, Enum):
    """Approval workflow status (leave/overtime)."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RequestKind(str, Enum):
    LEAVE = "leave"
    OVERTIME = "overtime"
