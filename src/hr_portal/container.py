from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.context import SessionRegistry, TickSource
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.timer import SessionTimer
from .breaks.mysql_break_repository import MySQLBreakScheduleRepository
from .breaks.repository import BreakScheduleRepository
from .breaks.service import BreakScheduleService
from .core.constants import IDLE_LIMIT_SECONDS, REQUIRED_SECONDS, TICK_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .requests.approval import ApprovalWorkflow
from .requests.balance import LeaveBalanceCalculator
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.overtime_gate import OvertimeEligibilityGate
from .requests.repository import RequestRepository
from .requests.service import RequestService
from .reviews.mysql_review_repository import MySQLReviewRepository
from .reviews.repository import ReviewRepository
from .reviews.service import ReviewService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    breaks_repo: BreakScheduleRepository
    requests_repo: RequestRepository
    reviews_repo: ReviewRepository

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    break_service: BreakScheduleService
    request_service: RequestService
    review_service: ReviewService

    timer: TickSource
    sessions: SessionRegistry

    def shutdown(self) -> None:
        """Force-close every open session, then stop the tick source."""
        try:
            self.sessions.close_all()
        finally:
            stop = getattr(self.timer, "stop", None)
            if stop is not None:
                stop()


def assemble_container(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    breaks_repo: BreakScheduleRepository,
    requests_repo: RequestRepository,
    reviews_repo: ReviewRepository,
    timer: TickSource,
    email_domain: str,
    idle_limit_seconds: int = IDLE_LIMIT_SECONDS,
    required_seconds: int = REQUIRED_SECONDS,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, in-memory fakes in tests)."""

    auth_service = AuthService(users_repo, email_domain=email_domain)
    user_service = UserService(users_repo)
    attendance_service = AttendanceService(attendance_repo)
    break_service = BreakScheduleService(breaks_repo)
    request_service = RequestService(
        requests_repo,
        balance_calculator=LeaveBalanceCalculator(),
        overtime_gate=OvertimeEligibilityGate(required_seconds=required_seconds),
        approval=ApprovalWorkflow(requests_repo),
    )
    review_service = ReviewService(reviews_repo, users_repo)

    sessions = SessionRegistry(
        attendance=attendance_repo,
        break_schedule_for=break_service.get_for_date,
        timer=timer,
        idle_limit_seconds=idle_limit_seconds,
        required_seconds=required_seconds,
    )
    break_service.on_change(sessions.refresh_break_schedules)

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        breaks_repo=breaks_repo,
        requests_repo=requests_repo,
        reviews_repo=reviews_repo,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        break_service=break_service,
        request_service=request_service,
        review_service=review_service,
        timer=timer,
        sessions=sessions,
    )


def build_container(
    *,
    db_config: dict,
    email_domain: str,
    idle_limit_seconds: int = IDLE_LIMIT_SECONDS,
    required_seconds: int = REQUIRED_SECONDS,
    tick_seconds: int = TICK_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        breaks_repo=MySQLBreakScheduleRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        reviews_repo=MySQLReviewRepository(conn),
        timer=SessionTimer(tick_seconds=tick_seconds),
        email_domain=email_domain,
        idle_limit_seconds=idle_limit_seconds,
        required_seconds=required_seconds,
    )
