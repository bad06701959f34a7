from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

import pytest
from werkzeug.security import generate_password_hash

from hr_portal.attendance.model import AttendanceRecord
from hr_portal.breaks.model import BreakSchedule
from hr_portal.container import assemble_container
from hr_portal.core.enums import AttendanceStatus, RequestStatus, Role
from hr_portal.core.exceptions import ConflictError, PersistenceError
from hr_portal.requests.model import LeaveRequest, OvertimeRequest
from hr_portal.reviews.model import SCORE_FIELDS, PerformanceReview
from hr_portal.users.model import User
from hr_portal.users.service import SessionUser

EMAIL_DOMAIN = "company.com"


class FakeUsersRepo:
    def __init__(self):
        self._next_id = 1
        self.users: Dict[int, User] = {}

    def add(self, *, name: str, email: str, password: str = "secret1", role: Role = Role.EMPLOYEE, department=None) -> User:
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=department,
        )
        return self.users[user_id]

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, department):
        if self.get_by_email(email):
            raise ConflictError("duplicate email")
        user_id = self._next_id
        self._next_id += 1
        self.users[user_id] = User(
            user_id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            department=department,
        )
        return user_id

    def update_profile(self, *, user_id, name, department, phone_number, birthday):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[int(user_id)] = replace(
            user, name=name, department=department, phone_number=phone_number, birthday=birthday
        )
        return True

    def delete_by_id(self, user_id):
        return self.users.pop(int(user_id), None) is not None

    def list_by_role(self, role):
        return [u for u in self.users.values() if u.role == role]


class FakeAttendanceRepo:
    """In-memory attendance table with the same one-active-per-day rule as the unique index."""

    def __init__(self):
        self._next_id = 1
        self.records: Dict[int, AttendanceRecord] = {}
        self.fail_checkout = False
        self.fail_reads = False
        self.checkout_calls: List[dict] = []
        self.checkin_calls = 0

    def _check_reads(self):
        if self.fail_reads:
            raise PersistenceError("database unavailable")

    def seed(self, record: AttendanceRecord) -> AttendanceRecord:
        record = replace(record, attendance_id=self._next_id)
        self._next_id += 1
        self.records[record.attendance_id] = record
        return record

    def get_recent_for_user(self, user_id, limit):
        self._check_reads()
        rows = [r for r in self.records.values() if r.user_id == int(user_id)]
        rows.sort(key=lambda r: (r.work_date, r.check_in_time), reverse=True)
        return rows[: int(limit)]

    def list_for_user_and_date(self, user_id, work_date):
        self._check_reads()
        return [r for r in self.records.values() if r.user_id == int(user_id) and r.work_date == work_date]

    def get_active_for_user_and_date(self, user_id, work_date):
        return next((r for r in self.list_for_user_and_date(user_id, work_date) if r.is_active), None)

    def list_active_for_date(self, work_date):
        self._check_reads()
        return [r for r in self.records.values() if r.work_date == work_date and r.is_active]

    def create_checkin(self, *, user_id, user_name, work_date, check_in_time, is_wfh):
        self.checkin_calls += 1
        if any(r.user_id == int(user_id) and r.work_date == work_date and r.is_active for r in self.records.values()):
            raise ConflictError("Duplicate entry for key 'uq_attendance_active'")
        return self.seed(
            AttendanceRecord(
                attendance_id=0,
                user_id=int(user_id),
                user_name=user_name,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=None,
                total_working_seconds=0,
                status=AttendanceStatus.ACTIVE,
                is_wfh=bool(is_wfh),
            )
        )

    def update_checkout(self, *, attendance_id, check_out_time, total_working_seconds, status):
        self.checkout_calls.append(
            {"attendance_id": attendance_id, "total_working_seconds": total_working_seconds, "status": status}
        )
        if self.fail_checkout:
            raise PersistenceError("database unavailable")
        record = self.records.get(int(attendance_id))
        if record is None or not record.is_active:
            return False
        self.records[record.attendance_id] = record.closed(
            check_out_time=check_out_time, total_working_seconds=total_working_seconds, status=status
        )
        return True


class FakeBreaksRepo:
    def __init__(self, rows: Optional[Dict[int, BreakSchedule]] = None):
        self.rows: Dict[int, BreakSchedule] = dict(rows or {})

    def get_for_day(self, day_of_week):
        return self.rows.get(int(day_of_week))

    def list_all(self):
        return [self.rows[d] for d in sorted(self.rows)]

    def upsert(self, *, day_of_week, start_hour, end_hour):
        self.rows[int(day_of_week)] = BreakSchedule(day_of_week=day_of_week, start_hour=start_hour, end_hour=end_hour)


class FakeRequestsRepo:
    def __init__(self):
        self._next_id = 1
        self.leaves: Dict[int, LeaveRequest] = {}
        self.overtime: Dict[int, OvertimeRequest] = {}
        self.writes = 0

    def _id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid

    def create_leave(self, *, user_id, user_name, leave_type, start_date, end_date, reason):
        self.writes += 1
        rid = self._id()
        self.leaves[rid] = LeaveRequest(
            request_id=rid,
            user_id=int(user_id),
            user_name=user_name,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=datetime(2026, 1, 1, 9, 0, 0),
        )
        return rid

    def get_leave(self, *, request_id):
        return self.leaves.get(int(request_id))

    def list_leave_requests(self, *, status=None, user_id=None, limit=200):
        rows = [
            r
            for r in self.leaves.values()
            if (status is None or r.status == status) and (user_id is None or r.user_id == int(user_id))
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def decide_leave(self, *, request_id, status, decided_by):
        req = self.leaves.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.writes += 1
        self.leaves[req.request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=datetime(2026, 1, 2, 9, 0, 0)
        )
        return True

    def create_overtime(self, *, user_id, user_name, project, hours, reason, request_date):
        self.writes += 1
        rid = self._id()
        self.overtime[rid] = OvertimeRequest(
            request_id=rid,
            user_id=int(user_id),
            user_name=user_name,
            project=project,
            hours=float(hours),
            reason=reason,
            status=RequestStatus.PENDING,
            request_date=request_date,
            created_at=datetime(2026, 1, 1, 18, 0, 0),
        )
        return rid

    def get_overtime(self, *, request_id):
        return self.overtime.get(int(request_id))

    def list_overtime_requests(self, *, status=None, user_id=None, limit=200):
        rows = [
            r
            for r in self.overtime.values()
            if (status is None or r.status == status) and (user_id is None or r.user_id == int(user_id))
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def decide_overtime(self, *, request_id, status, decided_by):
        req = self.overtime.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.writes += 1
        self.overtime[req.request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=datetime(2026, 1, 2, 9, 0, 0)
        )
        return True


class FakeReviewsRepo:
    def __init__(self):
        self._next_id = 1
        self.reviews: Dict[int, PerformanceReview] = {}

    def create_review(self, *, user_id, reviewer_id, scores, comments, review_date):
        rid = self._next_id
        self._next_id += 1
        self.reviews[rid] = PerformanceReview(
            review_id=rid,
            user_id=int(user_id),
            reviewer_id=int(reviewer_id),
            review_date=review_date,
            comments=comments,
            **{name: int(scores[name]) for name in SCORE_FIELDS},
        )
        return rid

    def list_for_user(self, user_id, limit=20):
        rows = [r for r in self.reviews.values() if r.user_id == int(user_id)]
        rows.sort(key=lambda r: (r.review_date, r.review_id), reverse=True)
        return rows[:limit]

    def latest_for_user(self, user_id):
        rows = self.list_for_user(user_id, limit=1)
        return rows[0] if rows else None


class ManualClock:
    """Tick source driven by the test instead of a scheduler thread."""

    def __init__(self):
        self.jobs: Dict[str, Callable[[], None]] = {}
        self.stopped = False

    def add(self, job_id, func):
        self.jobs[job_id] = func

    def remove(self, job_id):
        self.jobs.pop(job_id, None)

    def fire(self, job_id: Optional[str] = None, times: int = 1) -> None:
        for _ in range(times):
            for jid, func in list(self.jobs.items()):
                if job_id is None or jid == job_id:
                    func()

    def stop(self):
        self.stopped = True


def session_user(user: User) -> SessionUser:
    return SessionUser.from_user(user)


def no_break(_day: date) -> BreakSchedule:
    # window that never matches an hour of the day
    return BreakSchedule(day_of_week=0, start_hour=0, end_hour=0)


@pytest.fixture
def users_repo():
    return FakeUsersRepo()


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def breaks_repo():
    return FakeBreaksRepo()


@pytest.fixture
def requests_repo():
    return FakeRequestsRepo()


@pytest.fixture
def reviews_repo():
    return FakeReviewsRepo()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def employee(users_repo):
    return users_repo.add(name="Jane Doe", email=f"jane@{EMAIL_DOMAIN}", password="secret1", department="Engineering")


@pytest.fixture
def admin(users_repo):
    return users_repo.add(name="Ada Admin", email=f"admin@{EMAIL_DOMAIN}", password="admin123", role=Role.ADMIN)


@pytest.fixture
def hr(users_repo):
    return users_repo.add(name="Harry HR", email=f"hr@{EMAIL_DOMAIN}", password="hr12345", role=Role.HR)


@pytest.fixture
def container(users_repo, attendance_repo, breaks_repo, requests_repo, reviews_repo, clock):
    return assemble_container(
        conn=None,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        breaks_repo=breaks_repo,
        requests_repo=requests_repo,
        reviews_repo=reviews_repo,
        timer=clock,
        email_domain=EMAIL_DOMAIN,
    )
