"""Attendance session state machine.

One machine per logged-in user. The one-second clock calls :meth:`tick`,
request handlers call :meth:`check_in`, :meth:`check_out` and
:meth:`record_activity`. State changes happen under a lock; repository
writes happen outside of it, bracketed by the CHECKING_IN / CHECKING_OUT
states so that two writes for the same session never overlap.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Callable, Optional

from ..breaks.model import BreakSchedule
from ..breaks.resolver import is_break_time
from ..common.datetime_utils import now_local
from ..core.constants import IDLE_LIMIT_SECONDS, REQUIRED_SECONDS
from ..core.enums import AttendanceStatus, SessionState
from ..core.exceptions import ConflictError, DomainError, PersistenceError
from ..users.service import SessionUser
from .activity import ActivityMonitor
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceSessionMachine:
    def __init__(
        self,
        *,
        user: SessionUser,
        attendance: AttendanceRepository,
        break_schedule_for: Callable[[date], BreakSchedule],
        monitor: Optional[ActivityMonitor] = None,
        idle_limit_seconds: int = IDLE_LIMIT_SECONDS,
        required_seconds: int = REQUIRED_SECONDS,
    ):
        self._user = user
        self._attendance = attendance
        self._break_schedule_for = break_schedule_for
        self._monitor = monitor or ActivityMonitor()
        self._idle_limit = int(idle_limit_seconds)
        self._required = int(required_seconds)

        self._lock = threading.Lock()
        self._state = SessionState.CHECKED_OUT
        self._current: Optional[AttendanceRecord] = None
        self._session_seconds = 0
        self._idle_seconds = 0
        self._last_error: Optional[str] = None

        # seconds of today's finished sessions
        self._totals_date: Optional[date] = None
        self._finished_seconds = 0

        self._schedule_cache: Optional[tuple[date, BreakSchedule]] = None

    # ---- read side ----
    @property
    def user(self) -> SessionUser:
        return self._user

    @property
    def monitor(self) -> ActivityMonitor:
        return self._monitor

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def current_session(self) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._current

    @property
    def session_seconds(self) -> int:
        with self._lock:
            return self._session_seconds

    @property
    def idle_seconds(self) -> int:
        with self._lock:
            return self._idle_seconds

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    @property
    def today_total_seconds(self) -> int:
        with self._lock:
            return self._today_total_locked()

    def _today_total_locked(self) -> int:
        live = self._session_seconds if self._state in {SessionState.ACTIVE, SessionState.CHECKING_OUT} else 0
        return self._finished_seconds + live

    def break_schedule(self, now: datetime) -> BreakSchedule:
        cached = self._schedule_cache
        if cached and cached[0] == now.date():
            return cached[1]
        schedule = self._break_schedule_for(now.date())
        self._schedule_cache = (now.date(), schedule)
        return schedule

    def refresh_break_schedule(self) -> None:
        self._schedule_cache = None

    def is_break_time(self, now: Optional[datetime] = None) -> bool:
        now = now or now_local()
        return is_break_time(self.break_schedule(now), now)

    def can_check_in(self, now: Optional[datetime] = None) -> bool:
        return self.state == SessionState.CHECKED_OUT and not self.is_break_time(now)

    def snapshot(self, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        schedule = self.break_schedule(now)
        on_break = is_break_time(schedule, now)
        with self._lock:
            return {
                "state": self._state.value,
                "session": self._current.to_dict() if self._current else None,
                "session_seconds": self._session_seconds,
                "idle_seconds": self._idle_seconds,
                "idle_limit_seconds": self._idle_limit,
                "today_total_seconds": self._today_total_locked(),
                "required_seconds": self._required,
                "is_break_time": on_break,
                "break_schedule": schedule.to_dict(),
                "can_check_in": self._state == SessionState.CHECKED_OUT and not on_break,
                "last_error": self._last_error,
            }

    # ---- loading / reconciliation ----
    def load(self, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        """Sync with the store: today's finished total and any active record (adopted as current)."""

        today = today or now_local().date()
        records = self._attendance.list_for_user_and_date(self._user.user_id, today)
        active = next((r for r in records if r.is_active), None)
        finished = sum(r.total_working_seconds for r in records if not r.is_active)

        with self._lock:
            if self._state not in {SessionState.CHECKED_OUT, SessionState.ACTIVE}:
                return self._current
            self._totals_date = today
            self._finished_seconds = finished
            if active and self._current is None:
                self._adopt_locked(active)
            current = self._current

        if current is not None:
            self._monitor.attach(self.record_activity)
        return current

    def _adopt_locked(self, record: AttendanceRecord) -> None:
        self._current = record
        self._session_seconds = int(record.total_working_seconds)
        self._idle_seconds = 0
        self._state = SessionState.ACTIVE

    def _finished_today(self, today: date) -> int:
        records = self._attendance.list_for_user_and_date(self._user.user_id, today)
        return sum(r.total_working_seconds for r in records if not r.is_active)

    # ---- transitions ----
    def check_in(self, *, is_wfh: bool = False, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        """CheckedOut -> Active. Returns None (and changes nothing) when not allowed right now."""

        now = now or now_local()
        today = now.date()
        on_break = is_break_time(self.break_schedule(now), now)

        with self._lock:
            if self._state != SessionState.CHECKED_OUT:
                logger.debug("check-in ignored for user %s: state=%s", self._user.user_id, self._state.value)
                return None
            if on_break:
                logger.debug("check-in ignored for user %s: break time", self._user.user_id)
                return None
            self._state = SessionState.CHECKING_IN

        try:
            record = self._attendance.get_active_for_user_and_date(self._user.user_id, today)
            if record is None:
                try:
                    record = self._attendance.create_checkin(
                        user_id=self._user.user_id,
                        user_name=self._user.name,
                        work_date=today,
                        check_in_time=now,
                        is_wfh=is_wfh,
                    )
                except ConflictError:
                    # another client won the race; use its session
                    record = self._attendance.get_active_for_user_and_date(self._user.user_id, today)
                    if record is None:
                        raise
            finished = self._finished_today(today)
        except DomainError as e:
            with self._lock:
                self._state = SessionState.CHECKED_OUT
                self._last_error = str(e)
            logger.warning("check-in failed for user %s: %s", self._user.user_id, e)
            raise

        with self._lock:
            self._adopt_locked(record)
            self._totals_date = today
            self._finished_seconds = finished
            self._last_error = None

        self._monitor.attach(self.record_activity)
        logger.info("user %s checked in (attendance_id=%s, wfh=%s)", self._user.user_id, record.attendance_id, record.is_wfh)
        return record

    def record_activity(self) -> None:
        with self._lock:
            if self._state == SessionState.ACTIVE:
                self._idle_seconds = 0

    def tick(self, now: Optional[datetime] = None) -> Optional[AttendanceStatus]:
        """Advance one second. Returns the checkout reason when this tick ended the session."""

        now = now or now_local()
        on_break = is_break_time(self.break_schedule(now), now)

        with self._lock:
            if self._state == SessionState.CHECKED_OUT and self._totals_date != now.date():
                self._totals_date = now.date()
                self._finished_seconds = 0
            if self._state != SessionState.ACTIVE:
                return None

            # break is checked before the increment: the tick landing on break start adds nothing
            if on_break:
                reason = AttendanceStatus.LUNCH_CHECKOUT
            else:
                self._session_seconds += 1
                self._idle_seconds += 1
                if self._today_total_locked() >= self._required:
                    reason = AttendanceStatus.SYSTEM_CHECKOUT
                elif self._idle_seconds >= self._idle_limit:
                    reason = AttendanceStatus.IDLE_CHECKOUT
                else:
                    return None

        try:
            closed = self.check_out(reason, now=now)
        except DomainError:
            # rolled back to Active; the next tick evaluates again
            return None
        return reason if closed is not None else None

    def check_out(
        self,
        reason: AttendanceStatus = AttendanceStatus.COMPLETED,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[AttendanceRecord]:
        """Active -> CheckedOut in two phases: mark CHECKING_OUT, write, then confirm or roll back."""

        if not reason.is_checkout_reason:
            raise ValueError(f"not a checkout reason: {reason!r}")
        now = now or now_local()

        with self._lock:
            if self._state != SessionState.ACTIVE or self._current is None:
                return None
            self._state = SessionState.CHECKING_OUT
            record = self._current
            seconds = self._session_seconds

        try:
            updated = self._attendance.update_checkout(
                attendance_id=record.attendance_id,
                check_out_time=now,
                total_working_seconds=seconds,
                status=reason,
            )
        except DomainError as e:
            with self._lock:
                self._state = SessionState.ACTIVE
                self._last_error = str(e)
            logger.warning("checkout (%s) failed for user %s, session kept: %s", reason.value, self._user.user_id, e)
            raise

        closed = record.closed(check_out_time=now, total_working_seconds=seconds, status=reason)
        with self._lock:
            self._current = None
            self._session_seconds = 0
            self._idle_seconds = 0
            self._state = SessionState.CHECKED_OUT
            if updated:
                self._finished_seconds += seconds
            self._last_error = None if updated else "Session was already closed elsewhere"
        self._monitor.detach()

        if not updated:
            logger.warning("attendance %s was no longer active in the store", record.attendance_id)

        self._reload_totals(record.work_date)
        logger.info("user %s checked out: %s after %ss", self._user.user_id, reason.value, seconds)
        return closed if updated else None

    def _reload_totals(self, work_date: date) -> None:
        try:
            finished = self._finished_today(work_date)
        except PersistenceError as e:
            logger.warning("could not reload today's total for user %s: %s", self._user.user_id, e)
            return
        with self._lock:
            if self._state == SessionState.CHECKED_OUT:
                self._totals_date = work_date
                self._finished_seconds = finished
