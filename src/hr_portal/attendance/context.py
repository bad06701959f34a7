from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Dict, Optional, Protocol

from ..breaks.model import BreakSchedule
from ..core.constants import IDLE_LIMIT_SECONDS, REQUIRED_SECONDS
from ..core.enums import AttendanceStatus, SessionState
from ..core.exceptions import DomainError
from ..users.service import SessionUser
from .activity import ActivityMonitor
from .repository import AttendanceRepository
from .session import AttendanceSessionMachine

logger = logging.getLogger(__name__)


class TickSource(Protocol):
    def add(self, job_id: str, func: Callable[[], None]) -> None:
        raise NotImplementedError

    def remove(self, job_id: str) -> None:
        raise NotImplementedError


class SessionContext:
    """Everything that lives from login to logout for one user.

    Built on login, torn down on logout: the tick job and the activity
    listener never outlive it.
    """

    def __init__(self, *, machine: AttendanceSessionMachine, timer: TickSource):
        self._machine = machine
        self._timer = timer
        self._closed = False

    @property
    def user(self) -> SessionUser:
        return self._machine.user

    @property
    def machine(self) -> AttendanceSessionMachine:
        return self._machine

    @property
    def monitor(self) -> ActivityMonitor:
        return self._machine.monitor

    @property
    def job_id(self) -> str:
        return f"session-tick:{self.user.user_id}"

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self, today: Optional[date] = None) -> None:
        self._machine.load(today)
        self._timer.add(self.job_id, self._on_tick)

    def _on_tick(self) -> None:
        try:
            self._machine.tick()
        except Exception:
            logger.exception("tick failed for user %s", self.user.user_id)

    def close(self) -> None:
        """Force a system checkout if a session is active, then release timer and listener."""

        if self._closed:
            return
        try:
            if self._machine.state == SessionState.ACTIVE:
                self._machine.check_out(AttendanceStatus.SYSTEM_CHECKOUT)
        finally:
            self._timer.remove(self.job_id)
            self.monitor.detach()
            self._closed = True


class SessionRegistry:
    """Per-process map of user_id -> SessionContext."""

    def __init__(
        self,
        *,
        attendance: AttendanceRepository,
        break_schedule_for: Callable[[date], BreakSchedule],
        timer: TickSource,
        idle_limit_seconds: int = IDLE_LIMIT_SECONDS,
        required_seconds: int = REQUIRED_SECONDS,
    ):
        self._attendance = attendance
        self._break_schedule_for = break_schedule_for
        self._timer = timer
        self._idle_limit = idle_limit_seconds
        self._required = required_seconds
        self._lock = threading.Lock()
        self._contexts: Dict[int, SessionContext] = {}
        self._user_locks: Dict[int, threading.Lock] = {}

    def _build(self, user: SessionUser) -> SessionContext:
        machine = AttendanceSessionMachine(
            user=user,
            attendance=self._attendance,
            break_schedule_for=self._break_schedule_for,
            idle_limit_seconds=self._idle_limit,
            required_seconds=self._required,
        )
        return SessionContext(machine=machine, timer=self._timer)

    def _user_lock(self, user_id: int) -> threading.Lock:
        with self._lock:
            return self._user_locks.setdefault(int(user_id), threading.Lock())

    def open(self, user: SessionUser, today: Optional[date] = None) -> SessionContext:
        # a context is only visible once its record is loaded and its tick is running
        with self._user_lock(user.user_id):
            with self._lock:
                ctx = self._contexts.get(user.user_id)
            if ctx is not None:
                return ctx

            ctx = self._build(user)
            try:
                ctx.open(today)
            except DomainError:
                ctx.close()
                raise

            with self._lock:
                self._contexts[user.user_id] = ctx
        logger.info("session context opened for user %s", user.user_id)
        return ctx

    def get(self, user_id: int) -> Optional[SessionContext]:
        with self._lock:
            return self._contexts.get(int(user_id))

    def close(self, user_id: int) -> None:
        with self._user_lock(user_id):
            with self._lock:
                ctx = self._contexts.pop(int(user_id), None)
            if ctx is None:
                return
            ctx.close()
        logger.info("session context closed for user %s", user_id)

    def close_all(self) -> None:
        with self._lock:
            user_ids = list(self._contexts)
        for user_id in user_ids:
            try:
                self.close(user_id)
            except DomainError as e:
                logger.warning("forced checkout failed for user %s during shutdown: %s", user_id, e)

    def refresh_break_schedules(self) -> None:
        with self._lock:
            contexts = list(self._contexts.values())
        for ctx in contexts:
            ctx.machine.refresh_break_schedule()

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)
