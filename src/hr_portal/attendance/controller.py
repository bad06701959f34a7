from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_bool
from ..common.web import current_user, json_body, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, SessionState
from ..core.exceptions import BusinessRuleError, ValidationError
from .context import SessionContext


def register(app: Flask, container: Container) -> None:
    def _context() -> SessionContext:
        # reuses the login context; rebuilds it after a process restart
        return container.sessions.open(current_user())

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @login_required
    def attendance_status():
        return ok({"attendance": _context().machine.snapshot()})

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        machine = _context().machine
        is_wfh = require_bool(json_body().get("is_wfh"), "is_wfh")

        record = machine.check_in(is_wfh=is_wfh)
        if record is None:
            if machine.state == SessionState.ACTIVE:
                return ok({"message": "Already checked in", "attendance": machine.snapshot()})
            if machine.is_break_time():
                raise BusinessRuleError("Check-in is not available during break time")
            raise BusinessRuleError("Check-in is already in progress")

        return ok({"message": "Checked in", "attendance": machine.snapshot()})

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        machine = _context().machine
        closed = machine.check_out(AttendanceStatus.COMPLETED)
        if closed is None:
            raise BusinessRuleError(machine.last_error or "You are not checked in")
        return ok({"message": "Checked out", "record": closed.to_dict(), "attendance": machine.snapshot()})

    @app.route("/api/attendance/activity", methods=["POST"], endpoint="activity")
    @login_required
    def activity():
        kind = str(json_body().get("kind") or "pointer")
        ctx = _context()
        received = ctx.monitor.notify(kind)
        return ok({"received": received, "idle_seconds": ctx.machine.idle_seconds})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            raise ValidationError("limit must be a number")
        if limit <= 0:
            raise ValidationError("limit must be positive")

        history = container.attendance_service.history(current_user().user_id, limit=limit)
        return ok({"history": history.to_dict()})
