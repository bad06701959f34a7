from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local
from ..common.web import current_user, date_field, json_body, login_required, ok, privileged_required
from ..container import Container
from ..core.enums import RequestKind, RequestStatus
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _today_total_seconds(user_id: int) -> int:
        ctx = container.sessions.get(user_id)
        if ctx is not None:
            return ctx.machine.today_total_seconds
        return container.attendance_service.today_total(user_id, now_local().date())

    def _outcome() -> RequestStatus:
        try:
            return RequestStatus(json_body().get("status"))
        except ValueError:
            raise ValidationError("Decision must be Approved or Rejected")

    @app.route("/api/leaves", methods=["GET"], endpoint="my_leaves")
    @login_required
    def my_leaves():
        data = container.request_service.list_my_requests(user_id=current_user().user_id)
        return ok({"leaves": data["leaves"]})

    @app.route("/api/leaves", methods=["POST"], endpoint="new_leave")
    @login_required
    def new_leave():
        data = json_body()
        request_id = container.request_service.create_leave(
            current_user=current_user(),
            leave_type=data.get("type"),
            start_date=date_field(data, "start_date", "Start date"),
            end_date=date_field(data, "end_date", "End date"),
            reason=data.get("reason", ""),
        )
        return ok({"message": "Leave request submitted", "request_id": request_id}, 201)

    @app.route("/api/leaves/balances", methods=["GET"], endpoint="leave_balances")
    @login_required
    def leave_balances():
        return ok({"balances": container.request_service.leave_balances(user_id=current_user().user_id)})

    @app.route("/api/overtime", methods=["GET"], endpoint="my_overtime")
    @login_required
    def my_overtime():
        user = current_user()
        data = container.request_service.list_my_requests(user_id=user.user_id)
        total = _today_total_seconds(user.user_id)
        gate = container.request_service.overtime_gate
        return ok(
            {
                "overtime": data["overtime"],
                "today_total_seconds": total,
                "required_seconds": gate.required_seconds,
                "can_request": gate.can_request(total),
            }
        )

    @app.route("/api/overtime", methods=["POST"], endpoint="new_overtime")
    @login_required
    def new_overtime():
        user = current_user()
        data = json_body()
        request_id = container.request_service.create_overtime(
            current_user=user,
            project=data.get("project", ""),
            hours=data.get("hours"),
            reason=data.get("reason", ""),
            today_total_seconds=_today_total_seconds(user.user_id),
            today=now_local().date(),
        )
        return ok({"message": "Overtime request submitted", "request_id": request_id}, 201)

    @app.route("/api/admin/requests/pending", methods=["GET"], endpoint="admin_pending_requests")
    @privileged_required
    def admin_pending_requests():
        return ok(container.request_service.list_admin_pending())

    @app.route("/api/admin/leaves/<int:request_id>/decision", methods=["POST"], endpoint="decide_leave")
    @privileged_required
    def decide_leave(request_id: int):
        outcome = _outcome()
        user = current_user()
        container.request_service.decide(
            kind=RequestKind.LEAVE,
            request_id=request_id,
            outcome=outcome,
            current_role=user.role,
            decided_by=user.user_id,
        )
        return ok({"message": f"Leave request {outcome.value.lower()}"})

    @app.route("/api/admin/overtime/<int:request_id>/decision", methods=["POST"], endpoint="decide_overtime")
    @privileged_required
    def decide_overtime(request_id: int):
        outcome = _outcome()
        user = current_user()
        container.request_service.decide(
            kind=RequestKind.OVERTIME,
            request_id=request_id,
            outcome=outcome,
            current_role=user.role,
            decided_by=user.user_id,
        )
        return ok({"message": f"Overtime request {outcome.value.lower()}"})
