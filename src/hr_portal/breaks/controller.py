from __future__ import annotations

from flask import Flask

from ..common.web import current_user, json_body, login_required, ok, privileged_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/breaks", methods=["GET"], endpoint="break_schedule")
    @login_required
    def break_schedule():
        return ok({"schedule": container.break_service.list_week()})

    @app.route("/api/breaks", methods=["PUT"], endpoint="update_break_schedule")
    @privileged_required
    def update_break_schedule():
        data = json_body()
        updated = container.break_service.update(
            current_role=current_user().role,
            day_of_week=data.get("day_of_week"),
            start_hour=data.get("start_hour"),
            end_hour=data.get("end_hour"),
        )
        return ok({"message": "Break schedule updated", "break": updated.to_dict()})
