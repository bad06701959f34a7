from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, session

from ..common.datetime_utils import now_local
from ..common.validators import require_bool
from ..common.web import (
    admin_required,
    current_user,
    date_field,
    fail,
    json_body,
    login_required,
    ok,
    privileged_required,
    store_session_user,
)
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from ..users.model import User
from ..users.service import SessionUser

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _sign_in(user: SessionUser, remember: bool):
        previous = session.get("user_id")
        if previous is not None and int(previous) != user.user_id:
            container.sessions.close(int(previous))

        # the per-login context must exist before the cookie says we are logged in
        ctx = container.sessions.open(user)

        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=7)
        store_session_user(user)
        return {
            "user": {
                "user_id": user.user_id,
                "name": user.name,
                "email": user.email,
                "role": user.role.value,
                "department": user.department,
            },
            "attendance": ctx.machine.snapshot(),
        }

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_account():
        data = json_body()
        role_s = data.get("role") or Role.EMPLOYEE.value
        try:
            role = Role(role_s)
        except ValueError:
            raise ValidationError("Role must be HR or Employee")

        user = container.auth_service.register(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
            department=data.get("department", ""),
        )
        return ok(_sign_in(user, remember=False), 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        payload = _sign_in(user, remember=require_bool(data.get("remember_me"), "remember_me"))
        logger.info("user %s signed in", user.user_id)
        return ok(payload)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        if "user_id" not in session:
            return ok({"message": "Signed out"})

        user_id = int(session["user_id"])
        try:
            container.sessions.close(user_id)
        except DomainError as e:
            logger.warning("forced checkout on logout failed for user %s: %s", user_id, e)
            return ok({"message": "Signed out, but the running session could not be saved", "warning": str(e)})
        finally:
            session.clear()
        return ok({"message": "Signed out"})

    @app.route("/api/profile", methods=["GET"], endpoint="profile")
    @login_required
    def profile():
        user = container.user_service.get(current_user().user_id)
        review = container.review_service.latest_for_user(user.user_id)
        return ok({"profile": user.to_public_dict(), "latest_review": review.to_dict() if review else None})

    @app.route("/api/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    def update_profile():
        data = json_body()
        birthday = date_field(data, "birthday", "Birthday") if data.get("birthday") else None
        user = container.user_service.update_profile(
            user_id=current_user().user_id,
            name=data.get("name", ""),
            department=data.get("department", ""),
            phone_number=data.get("phone_number", ""),
            birthday=birthday,
        )
        session["name"] = user.name
        session["department"] = user.department
        return ok({"profile": user.to_public_dict()})

    @app.route("/api/admin/overview", methods=["GET"], endpoint="admin_overview")
    @privileged_required
    def admin_overview():
        today = now_local().date()
        employees = container.user_service.list_employees()
        live = container.attendance_service.live_attendance(today)
        pending = container.request_service.list_admin_pending()
        return ok(
            {
                "total_employees": len(employees),
                "checked_in": len(live),
                "live_attendance": live,
                "pending_leaves": len(pending["leaves"]),
                "pending_overtime": len(pending["overtime"]),
            }
        )

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_employees")
    @privileged_required
    def admin_employees():
        rows = []
        for user in container.user_service.list_employees():
            review = container.review_service.latest_for_user(user.user_id)
            rows.append({**user.to_public_dict(), "latest_review_average": review.average if review else None})
        return ok({"employees": rows})

    @app.route("/api/admin/employees", methods=["POST"], endpoint="create_employee")
    @admin_required
    def create_employee():
        data = json_body()
        try:
            role = Role(data.get("role") or Role.EMPLOYEE.value)
        except ValueError:
            raise ValidationError("Role must be Admin, HR or Employee")

        user = container.auth_service.provision(
            current_role=current_user().role,
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
            department=data.get("department", ""),
        )
        logger.info("user %s created by admin %s", user.user_id, current_user().user_id)
        return ok({"message": "Account created", "user_id": user.user_id, "role": user.role.value}, 201)

    @app.route("/api/admin/employees/<int:user_id>", methods=["DELETE"], endpoint="delete_employee")
    @admin_required
    def delete_employee(user_id: int):
        if user_id == current_user().user_id:
            return fail("You cannot delete your own account", 400)

        def _close_session(target: User) -> None:
            # the forced checkout has to land while the attendance rows still exist
            container.sessions.close(target.user_id)

        container.user_service.delete_user(
            current_role=current_user().role, user_id=user_id, before_delete=_close_session
        )
        return ok({"message": "Employee deleted"})
