"""Helpers shared by the JSON controllers: session access, role guards and error mapping."""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Iterable, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    DomainError,
    PersistenceError,
    ValidationError,
)
from ..users.service import SessionUser
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (BusinessRuleError, 409),
    (ConflictError, 409),
    (PersistenceError, 503),
)


def status_code_for(error: DomainError) -> int:
    for exc_type, code in _STATUS_CODES:
        if isinstance(error, exc_type):
            return code
    return 400


def ok(payload: Optional[dict] = None, status: int = 200):
    body = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def store_session_user(user: SessionUser) -> None:
    session["user_id"] = user.user_id
    session["name"] = user.name
    session["email"] = user.email
    session["role"] = user.role.value
    session["department"] = user.department


def current_user() -> SessionUser:
    return SessionUser(
        user_id=int(session["user_id"]),
        name=session.get("name", ""),
        email=session.get("email", ""),
        role=Role(session.get("role")),
        department=session.get("department"),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(roles: Iterable[Role]):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return fail("Please sign in to continue", 401)
            if session.get("role") not in allowed:
                return fail("You do not have permission", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


privileged_required = roles_required((Role.ADMIN, Role.HR))
admin_required = roles_required((Role.ADMIN,))


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def date_field(data: dict, name: str, label: str) -> date:
    value = data.get(name)
    if not value:
        raise ValidationError(f"{label} is required")
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{label} must be a date (YYYY-MM-DD)")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        code = status_code_for(e)
        if code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.path, e)
        return fail(str(e), code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unexpected error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return fail(f"Internal error: {e}", 500)
        return fail("Something went wrong. Please try again.", 500)
