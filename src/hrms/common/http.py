from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import DomainError, TooManyAttemptsError

logger = logging.getLogger(__name__)


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200, **extra):
    body: dict[str, Any] = {"status": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def fail(message: str, *, status: int, errors: Optional[dict] = None, **extra):
    body: dict[str, Any] = {"status": False, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return jsonify(body), status


def json_body() -> dict:
    """Request payload as a dict (JSON first, then form fields)."""

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session["role"])


def client_key() -> str:
    return request.remote_addr or "unknown"


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Unauthenticated.", status=401)
        return view(*args, **kwargs)

    return wrapper


def _role_required(role: Role, message: str):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return fail("Unauthenticated.", status=401)
            if session.get("role") != role.value:
                return fail(message, status=403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = _role_required(Role.ADMIN, "Access denied. Admin privileges required.")
employee_required = _role_required(Role.EMPLOYEE, "Access denied. Employee access only.")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if isinstance(e, TooManyAttemptsError):
            response, status = fail(e.message, status=e.status_code, retry_after=e.retry_after)
            response.headers["Retry-After"] = str(e.retry_after)
            return response, status
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        return fail(e.message, status=e.status_code, errors=e.errors)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail("Server error.", status=500, error=str(e))
        return fail("Server error.", status=500)
