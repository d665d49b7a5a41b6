"""Shared helpers for the Flask controllers: session guards and JSON errors."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateKeyConflict,
    HolidayConflict,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (HolidayConflict, 409),
    (DuplicateKeyConflict, 409),
    (StoreUnavailable, 503),
)


def error_response(e: DomainError):
    status = 400
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            status = code
            break

    body: dict[str, Any] = {"success": False, "error": type(e).__name__, "message": str(e)}
    if isinstance(e, HolidayConflict) and e.reason:
        body["holiday_reason"] = e.reason
    return jsonify(body), status


def current_role() -> Role:
    return Role(session.get("role"))


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    """Allow only sessions whose role is one of `roles`."""

    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401

            if session.get("role") not in allowed:
                logger.info(
                    "forbidden: user=%s role=%s path=%s", session.get("user_id"), session.get("role"), request.path
                )
                return jsonify({"success": False, "message": "You do not have access to this page"}), 403

            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(view):
    return roles_required(Role.ADMIN)(view)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict(flat=True)


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
