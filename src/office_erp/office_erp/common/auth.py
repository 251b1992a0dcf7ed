from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import ErrorKind, Role


def _denied(message: str, status: int):
    return (
        jsonify(
            {
                "success": False,
                "message": message,
                "error": {"kind": ErrorKind.AUTHORIZATION_DENIED.value, "code": "AuthorizationError"},
            }
        ),
        status,
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return _denied("Vui lòng đăng nhập để tiếp tục!", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return _denied("Vui lòng đăng nhập để tiếp tục!", 401)
        if session.get("role") != Role.ADMIN.value:
            return _denied("Bạn không có quyền", 403)
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])
