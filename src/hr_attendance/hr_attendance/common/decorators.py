from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.enums import Role


def _unauthenticated():
    return jsonify({"success": False, "error": "AuthenticationError", "message": "Login required"}), 401


def _forbidden():
    return jsonify({"success": False, "error": "AuthorizationError", "message": "Access denied"}), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return _unauthenticated()
        return view(*args, **kwargs)

    return wrapper


def role_required(role: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "employee_id" not in session:
                return _unauthenticated()
            if session.get("role") != role.value:
                return _forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = role_required(Role.ADMIN)
employee_required = role_required(Role.EMPLOYEE)


def current_employee_id() -> int:
    return int(session["employee_id"])


def current_role() -> Role:
    return Role(session.get("role"))
