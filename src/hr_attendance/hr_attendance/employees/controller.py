from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_optional_date
from ..common.decorators import admin_required, current_role, login_required
from ..common.validators import parse_enum
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import EmployeeStatus, EmploymentType
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        user = container.auth_service.authenticate(data.get("staff_code", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["employee_id"] = user.employee_id
        session["name"] = user.full_name
        session["staff_code"] = user.staff_code
        session["role"] = user.role.value

        return jsonify(
            {
                "success": True,
                "user": {
                    "employee_id": user.employee_id,
                    "full_name": user.full_name,
                    "staff_code": user.staff_code,
                    "role": user.role.value,
                },
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    # -------- Staff directory (admin) --------
    @app.route("/api/admin/staff", methods=["GET"], endpoint="admin_staff_list")
    @admin_required
    def admin_staff_list():
        archived = request.args.get("archived", "0") in {"1", "true", "yes"}
        employees = container.employee_service.list_employees(archived=archived)
        return jsonify({"success": True, "staff": [e.to_public_dict() for e in employees]})

    def _staff_fields(data: dict) -> dict:
        return {
            "full_name": data.get("full_name", ""),
            "staff_code": data.get("staff_code", ""),
            "status": parse_enum(EmployeeStatus, data.get("status") or "active", "Status"),
            "employment_type": parse_enum(EmploymentType, data.get("employment_type") or "employee", "Employment type"),
        }

    @app.route("/api/admin/staff", methods=["POST"], endpoint="admin_staff_create")
    @admin_required
    def admin_staff_create():
        data = request.get_json(silent=True) or {}
        employee_id = container.employee_service.create_employee(
            current_role=current_role(),
            password=data.get("password", ""),
            **_staff_fields(data),
        )
        employee = container.employee_service.get_employee(employee_id)
        return jsonify({"success": True, "staff": employee.to_public_dict()}), 201

    @app.route("/api/admin/staff/<int:employee_id>", methods=["PUT"], endpoint="admin_staff_update")
    @admin_required
    def admin_staff_update(employee_id: int):
        data = request.get_json(silent=True) or {}
        container.employee_service.update_employee(
            current_role=current_role(),
            employee_id=employee_id,
            password=data.get("password", ""),
            **_staff_fields(data),
        )
        employee = container.employee_service.get_employee(employee_id)
        return jsonify({"success": True, "staff": employee.to_public_dict()})

    @app.route("/api/admin/staff/<int:employee_id>/archive", methods=["POST"], endpoint="admin_staff_archive")
    @admin_required
    def admin_staff_archive(employee_id: int):
        container.employee_service.archive(current_role=current_role(), employee_id=employee_id)
        return jsonify({"success": True})

    @app.route("/api/admin/staff/<int:employee_id>/restore", methods=["POST"], endpoint="admin_staff_restore")
    @admin_required
    def admin_staff_restore(employee_id: int):
        container.employee_service.restore(current_role=current_role(), employee_id=employee_id)
        return jsonify({"success": True})

    @app.route("/api/admin/staff/<int:employee_id>", methods=["DELETE"], endpoint="admin_staff_delete")
    @admin_required
    def admin_staff_delete(employee_id: int):
        container.employee_service.delete_permanently(current_role=current_role(), employee_id=employee_id)
        return jsonify({"success": True})

    @app.route("/api/admin/staff/<int:employee_id>/attendance", methods=["GET"], endpoint="admin_staff_attendance")
    @admin_required
    def admin_staff_attendance(employee_id: int):
        sheet = container.report_service.staff_sheet(
            employee_id,
            start=parse_optional_date(request.args.get("start_date")),
            end=parse_optional_date(request.args.get("end_date")),
            today=container.clock.today(),
        )
        return jsonify({"success": True, **sheet.to_dict()})

    @app.route("/api/admin/staff/<int:employee_id>/leaves", methods=["GET"], endpoint="admin_staff_leaves")
    @admin_required
    def admin_staff_leaves(employee_id: int):
        report = container.leave_service.leave_report(
            employee_id,
            start_date=parse_optional_date(request.args.get("start_date")),
            end_date=parse_optional_date(request.args.get("end_date")),
        )
        employee = container.employee_service.get_employee(employee_id)
        return jsonify({"success": True, "staff": employee.to_public_dict(), **report.to_dict()})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(
            {
                "success": True,
                "user": {
                    "employee_id": session["employee_id"],
                    "full_name": session.get("name"),
                    "staff_code": session.get("staff_code"),
                    "role": session.get("role"),
                },
            }
        )
