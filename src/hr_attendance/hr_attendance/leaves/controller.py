from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.decorators import admin_required, current_employee_id, current_role, employee_required
from ..common.validators import parse_enum, require_int
from ..core.enums import LeaveStatus, LeaveType
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _admin_fields(data: dict) -> dict:
        return {
            "employee_id": require_int(data.get("employee_id"), "Employee"),
            "leave_type": parse_enum(LeaveType, data.get("leave_type"), "Leave type"),
            "start_date": parse_iso_date(data.get("start_date")),
            "end_date": parse_iso_date(data.get("end_date")),
            "reason": data.get("reason", ""),
            "status": parse_enum(LeaveStatus, data.get("status") or "pending", "Status"),
            "notes": data.get("notes"),
        }

    # -------- Employee --------
    @app.route("/api/leaves", methods=["GET"], endpoint="my_leaves")
    @employee_required
    def my_leaves():
        history = service.history(current_employee_id())
        return jsonify({"success": True, **history.to_dict()})

    @app.route("/api/leaves", methods=["POST"], endpoint="submit_leave")
    @employee_required
    def submit_leave():
        data = request.get_json(silent=True) or {}
        leave = service.submit(
            current_role=current_role(),
            employee_id=current_employee_id(),
            leave_type=parse_enum(LeaveType, data.get("leave_type"), "Leave type"),
            start_date=parse_iso_date(data.get("start_date")),
            end_date=parse_iso_date(data.get("end_date")),
            reason=data.get("reason", ""),
        )
        return jsonify({"success": True, "leave": leave.to_dict()}), 201

    @app.route("/api/leaves/<int:leave_id>", methods=["DELETE"], endpoint="delete_my_leave")
    @employee_required
    def delete_my_leave(leave_id: int):
        service.delete_own_pending(employee_id=current_employee_id(), leave_id=leave_id)
        return jsonify({"success": True})

    # -------- Admin --------
    @app.route("/api/admin/leaves", methods=["GET"], endpoint="admin_leaves")
    @admin_required
    def admin_leaves():
        data = service.list_all()
        return jsonify(
            {
                "success": True,
                "leaves": {status: [l.to_dict() for l in leaves] for status, leaves in data["groups"].items()},
                "stats": data["counts"].to_dict(),
            }
        )

    @app.route("/api/admin/leaves", methods=["POST"], endpoint="admin_leave_create")
    @admin_required
    def admin_leave_create():
        data = request.get_json(silent=True) or {}
        leave = service.create_for_employee(
            current_role=current_role(),
            approver_id=current_employee_id(),
            **_admin_fields(data),
        )
        return jsonify({"success": True, "leave": leave.to_dict()}), 201

    @app.route("/api/admin/leaves/<int:leave_id>", methods=["GET"], endpoint="admin_leave_show")
    @admin_required
    def admin_leave_show(leave_id: int):
        return jsonify({"success": True, "leave": service.get(leave_id).to_dict()})

    @app.route("/api/admin/leaves/<int:leave_id>", methods=["PUT"], endpoint="admin_leave_update")
    @admin_required
    def admin_leave_update(leave_id: int):
        data = request.get_json(silent=True) or {}
        leave = service.update(
            current_role=current_role(),
            approver_id=current_employee_id(),
            leave_id=leave_id,
            **_admin_fields(data),
        )
        return jsonify({"success": True, "leave": leave.to_dict()})

    @app.route("/api/admin/leaves/<int:leave_id>", methods=["DELETE"], endpoint="admin_leave_delete")
    @admin_required
    def admin_leave_delete(leave_id: int):
        service.delete(current_role=current_role(), leave_id=leave_id)
        return jsonify({"success": True})

    @app.route("/api/admin/leaves/<int:leave_id>/<action>", methods=["POST"], endpoint="admin_leave_decide")
    @admin_required
    def admin_leave_decide(leave_id: int, action: str):
        decide = {"approve": service.approve, "reject": service.reject, "cancel": service.cancel}.get(action)
        if decide is None:
            return jsonify({"success": False, "error": "NotFound", "message": "Unknown action"}), 404
        leave = decide(current_role=current_role(), approver_id=current_employee_id(), leave_id=leave_id)
        return jsonify({"success": True, "leave": leave.to_dict()})
