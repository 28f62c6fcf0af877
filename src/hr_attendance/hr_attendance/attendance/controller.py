from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime, parse_optional_date
from ..common.decorators import admin_required, current_employee_id, current_role, employee_required
from ..common.validators import parse_enum, require_int
from ..core.enums import StatusFilter
from ..core.exceptions import ValidationError
from ..container import Container


def _parse_timestamp(value, work_date: date) -> Optional[datetime]:
    """Accept a naive ISO timestamp or a bare HH:MM[:SS], both on work_date."""
    text = str(value).strip() if value is not None else ""
    if not text:
        return None
    if "T" in text or " " in text:
        moment = parse_iso_datetime(text)
        if moment.tzinfo is not None:
            raise ValidationError(f"Timestamp {text!r} must be local time without a UTC offset")
        if moment.date() != work_date:
            raise ValidationError(f"Timestamp {text!r} is not on {work_date.isoformat()}")
        return moment.replace(microsecond=0)
    try:
        t = datetime.strptime(text, "%H:%M:%S" if text.count(":") == 2 else "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time {text!r} (expected HH:MM or ISO 8601)")
    return datetime.combine(work_date, t)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    reports = container.report_service

    def _location_payload(data: dict) -> dict:
        return {
            "latitude": data.get("latitude"),
            "longitude": data.get("longitude"),
            "address": data.get("address", ""),
            "notes": data.get("notes"),
        }

    # -------- Employee self-service --------
    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @employee_required
    def attendance_today():
        record = service.get_today(current_employee_id())
        return jsonify({"success": True, "attendance": record.to_dict()})

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @employee_required
    def attendance_check_in():
        data = request.get_json(silent=True) or {}
        record = service.check_in(current_employee_id(), **_location_payload(data))
        return (
            jsonify(
                {
                    "success": True,
                    "message": f"Checked in successfully at {record.check_in_time:%H:%M:%S}",
                    "attendance": record.to_dict(),
                    **container.strategy_factory.decide(record.check_in_time).to_dict(),
                }
            ),
            201,
        )

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @employee_required
    def attendance_check_out():
        data = request.get_json(silent=True) or {}
        result = service.check_out(current_employee_id(), **_location_payload(data))
        return jsonify(
            {
                "success": True,
                "message": f"Checked out successfully at {result.record.check_out_time:%H:%M:%S}",
                "attendance": result.to_dict(),
            }
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @employee_required
    def attendance_history():
        page = service.history(current_employee_id(), page=request.args.get("page", 1, type=int))
        return jsonify(
            {
                "success": True,
                "attendances": [r.to_dict() for r in page.items],
                "page": page.page,
                "per_page": page.per_page,
                "total": page.total,
                "pages": page.pages,
            }
        )

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @employee_required
    def attendance_report():
        today = container.clock.today()
        start = parse_optional_date(request.args.get("start_date"), default=today.replace(day=1))
        end = parse_optional_date(request.args.get("end_date"), default=today)
        report = reports.period_report(start, end, employee_id=current_employee_id())
        return jsonify({"success": True, **report.to_dict()})

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @employee_required
    def attendance_summary():
        summary = reports.employee_summary(current_employee_id(), container.clock.today())
        return jsonify({"success": True, **summary.to_dict()})

    # -------- Admin --------
    @app.route("/api/admin/attendance", methods=["GET"], endpoint="admin_attendance_list")
    @admin_required
    def admin_attendance_list():
        work_date = parse_optional_date(request.args.get("date"), default=container.clock.today())
        listing = reports.daily_listing(
            work_date,
            search=request.args.get("search", ""),
            status=parse_enum(StatusFilter, request.args.get("status") or "all", "Status"),
        )
        return jsonify({"success": True, "date": work_date.isoformat(), **listing.to_dict()})

    @app.route("/api/admin/attendance", methods=["POST"], endpoint="admin_attendance_create")
    @admin_required
    def admin_attendance_create():
        data = request.get_json(silent=True) or {}
        work_date = parse_iso_date(data.get("work_date"))
        record = service.correct_record(
            current_role=current_role(),
            employee_id=require_int(data.get("employee_id"), "Employee"),
            work_date=work_date,
            check_in_time=_parse_timestamp(data.get("check_in_time"), work_date),
            check_out_time=_parse_timestamp(data.get("check_out_time"), work_date),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "attendance": record.to_dict()}), 201

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["GET"], endpoint="admin_attendance_show")
    @admin_required
    def admin_attendance_show(attendance_id: int):
        record = service.get_record(attendance_id)
        duration = service.duration_of(record)
        employee = container.directory.get(record.employee_id)
        return jsonify(
            {
                "success": True,
                "attendance": record.to_dict(),
                "employee": employee.to_public_dict(),
                "status": container.strategy_factory.status_of(record).value,
                "work_hours": duration.hours if duration else None,
            }
        )

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["PUT"], endpoint="admin_attendance_update")
    @admin_required
    def admin_attendance_update(attendance_id: int):
        data = request.get_json(silent=True) or {}
        existing = service.get_record(attendance_id)
        record = service.correct_record(
            current_role=current_role(),
            attendance_id=attendance_id,
            check_in_time=_parse_timestamp(data.get("check_in_time"), existing.work_date),
            check_out_time=_parse_timestamp(data.get("check_out_time"), existing.work_date),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "attendance": record.to_dict()})

    @app.route("/api/admin/attendance/prepare", methods=["POST"], endpoint="admin_attendance_prepare")
    @admin_required
    def admin_attendance_prepare():
        work_date = parse_optional_date(request.args.get("date"), default=container.clock.today())
        created = service.prepare_day(current_role=current_role(), work_date=work_date)
        return jsonify({"success": True, "date": work_date.isoformat(), "created": created})

    @app.route("/api/admin/attendance/statistics", methods=["GET"], endpoint="admin_attendance_statistics")
    @admin_required
    def admin_attendance_statistics():
        today = container.clock.today()
        start = parse_optional_date(request.args.get("start_date"), default=today.replace(day=1))
        end = parse_optional_date(request.args.get("end_date"), default=today)
        report = reports.period_report(start, end)
        data = report.to_dict()
        data["ranking"] = [s.to_dict() for s in reports.rank_employees(report.employee_stats)]
        return jsonify({"success": True, **data})
