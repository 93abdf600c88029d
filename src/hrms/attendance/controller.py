from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_role, current_user_id, employee_required, json_body, ok
from ..common.serialization import iso
from ..container import Container
from .model import AttendanceRecord, AttendanceRow


def record_json(record: AttendanceRecord) -> dict:
    return {
        "id": record.attendance_id,
        "user_id": record.user_id,
        "date": iso(record.work_date),
        "check_in": iso(record.check_in),
        "check_out": iso(record.check_out),
        "status": record.status.value,
    }


def row_json(row: AttendanceRow) -> dict:
    out = record_json(row.record)
    out["user"] = {
        "id": row.record.user_id,
        "name": row.user_name,
        "employee_id": row.employee_code,
        "email": row.email,
    }
    return out


def register(app: Flask, container: Container) -> None:
    def _list():
        page = container.attendance_service.list_records(
            current_user_id=current_user_id(),
            current_role=current_role(),
            from_date=request.args.get("from_date"),
            to_date=request.args.get("to_date"),
            on_date=request.args.get("date"),
            week=request.args.get("week"),
            user_id=request.args.get("user_id"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return ok(page.to_dict(row_json))

    app.add_url_rule("/api/admin/attendances", "admin_attendances", admin_required(_list), methods=["GET"])
    app.add_url_rule("/api/employee/attendances", "employee_attendances", employee_required(_list), methods=["GET"])

    @app.route("/api/admin/attendances", methods=["POST"], endpoint="admin_record_attendance")
    @admin_required
    def record_attendance():
        data = json_body()
        record = container.attendance_service.record_manual(
            current_role=current_role(),
            user_id=data.get("user_id"),
            work_date=data.get("date"),
            check_in=data.get("check_in"),
            check_out=data.get("check_out"),
            status=data.get("status"),
        )
        return ok(record_json(record), message="Attendance recorded successfully.", status=201)

    @app.route("/api/employee/attendances/check-in", methods=["POST"], endpoint="check_in")
    @employee_required
    def check_in():
        record = container.attendance_service.check_in(current_user_id())
        return ok(record_json(record), message="Checked in successfully.")

    @app.route("/api/employee/attendances/check-out", methods=["POST"], endpoint="check_out")
    @employee_required
    def check_out():
        record = container.attendance_service.check_out(current_user_id())
        return ok(record_json(record), message="Checked out successfully.")

    @app.route("/api/employee/attendances/today", methods=["GET"], endpoint="today_status")
    @employee_required
    def today_status():
        status = container.attendance_service.today_status(current_user_id())
        return ok(
            {
                "checked_in": status.checked_in,
                "checked_out": status.checked_out,
                "check_in_time": iso(status.check_in_time),
                "check_out_time": iso(status.check_out_time),
                "status": status.status.value if status.status else None,
            }
        )
