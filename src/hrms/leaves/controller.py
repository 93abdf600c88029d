from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_role, current_user_id, employee_required, json_body, ok
from ..common.serialization import iso
from ..container import Container
from .model import LeaveRequest


def leave_json(leave: LeaveRequest) -> dict:
    return {
        "id": leave.leave_id,
        "user_id": leave.user_id,
        "type": leave.leave_type.value,
        "from_date": iso(leave.from_date),
        "to_date": iso(leave.to_date),
        "days": leave.days,
        "reason": leave.reason,
        "status": leave.status.value,
        "admin_comment": leave.admin_comment,
        "created_at": iso(leave.created_at),
        "user": {
            "id": leave.user_id,
            "name": leave.user_name,
            "employee_id": leave.employee_code,
            "email": leave.email,
        },
    }


def register(app: Flask, container: Container) -> None:
    def _list():
        page = container.leave_service.list_leaves(
            current_user_id=current_user_id(),
            current_role=current_role(),
            status=request.args.get("status"),
            leave_type=request.args.get("type"),
            from_date=request.args.get("from_date"),
            to_date=request.args.get("to_date"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return ok(page.to_dict(leave_json))

    app.add_url_rule("/api/admin/leaves", "admin_leaves", admin_required(_list), methods=["GET"])
    app.add_url_rule("/api/employee/leaves", "employee_leaves", employee_required(_list), methods=["GET"])

    @app.route("/api/employee/leaves", methods=["POST"], endpoint="create_leave")
    @employee_required
    def create_leave():
        data = json_body()
        leave = container.leave_service.create_leave(
            current_role=current_role(),
            user_id=current_user_id(),
            leave_type=data.get("type"),
            from_date=data.get("from_date"),
            to_date=data.get("to_date"),
            reason=data.get("reason"),
        )
        return ok(leave_json(leave), message="Leave request submitted successfully.", status=201)

    @app.route("/api/employee/leaves/<int:leave_id>", methods=["GET"], endpoint="show_leave")
    @employee_required
    def show_leave(leave_id: int):
        leave = container.leave_service.get_leave(
            current_user_id=current_user_id(), current_role=current_role(), leave_id=leave_id
        )
        return ok(leave_json(leave))

    @app.route("/api/employee/leaves/<int:leave_id>/cancel", methods=["POST"], endpoint="cancel_leave")
    @employee_required
    def cancel_leave(leave_id: int):
        leave = container.leave_service.cancel_leave(current_user_id=current_user_id(), leave_id=leave_id)
        return ok(leave_json(leave), message="Leave request cancelled successfully.")

    @app.route("/api/admin/leaves/<int:leave_id>/status", methods=["PUT"], endpoint="decide_leave")
    @admin_required
    def decide_leave(leave_id: int):
        data = json_body()
        leave = container.leave_service.decide_leave(
            current_role=current_role(),
            leave_id=leave_id,
            status=data.get("status"),
            admin_comment=data.get("admin_comment"),
        )
        return ok(leave_json(leave), message=f"Leave request {leave.status.value} successfully.")
