from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.http import admin_required, current_role, current_user_id, employee_required, json_body, ok
from ..common.serialization import amount
from ..container import Container
from .model import PayrollRow, SalaryStructure


def structure_json(structure: Optional[SalaryStructure]) -> Optional[dict]:
    if structure is None:
        return None
    out = {
        "user_id": structure.user_id,
        "monthly_wage": amount(structure.monthly_wage),
        "yearly_wage": amount(structure.yearly_wage),
        "working_days_per_week": structure.working_days_per_week,
        "break_time_hours": amount(structure.break_time_hours),
    }
    out.update({name: amount(value) for name, value in structure.components.as_dict().items()})
    return out


def payroll_row_json(row: PayrollRow) -> dict:
    return {
        "id": row.user_id,
        "employee_id": row.employee_code,
        "name": row.name,
        "email": row.email,
        "department": row.department,
        "designation": row.designation,
        "salary": amount(row.profile_salary),
        "salary_data": structure_json(row.structure),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/payrolls", methods=["GET"], endpoint="admin_payrolls")
    @admin_required
    def admin_payrolls():
        page = container.payroll_service.list_payrolls(
            current_role=current_role(),
            search=request.args.get("search"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return ok(page.to_dict(payroll_row_json))

    @app.route("/api/admin/payrolls/<int:user_id>", methods=["GET"], endpoint="admin_payroll")
    @admin_required
    def admin_payroll(user_id: int):
        structure = container.payroll_service.get_structure(
            current_user_id=current_user_id(), current_role=current_role(), user_id=user_id
        )
        return ok(structure_json(structure))

    @app.route("/api/admin/payrolls/<int:user_id>", methods=["PUT"], endpoint="admin_update_payroll")
    @admin_required
    def admin_update_payroll(user_id: int):
        data = json_body()
        structure = container.payroll_service.update_structure(
            current_role=current_role(),
            user_id=user_id,
            monthly_wage=data.get("monthly_wage"),
            working_days_per_week=data.get("working_days_per_week"),
            break_time_hours=data.get("break_time_hours"),
        )
        return ok(structure_json(structure), message="Salary structure updated successfully.")

    @app.route("/api/employee/payroll", methods=["GET"], endpoint="employee_payroll")
    @employee_required
    def employee_payroll():
        structure = container.payroll_service.get_structure(
            current_user_id=current_user_id(), current_role=current_role()
        )
        return ok(structure_json(structure))
