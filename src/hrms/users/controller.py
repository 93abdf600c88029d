from __future__ import annotations

from flask import Flask, request, session

from ..common.http import (
    admin_required,
    client_key,
    current_role,
    current_user_id,
    employee_required,
    json_body,
    login_required,
    ok,
)
from ..common.serialization import amount, iso
from ..container import Container
from .model import PROFILE_FIELDS, EmployeeProfile, User, UserWithProfile


def user_json(user: User) -> dict:
    return {
        "id": user.user_id,
        "employee_id": user.employee_code,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
    }


def profile_json(profile: EmployeeProfile | None) -> dict | None:
    if profile is None:
        return None
    out: dict = {"user_id": profile.user_id}
    for name in PROFILE_FIELDS:
        out[name] = getattr(profile, name)
    out["salary"] = amount(profile.salary)
    out["joining_date"] = iso(profile.joining_date)
    out["date_of_birth"] = iso(profile.date_of_birth)
    return out


def detail_json(item: UserWithProfile, *, admin_view: bool = False) -> dict:
    out = user_json(item.user)
    if admin_view:
        out["email_verified_at"] = iso(item.user.email_verified_at)
        out["password_changed_at"] = iso(item.user.password_changed_at)
        out["created_at"] = iso(item.user.created_at)
    out["profile"] = profile_json(item.profile)
    return out


def register(app: Flask, container: Container) -> None:
    @app.route("/api/register", methods=["POST"], endpoint="register")
    def register_employee():
        data = json_body()
        user = container.auth_service.register_employee(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            password_confirmation=data.get("password_confirmation"),
            phone=data.get("phone"),
        )
        return ok(
            message="Registration successful.",
            status=201,
            user=user_json(user),
        )

    @app.route("/api/admin/register", methods=["POST"], endpoint="admin_register")
    def register_admin():
        data = json_body()
        user = container.auth_service.register_admin(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            password_confirmation=data.get("password_confirmation"),
            company_name=data.get("company_name"),
        )
        return ok(message="Admin account created successfully", status=201, user=user_json(user))

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(
            data.get("email") or data.get("login"),
            data.get("password"),
            client_key=client_key(),
        )

        session.clear()
        session.permanent = True
        session["user_id"] = s_user.user_id
        session["role"] = s_user.role.value
        session["name"] = s_user.name

        return ok(
            message="Login successful",
            user={
                "id": s_user.user_id,
                "employee_id": s_user.employee_code,
                "name": s_user.name,
                "email": s_user.email,
                "role": s_user.role.value,
            },
            requires_password_change=s_user.requires_password_change,
            message_hint="Please change your password for security." if s_user.requires_password_change else None,
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        session.clear()
        return ok(message="Logged out successfully.")

    @app.route("/api/user", methods=["GET"], endpoint="current_user")
    @login_required
    def me():
        return ok(user=user_json(container.auth_service.get_user(current_user_id())))

    @app.route("/api/user/password", methods=["PUT"], endpoint="update_password")
    @login_required
    def update_password():
        data = json_body()
        container.auth_service.change_password(
            current_user_id(),
            current_password=data.get("current_password"),
            new_password=data.get("password"),
            password_confirmation=data.get("password_confirmation"),
        )
        return ok(message="Password updated successfully. You can now use your new password to login.")

    # --- admin: employee management ---

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_list_employees")
    @admin_required
    def admin_list_employees():
        page = container.user_service.list_users(
            role=request.args.get("role"),
            search=request.args.get("search"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return ok(page.to_dict(lambda item: detail_json(item, admin_view=True)))

    @app.route("/api/admin/employees", methods=["POST"], endpoint="admin_create_employee")
    @admin_required
    def admin_create_employee():
        data = json_body()
        created = container.user_service.create_employee(
            name=data.get("name"),
            email=data.get("email"),
            role=data.get("role"),
            company_name=data.get("company_name"),
            phone=data.get("phone"),
            joining_date=data.get("joining_date"),
            department=data.get("department"),
            designation=data.get("designation"),
        )
        return ok(
            message="Employee created successfully.",
            status=201,
            user=user_json(created.user),
            credentials={"employee_id": created.user.employee_code, "password": created.password},
            note="Employee can login immediately with Employee ID and password.",
        )

    @app.route("/api/admin/employees/<int:user_id>", methods=["GET"], endpoint="admin_get_employee")
    @admin_required
    def admin_get_employee(user_id: int):
        return ok(detail_json(container.user_service.get_user(user_id), admin_view=True))

    @app.route("/api/admin/employees/<int:user_id>", methods=["PUT"], endpoint="admin_update_employee")
    @admin_required
    def admin_update_employee(user_id: int):
        item = container.user_service.update_user(user_id, json_body())
        return ok(detail_json(item), message="Employee updated successfully.")

    @app.route("/api/admin/employees/<int:user_id>", methods=["DELETE"], endpoint="admin_delete_employee")
    @admin_required
    def admin_delete_employee(user_id: int):
        container.user_service.delete_user(current_user_id=current_user_id(), user_id=user_id)
        return ok(message="Employee deleted successfully.")

    # --- employee: read-only directory ---

    @app.route("/api/employee/employees", methods=["GET"], endpoint="directory")
    @employee_required
    def directory():
        page = container.user_service.list_directory(
            search=request.args.get("search"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return ok(page.to_dict(detail_json))

    @app.route("/api/employee/employees/<int:user_id>", methods=["GET"], endpoint="directory_entry")
    @employee_required
    def directory_entry(user_id: int):
        return ok(detail_json(container.user_service.view_directory_entry(user_id)))

    @app.route("/api/employee/employees/statuses/today", methods=["GET"], endpoint="employee_statuses")
    @employee_required
    def employee_statuses():
        statuses = container.user_service.employee_statuses()
        return ok({str(user_id): status.value for user_id, status in statuses.items()})

    # --- own profile ---

    def _get_profile():
        item = container.user_service.get_profile(current_user_id=current_user_id(), current_role=current_role())
        return ok(detail_json(item))

    def _update_profile():
        item = container.user_service.update_profile(
            current_user_id=current_user_id(),
            current_role=current_role(),
            data=json_body(),
        )
        return ok(detail_json(item), message="Profile updated successfully.")

    app.add_url_rule("/api/employee/profile", "employee_profile", employee_required(_get_profile), methods=["GET"])
    app.add_url_rule(
        "/api/employee/profile", "employee_profile_update", employee_required(_update_profile), methods=["PUT"]
    )
    app.add_url_rule("/api/profile", "profile", login_required(_get_profile), methods=["GET"])
    app.add_url_rule("/api/profile", "profile_update", login_required(_update_profile), methods=["PUT"])
