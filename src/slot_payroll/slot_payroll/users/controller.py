from __future__ import annotations

from flask import Flask, session

from ..common.http import admin_required, current_user_id, json_body, login_required, ok, optional_str
from ..core.exceptions import ValidationError
from .model import User


def user_to_json(user: User) -> dict:
    return {
        "id": user.user_id,
        "employeeId": user.employee_code,
        "name": user.full_name,
        "role": user.role.value,
        "mustChangePassword": user.must_change_password,
    }


def employee_to_json(user: User) -> dict:
    return {
        "id": user.user_id,
        "employeeId": user.employee_code,
        "name": user.full_name,
        "email": user.email or "",
        "phone": user.phone or "",
        "isActive": user.is_active,
        "mustChangePassword": user.must_change_password,
    }


def register(app: Flask, container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        s_user = container.auth_service.authenticate(
            optional_str(body, "employeeId") or "",
            optional_str(body, "password") or "",
        )

        session.clear()
        session["user_id"] = s_user.user_id
        session["employee_code"] = s_user.employee_code
        session["role"] = s_user.role.value
        return ok(
            {
                "user": {
                    "id": s_user.user_id,
                    "employeeId": s_user.employee_code,
                    "name": s_user.full_name,
                    "role": s_user.role.value,
                    "mustChangePassword": s_user.must_change_password,
                }
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @login_required
    def auth_logout():
        session.clear()
        return ok({"loggedOut": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        user = container.user_service.get_user(current_user_id())
        return ok({"user": user_to_json(user)})

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @login_required
    def auth_change_password():
        body = json_body()
        container.auth_service.change_password(
            current_user_id(),
            current_password=optional_str(body, "currentPassword") or "",
            new_password=optional_str(body, "newPassword") or "",
        )
        return ok({"changed": True})

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_employees")
    @admin_required
    def admin_employees():
        employees = container.user_service.list_employees()
        return ok({"employees": [employee_to_json(e) for e in employees]})

    @app.route("/api/admin/employees", methods=["POST"], endpoint="admin_employees_create")
    @admin_required
    def admin_employees_create():
        body = json_body()
        created = container.user_service.create_employee(
            full_name=optional_str(body, "name") or "",
            email=optional_str(body, "email"),
            phone=optional_str(body, "phone"),
            password=optional_str(body, "password"),
        )
        data = {"employee": employee_to_json(created.user)}
        if created.initial_password:
            data["initialPassword"] = created.initial_password
        return ok(data, 201)

    @app.route("/api/admin/employees/<code>/update", methods=["POST"], endpoint="admin_employees_update")
    @admin_required
    def admin_employees_update(code: str):
        body = json_body()
        is_active = body.get("isActive")
        if is_active is not None and not isinstance(is_active, bool):
            raise ValidationError("isActive must be a boolean")

        user = container.user_service.update_employee(
            code,
            full_name=optional_str(body, "name"),
            email=optional_str(body, "email"),
            phone=optional_str(body, "phone"),
            password=optional_str(body, "password"),
            is_active=is_active,
        )
        return ok({"employee": employee_to_json(user)})

    @app.route("/api/admin/employees/<code>/delete", methods=["POST"], endpoint="admin_employees_delete")
    @admin_required
    def admin_employees_delete(code: str):
        container.user_service.delete_employee(code)
        return ok({"deleted": True})
