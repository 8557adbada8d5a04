from __future__ import annotations

from flask import Flask, request

from ..attendance.controller import record_to_json
from ..common.http import admin_required, current_user_id, ok, optional_str


def _note() -> str | None:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None
    return optional_str(body, "adminNote")


def register(app: Flask, container) -> None:
    @app.route("/api/admin/attendance/<int:attendance_id>/approve", methods=["POST"], endpoint="admin_attendance_approve")
    @admin_required
    def admin_attendance_approve(attendance_id: int):
        record = container.approval_service.approve(
            attendance_id, admin_user_id=current_user_id(), admin_note=_note()
        )
        return ok({"attendance": record_to_json(record)})

    @app.route("/api/admin/attendance/<int:attendance_id>/reject", methods=["POST"], endpoint="admin_attendance_reject")
    @admin_required
    def admin_attendance_reject(attendance_id: int):
        record = container.approval_service.reject(
            attendance_id, admin_user_id=current_user_id(), admin_note=_note()
        )
        return ok({"attendance": record_to_json(record)})
