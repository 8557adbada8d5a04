from __future__ import annotations

from decimal import Decimal

from flask import Flask, request

from ..common.datetime_utils import parse_month
from ..common.http import admin_required, iso, ok
from ..core.exceptions import ValidationError
from .model import SalaryLogEntry


def log_to_json(entry: SalaryLogEntry) -> dict:
    return {
        "id": entry.log_id,
        "attendanceId": entry.attendance_id,
        "date": iso(entry.attendance_date),
        "slots": entry.slots,
        "amount": float(entry.amount),
        "action": entry.action.value,
        "createdBy": entry.created_by,
        "createdAt": entry.created_at.isoformat() if entry.created_at else None,
    }


def register(app: Flask, container) -> None:
    @app.route("/api/admin/salary-logs", methods=["GET"], endpoint="admin_salary_logs")
    @admin_required
    def admin_salary_logs():
        month = request.args.get("month")
        if not month:
            raise ValidationError("month is required (YYYY-MM)")
        start, end = parse_month(month)
        user = container.user_service.get_employee(request.args.get("employeeId") or "")

        logs = container.salary_logs_repo.list_for_user(user_id=user.user_id, start_date=start, end_date=end)
        return ok(
            {
                "employeeId": user.employee_code,
                "month": month,
                "logs": [log_to_json(e) for e in logs],
                "totalAmount": float(sum((e.amount for e in logs), Decimal("0"))),
            }
        )
