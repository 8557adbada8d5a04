from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_month
from ..common.http import (
    admin_required,
    current_user_id,
    employee_required,
    iso,
    json_body,
    ok,
    optional_int,
    optional_str,
    required_int,
)
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, DeletionResult
from .query import AttendanceQuery


def record_to_json(record: AttendanceRecord) -> dict:
    snap = record.slot_snapshot
    return {
        "id": record.attendance_id,
        "slotId": record.slot_id,
        "slotName": snap.name,
        "slotStartMinutes": snap.start_minutes,
        "slotEndMinutes": snap.end_minutes,
        "date": iso(record.attendance_date),
        "time": record.attendance_time.isoformat() if record.attendance_time else None,
        "status": record.status.value,
        "slotSalary": float(record.slot_salary),
        "lateByMinutes": record.late_by_minutes,
        "warningMessage": record.warning_message,
        "adminNote": record.admin_note,
    }


def day_to_json(day) -> dict:
    return {
        "date": iso(day.attendance_date),
        "employeeId": day.employee_code,
        "name": day.full_name,
        "slots": [record_to_json(r) for r in day.records],
        "dailySalary": float(day.daily_salary),
    }


def _deletion_json(result: DeletionResult) -> dict:
    return {
        "deletedAny": result.deleted_any,
        "deletedRecords": result.deleted_records,
        "deletedLogs": result.deleted_logs,
    }


def _month_arg() -> str:
    month = request.args.get("month")
    if not month:
        raise ValidationError("month is required (YYYY-MM)")
    return month


def register(app: Flask, container) -> None:
    def _day_key(body: dict):
        employee_code = optional_str(body, "employeeId")
        if not employee_code:
            raise ValidationError("employeeId is required")
        day = parse_iso_date(optional_str(body, "dateISO") or optional_str(body, "date") or "")
        return employee_code, day, optional_int(body, "slotId")

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @employee_required
    def attendance_mark():
        body = json_body()
        outcome = container.attendance_service.mark_attendance(current_user_id(), required_int(body, "slotId"))
        return ok({"attendance": record_to_json(outcome.record)}, 201)

    @app.route("/api/attendance/proposal", methods=["GET"], endpoint="attendance_proposal")
    @employee_required
    def attendance_proposal():
        p = container.payroll_report_service.salary_proposal()
        return ok(
            {
                "proposedSlots": p.proposed_slots,
                "proposedSalary": float(p.proposed_salary),
                "isLate": p.is_late,
                "lateByMinutes": p.late_by_minutes,
                "warningMessage": p.warning_message,
            }
        )

    @app.route("/api/attendance/me", methods=["GET"], endpoint="attendance_me")
    @employee_required
    def attendance_me():
        start, end = parse_month(_month_arg())
        days = container.payroll_report_service.attendance_by_date(
            AttendanceQuery(start_date=start, end_date=end, user_id=current_user_id())
        )
        return ok({"attendance": [day_to_json(d) for d in days]})

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="admin_attendance")
    @admin_required
    def admin_attendance():
        start, end = parse_month(_month_arg())
        user_id = None
        employee_code = request.args.get("employeeId")
        if employee_code:
            user_id = container.user_service.get_employee(employee_code).user_id
        days = container.payroll_report_service.attendance_by_date(
            AttendanceQuery(start_date=start, end_date=end, user_id=user_id)
        )
        return ok({"attendance": [day_to_json(d) for d in days]})

    @app.route("/api/admin/attendance/upsert", methods=["POST"], endpoint="admin_attendance_upsert")
    @admin_required
    def admin_attendance_upsert():
        body = json_body()
        employee_code, work_date, slot_id = _day_key(body)
        if slot_id is None:
            raise ValidationError("slotId is required")
        record = container.attendance_service.upsert_attendance(
            employee_code,
            work_date,
            slot_id,
            optional_str(body, "status") or "",
            attendance_time=optional_str(body, "attendanceTime"),
            admin_note=optional_str(body, "adminNote"),
            admin_user_id=current_user_id(),
        )
        return ok({"attendance": record_to_json(record)})

    @app.route("/api/admin/attendance/clear", methods=["POST"], endpoint="admin_attendance_clear")
    @admin_required
    def admin_attendance_clear():
        employee_code, work_date, slot_id = _day_key(json_body())
        result = container.attendance_service.clear_attendance(employee_code, work_date, slot_id)
        return ok(_deletion_json(result))

    @app.route("/api/admin/attendance/delete", methods=["POST"], endpoint="admin_attendance_delete")
    @admin_required
    def admin_attendance_delete():
        employee_code, work_date, slot_id = _day_key(json_body())
        result = container.attendance_service.delete_attendance(employee_code, work_date, slot_id)
        return ok(_deletion_json(result))
