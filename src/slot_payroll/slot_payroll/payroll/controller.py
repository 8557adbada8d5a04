from __future__ import annotations

import csv
import io
from datetime import date

import pandas as pd
from flask import Flask, request, send_file

from ..attendance.controller import record_to_json
from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, current_user_id, employee_required, iso, ok
from ..core.exceptions import ValidationError
from .model import DailyReportRow, EmployeeSummary, MonthlySalaryRow

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def daily_row_to_json(row: DailyReportRow) -> dict:
    return {
        "employeeId": row.employee_code,
        "name": row.full_name,
        "status": row.status.value,
        "slotsCount": row.slots_count,
        "dailySalary": float(row.daily_salary),
    }


def monthly_row_to_json(row: MonthlySalaryRow) -> dict:
    return {
        "employeeId": row.employee_code,
        "name": row.full_name,
        "approvedSlots": row.approved_slots,
        "pendingSlots": row.pending_slots,
        "rejectedSlots": row.rejected_slots,
        "totalSalary": float(row.total_salary),
    }


def summary_to_json(summary: EmployeeSummary) -> dict:
    return {
        "employee": {"employeeId": summary.employee_code, "name": summary.full_name},
        "totalSalary": float(summary.total_salary),
        "days": [
            {
                "date": iso(d.attendance_date),
                "status": d.status.value,
                "slots": [
                    {"slotName": r.slot_snapshot.name, "status": r.status.value, "slotSalary": float(r.slot_salary)}
                    for r in d.records
                ],
                "dailySalary": float(d.daily_salary),
            }
            for d in summary.days
        ],
    }


def _require_arg(name: str) -> str:
    value = request.args.get(name)
    if not value:
        raise ValidationError(f"{name} is required")
    return value


def register(app: Flask, container) -> None:
    def _day_arg() -> date:
        value = request.args.get("date")
        return parse_iso_date(value) if value else container.clock.now().date()

    def _csv_response(*, fieldnames: list[str], rows: list[dict], filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/reports/daily", methods=["GET"], endpoint="report_daily")
    @admin_required
    def report_daily():
        day = _day_arg()
        rows = container.payroll_report_service.daily_report(day)
        return ok({"date": iso(day), "rows": [daily_row_to_json(r) for r in rows]})

    @app.route("/api/admin/reports/daily.csv", methods=["GET"], endpoint="report_daily_csv")
    @admin_required
    def report_daily_csv():
        day = _day_arg()
        rows = container.payroll_report_service.daily_report(day)
        return _csv_response(
            fieldnames=["EmployeeId", "Name", "Status", "Slots", "DailySalary"],
            rows=[
                {
                    "EmployeeId": r.employee_code,
                    "Name": r.full_name,
                    "Status": r.status.value,
                    "Slots": r.slots_count,
                    "DailySalary": r.daily_salary,
                }
                for r in rows
            ],
            filename=f"daily_{day.strftime('%Y%m%d')}.csv",
        )

    @app.route("/api/admin/reports/monthly-salary", methods=["GET"], endpoint="report_monthly")
    @admin_required
    def report_monthly():
        month = _require_arg("month")
        rows = container.payroll_report_service.monthly_salary(month)
        return ok({"month": month, "rows": [monthly_row_to_json(r) for r in rows]})

    @app.route("/api/admin/reports/monthly-salary.xlsx", methods=["GET"], endpoint="report_monthly_xlsx")
    @admin_required
    def report_monthly_xlsx():
        month = _require_arg("month")
        rows = container.payroll_report_service.monthly_salary(month)
        df = pd.DataFrame(
            [
                {
                    "Month": month,
                    "EmployeeId": r.employee_code,
                    "Name": r.full_name,
                    "ApprovedSlots": r.approved_slots,
                    "PendingSlots": r.pending_slots,
                    "RejectedSlots": r.rejected_slots,
                    "TotalSalary": float(r.total_salary),
                }
                for r in rows
            ],
            columns=["Month", "EmployeeId", "Name", "ApprovedSlots", "PendingSlots", "RejectedSlots", "TotalSalary"],
        )

        # In-memory workbook, never written to disk.
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="MonthlySalary")
        output.seek(0)
        return send_file(
            output,
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=f"monthly_salary_{month}.xlsx",
        )

    @app.route("/api/admin/reports/employee-summary", methods=["GET"], endpoint="report_employee_summary")
    @admin_required
    def report_employee_summary():
        summary = container.payroll_report_service.employee_summary(_require_arg("employeeId"), _require_arg("month"))
        return ok(summary_to_json(summary))

    @app.route("/api/admin/reports/employee-summary.csv", methods=["GET"], endpoint="report_employee_summary_csv")
    @admin_required
    def report_employee_summary_csv():
        month = _require_arg("month")
        summary = container.payroll_report_service.employee_summary(_require_arg("employeeId"), month)
        return _csv_response(
            fieldnames=["Date", "Status", "Slots", "DailySalary"],
            rows=[
                {
                    "Date": iso(d.attendance_date),
                    "Status": d.status.value,
                    "Slots": len(d.records),
                    "DailySalary": d.daily_salary,
                }
                for d in summary.days
            ],
            filename=f"{summary.employee_code}_{month}.csv",
        )

    @app.route("/api/reports/me/salary-slip", methods=["GET"], endpoint="report_salary_slip")
    @employee_required
    def report_salary_slip():
        month = _require_arg("month")
        slip = container.payroll_report_service.salary_slip(current_user_id(), month)
        return ok(
            {
                "employee": {"employeeId": slip.employee_code, "name": slip.full_name},
                "month": month,
                "records": [record_to_json(r) for r in slip.records],
                "totalSalary": float(slip.total_salary),
            }
        )
