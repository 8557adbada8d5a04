from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class DailyReportRow:
    employee_code: str
    full_name: str
    status: AttendanceStatus
    slots_count: int
    daily_salary: Decimal


@dataclass(frozen=True)
class MonthlySalaryRow:
    employee_code: str
    full_name: str
    approved_slots: int
    pending_slots: int
    rejected_slots: int
    total_salary: Decimal


@dataclass(frozen=True)
class DaySummary:
    """One calendar day of one employee; ``records`` is empty for ABSENT days."""

    attendance_date: date
    status: AttendanceStatus
    daily_salary: Decimal
    records: List[AttendanceRecord] = field(default_factory=list)


@dataclass(frozen=True)
class EmployeeSummary:
    employee_code: str
    full_name: str
    days: List[DaySummary]
    total_salary: Decimal


@dataclass(frozen=True)
class DayAttendance:
    """Records of one employee on one date, as listed in the attendance views."""

    attendance_date: date
    employee_code: str
    full_name: str
    records: List[AttendanceRecord]
    daily_salary: Decimal


@dataclass(frozen=True)
class SalarySlip:
    employee_code: str
    full_name: str
    start_date: date
    end_date: date
    records: List[AttendanceRecord]
    total_salary: Decimal
