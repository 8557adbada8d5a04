from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceRecord, SlotSnapshot
from ..attendance.query import AttendanceQuery
from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock
from ..common.datetime_utils import iter_days, minutes_since_midnight, parse_month, to_naive_local
from ..core.constants import GRACE_MINUTES
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFoundError
from ..slots.service import SlotService
from ..users.repository import UserRepository
from .calculator.base import PayrollCalculator, SalaryProposal
from .calculator.proposal_calculator import SlotProposalCalculator
from .model import DailyReportRow, DayAttendance, DaySummary, EmployeeSummary, MonthlySalaryRow, SalarySlip


def day_status(records: Sequence[AttendanceRecord]) -> AttendanceStatus:
    """Roll the slot statuses of one employee-day into a single status."""
    if not records:
        return AttendanceStatus.ABSENT
    statuses = {r.status for r in records}
    if statuses == {AttendanceStatus.APPROVED}:
        return AttendanceStatus.APPROVED
    if AttendanceStatus.PENDING in statuses:
        return AttendanceStatus.PENDING
    return AttendanceStatus.REJECTED


class PayrollReportService:
    """Read-only aggregation of the ledger into daily / monthly payroll views."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        slots: SlotService,
        *,
        clock: Clock,
        calculator: Optional[PayrollCalculator] = None,
        grace_minutes: int = GRACE_MINUTES,
    ):
        self._attendance = attendance
        self._users = users
        self._slots = slots
        self._clock = clock
        self._calculator = calculator or SlotProposalCalculator()
        self._grace_minutes = int(grace_minutes)

    def _records_by_user(self, query: AttendanceQuery) -> Dict[int, List[AttendanceRecord]]:
        by_user: Dict[int, List[AttendanceRecord]] = defaultdict(list)
        for row in self._attendance.list_report_rows(query):
            by_user[row.record.user_id].append(row.record)
        return by_user

    def _employee(self, employee_code: str):
        user = self._users.get_by_employee_code((employee_code or "").strip())
        if not user or user.role != Role.EMPLOYEE:
            raise NotFoundError("Employee not found")
        return user

    def daily_report(self, day: date) -> List[DailyReportRow]:
        by_user = self._records_by_user(AttendanceQuery(start_date=day, end_date=day))
        rows = []
        for e in self._users.list_by_role(Role.EMPLOYEE, active_only=True):
            records = by_user.get(e.user_id, [])
            rows.append(
                DailyReportRow(
                    employee_code=e.employee_code,
                    full_name=e.full_name,
                    status=day_status(records),
                    slots_count=len(records),
                    daily_salary=self._calculator.day_salary(records),
                )
            )
        return rows

    def monthly_salary(self, month: str) -> List[MonthlySalaryRow]:
        start, end = parse_month(month)
        by_user = self._records_by_user(AttendanceQuery(start_date=start, end_date=end))
        rows = []
        for e in self._users.list_by_role(Role.EMPLOYEE, active_only=True):
            records = by_user.get(e.user_id, [])
            counts = {status: 0 for status in (AttendanceStatus.APPROVED, AttendanceStatus.PENDING, AttendanceStatus.REJECTED)}
            for r in records:
                counts[r.status] += 1
            rows.append(
                MonthlySalaryRow(
                    employee_code=e.employee_code,
                    full_name=e.full_name,
                    approved_slots=counts[AttendanceStatus.APPROVED],
                    pending_slots=counts[AttendanceStatus.PENDING],
                    rejected_slots=counts[AttendanceStatus.REJECTED],
                    total_salary=self._calculator.day_salary(records),
                )
            )
        return rows

    def employee_summary(self, employee_code: str, month: str) -> EmployeeSummary:
        user = self._employee(employee_code)
        start, end = parse_month(month)

        by_date: Dict[date, List[AttendanceRecord]] = defaultdict(list)
        for row in self._attendance.list_report_rows(AttendanceQuery(start_date=start, end_date=end, user_id=user.user_id)):
            by_date[row.record.attendance_date].append(row.record)

        days = []
        for day in iter_days(start, end):
            records = by_date.get(day, [])
            days.append(
                DaySummary(
                    attendance_date=day,
                    status=day_status(records),
                    daily_salary=self._calculator.day_salary(records),
                    records=list(records),
                )
            )
        return EmployeeSummary(
            employee_code=user.employee_code,
            full_name=user.full_name,
            days=days,
            total_salary=sum((d.daily_salary for d in days), Decimal("0")),
        )

    def attendance_by_date(self, query: AttendanceQuery) -> List[DayAttendance]:
        grouped: Dict[Tuple[date, str], List] = {}
        for row in self._attendance.list_report_rows(query):
            grouped.setdefault((row.record.attendance_date, row.employee_code), []).append(row)

        out = []
        for (day, code), rows in grouped.items():
            records = [r.record for r in rows]
            out.append(
                DayAttendance(
                    attendance_date=day,
                    employee_code=code,
                    full_name=rows[0].full_name,
                    records=records,
                    daily_salary=self._calculator.day_salary(records),
                )
            )
        return out

    def salary_slip(self, user_id: int, month: str) -> SalarySlip:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        start, end = parse_month(month)
        rows = self._attendance.list_report_rows(
            AttendanceQuery(start_date=start, end_date=end, user_id=user.user_id, status=AttendanceStatus.APPROVED)
        )
        records = [r.record for r in rows]
        return SalarySlip(
            employee_code=user.employee_code,
            full_name=user.full_name,
            start_date=start,
            end_date=end,
            records=records,
            total_salary=self._calculator.day_salary(records),
        )

    def salary_proposal(self, *, now: Optional[datetime] = None) -> SalaryProposal:
        """What today's active slots would pay if marked at ``now``."""
        now = to_naive_local(now or self._clock.now(), self._clock.tz)
        snapshots = [SlotSnapshot.of(s) for s in self._slots.list_slots(active_only=True)]
        return self._calculator.propose(
            now_minutes=minutes_since_midnight(now),
            slots=snapshots,
            grace_minutes=self._grace_minutes,
        )
