from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

import pytest
from werkzeug.security import generate_password_hash

from src.slot_payroll.slot_payroll.approvals.service import ApprovalService
from src.slot_payroll.slot_payroll.attendance.model import (
    AttendanceRecord,
    AttendanceReportRow,
    DeletionResult,
    NewAttendance,
)
from src.slot_payroll.slot_payroll.attendance.query import AttendanceQuery
from src.slot_payroll.slot_payroll.attendance.service import AttendanceService
from src.slot_payroll.slot_payroll.common.cache import TTLCache
from src.slot_payroll.slot_payroll.core.enums import AttendanceStatus, Role
from src.slot_payroll.slot_payroll.core.exceptions import ConflictError
from src.slot_payroll.slot_payroll.payroll.service import PayrollReportService
from src.slot_payroll.slot_payroll.salary_logs.model import NewSalaryLog, SalaryLogEntry
from src.slot_payroll.slot_payroll.slots.model import Slot, SlotDraft
from src.slot_payroll.slot_payroll.slots.service import SlotService
from src.slot_payroll.slot_payroll.users.model import NewUser, User

IST = ZoneInfo("Asia/Kolkata")
WORK_DAY = date(2025, 3, 10)


class FixedClock:
    def __init__(self, now: datetime, tz: ZoneInfo = IST):
        self.tz = tz
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.users = {u.user_id: u for u in users}
        self._ids = itertools.count(max(self.users, default=0) + 1)
        self._seq = sum(1 for u in users if u.employee_code.startswith("EMP"))

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.employee_code == employee_code), None)

    def list_by_role(self, role: Role, *, active_only: bool = False):
        found = [u for u in self.users.values() if u.role == role and (u.is_active or not active_only)]
        return sorted(found, key=lambda u: u.employee_code)

    def next_employee_code(self) -> str:
        self._seq += 1
        return f"EMP{self._seq:06d}"

    def create(self, new: NewUser) -> int:
        user_id = next(self._ids)
        self.users[user_id] = User(user_id=user_id, **vars(new))
        return user_id

    def update_profile(self, user_id: int, *, full_name, email, phone, is_active) -> bool:
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(
            self.users[user_id], full_name=full_name, email=email, phone=phone, is_active=is_active
        )
        return True

    def set_password(self, user_id: int, *, password_hash: str, must_change_password: bool) -> bool:
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(
            self.users[user_id], password_hash=password_hash, must_change_password=must_change_password
        )
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(user_id, None) is not None


class InMemorySlots:
    def __init__(self, slots: list[Slot] = ()):
        self.slots = {s.slot_id: s for s in slots}
        self._ids = itertools.count(max(self.slots, default=0) + 1)
        self.get_calls = 0

    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        self.get_calls += 1
        return self.slots.get(slot_id)

    def list_all(self):
        return list(self.slots.values())

    def list_active(self, *, exclude_id: Optional[int] = None):
        return [s for s in self.slots.values() if s.is_active and s.slot_id != exclude_id]

    def create(self, draft: SlotDraft) -> int:
        slot_id = next(self._ids)
        self.slots[slot_id] = Slot(slot_id=slot_id, **vars(draft))
        return slot_id

    def update(self, slot_id: int, draft: SlotDraft) -> bool:
        if slot_id not in self.slots:
            return False
        self.slots[slot_id] = Slot(slot_id=slot_id, **vars(draft))
        return True

    def delete(self, slot_id: int) -> bool:
        return self.slots.pop(slot_id, None) is not None


class InMemoryAttendance:
    """Mirrors the MySQL store: unique (user, date, slot) key and same-transaction salary logs."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.records: dict[int, AttendanceRecord] = {}
        self.logs: list[SalaryLogEntry] = []
        self._ids = itertools.count(1)
        self._log_ids = itertools.count(1)

    def _log(self, record: AttendanceRecord, salary_log: Optional[NewSalaryLog]) -> None:
        if salary_log is None:
            return
        self.logs.append(
            SalaryLogEntry(
                log_id=next(self._log_ids),
                user_id=record.user_id,
                attendance_id=record.attendance_id,
                attendance_date=record.attendance_date,
                slots=salary_log.slots,
                amount=record.slot_salary,
                action=salary_log.action,
                created_by=salary_log.created_by,
                created_at=salary_log.created_at,
            )
        )

    def logs_for(self, attendance_id: int) -> list[SalaryLogEntry]:
        return [log for log in self.logs if log.attendance_id == attendance_id]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def _find(self, *, user_id: int, attendance_date: date, slot_id: int) -> Optional[AttendanceRecord]:
        for r in self.records.values():
            if (r.user_id, r.attendance_date, r.slot_id) == (user_id, attendance_date, slot_id):
                return r
        return None

    def insert(self, new: NewAttendance, *, salary_log: Optional[NewSalaryLog] = None) -> AttendanceRecord:
        if self._find(user_id=new.user_id, attendance_date=new.attendance_date, slot_id=new.slot_id):
            raise ConflictError("Attendance already marked for this slot today")
        record = AttendanceRecord(attendance_id=next(self._ids), **vars(new))
        self.records[record.attendance_id] = record
        self._log(record, salary_log)
        return record

    def upsert(self, new: NewAttendance, *, salary_log: Optional[NewSalaryLog] = None) -> AttendanceRecord:
        existing = self._find(user_id=new.user_id, attendance_date=new.attendance_date, slot_id=new.slot_id)
        attendance_id = existing.attendance_id if existing else next(self._ids)
        record = AttendanceRecord(attendance_id=attendance_id, **vars(new))
        self.records[attendance_id] = record
        self.logs = [log for log in self.logs if log.attendance_id != attendance_id]
        self._log(record, salary_log)
        return record

    def decide_pending(self, *, attendance_id, status, reviewed_by, reviewed_at, admin_note=None, salary_log=None):
        current = self.records.get(attendance_id)
        if not current or current.status != AttendanceStatus.PENDING:
            return None
        if status == AttendanceStatus.APPROVED:
            record = replace(current, status=status, slot_salary=current.slot_snapshot.salary, warning_message="")
        else:
            record = replace(current, status=status, slot_salary=Decimal("0"))
        record = replace(
            record,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            admin_note=current.admin_note if admin_note is None else admin_note,
        )
        self.records[attendance_id] = record
        self._log(record, salary_log)
        return record

    def delete_for_day(self, *, user_id, attendance_date, slot_id=None, purge_salary_logs: bool) -> DeletionResult:
        ids = [
            r.attendance_id
            for r in self.records.values()
            if r.user_id == user_id and r.attendance_date == attendance_date and (slot_id is None or r.slot_id == slot_id)
        ]
        deleted_logs = 0
        if purge_salary_logs:
            before = len(self.logs)
            self.logs = [log for log in self.logs if log.attendance_id not in ids]
            deleted_logs = before - len(self.logs)
        for attendance_id in ids:
            del self.records[attendance_id]
        return DeletionResult(deleted_records=len(ids), deleted_logs=deleted_logs)

    def list_report_rows(self, query: AttendanceQuery):
        rows = []
        for r in self.records.values():
            if not (query.start_date <= r.attendance_date <= query.end_date):
                continue
            if query.user_id is not None and r.user_id != query.user_id:
                continue
            if query.status is not None and r.status != query.status:
                continue
            user = self._users.get_by_id(r.user_id)
            rows.append(AttendanceReportRow(record=r, employee_code=user.employee_code, full_name=user.full_name))
        rows.sort(key=lambda row: (row.record.attendance_date, row.employee_code, row.record.slot_snapshot.end_minutes))
        return rows


class InMemorySalaryLogs:
    """Read side over the logs kept by InMemoryAttendance."""

    def __init__(self, attendance: InMemoryAttendance):
        self._attendance = attendance

    def list_for_user(self, *, user_id: int, start_date=None, end_date=None):
        return [
            log
            for log in self._attendance.logs
            if log.user_id == user_id
            and (start_date is None or log.attendance_date >= start_date)
            and (end_date is None or log.attendance_date <= end_date)
        ]


def make_user(user_id: int, code: str, name: str, *, role: Role = Role.EMPLOYEE, password: str = "secret1", **kw) -> User:
    return User(
        user_id=user_id,
        employee_code=code,
        full_name=name,
        password_hash=generate_password_hash(password),
        role=role,
        **kw,
    )


def default_slots() -> list[Slot]:
    return [
        Slot(slot_id=1, name="Morning", start_minutes=600, end_minutes=720, salary=Decimal("200"), sort_order=1),
        Slot(slot_id=2, name="Afternoon", start_minutes=900, end_minutes=1020, salary=Decimal("200"), sort_order=2),
        Slot(slot_id=3, name="Evening", start_minutes=1140, end_minutes=1260, salary=Decimal("200"), sort_order=3),
    ]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 10, 11, 0))


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        [
            make_user(1, "ADMIN", "Admin", role=Role.ADMIN, password="admin123"),
            make_user(2, "EMP000001", "Asha"),
            make_user(3, "EMP000002", "Ravi"),
            make_user(4, "EMP000003", "Old Timer", is_active=False),
        ]
    )


@pytest.fixture
def slots_repo() -> InMemorySlots:
    return InMemorySlots(default_slots())


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def slot_service(slots_repo) -> SlotService:
    return SlotService(slots_repo, cache=TTLCache())


@pytest.fixture
def attendance_service(attendance_repo, slot_service, users_repo, clock) -> AttendanceService:
    return AttendanceService(attendance_repo, slot_service, users_repo, clock=clock)


@pytest.fixture
def approval_service(attendance_repo, clock) -> ApprovalService:
    return ApprovalService(attendance_repo, clock=clock)


@pytest.fixture
def report_service(attendance_repo, users_repo, slot_service, clock) -> PayrollReportService:
    return PayrollReportService(attendance_repo, users_repo, slot_service, clock=clock)


@pytest.fixture
def in_memory_slots():
    return InMemorySlots


@pytest.fixture
def salary_logs_repo(attendance_repo) -> InMemorySalaryLogs:
    return InMemorySalaryLogs(attendance_repo)
