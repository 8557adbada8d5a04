from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from ..common.clock import Clock
from ..common.datetime_utils import at_local_time, minutes_since_midnight, parse_local_datetime, to_naive_local
from ..common.validators import clean_note
from ..core.constants import DEFAULT_UPSERT_HOUR, GRACE_MINUTES, MAX_ADMIN_NOTE_LENGTH
from ..core.enums import STORED_STATUSES, AttendanceStatus, Role, SalaryAction
from ..core.exceptions import NotFoundError, ValidationError
from ..salary_logs.model import NewSalaryLog
from ..slots.service import SlotService
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, DeletionResult, NewAttendance, SlotSnapshot
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkOutcome:
    record: AttendanceRecord

    @property
    def status(self) -> AttendanceStatus:
        return self.record.status

    @property
    def slot_salary(self) -> Decimal:
        return self.record.slot_salary

    @property
    def late_by_minutes(self) -> int:
        return self.record.late_by_minutes

    @property
    def warning_message(self) -> str:
        return self.record.warning_message


def _coerce_status(value: Union[AttendanceStatus, str]) -> AttendanceStatus:
    try:
        status = AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status {value!r}")
    if status not in STORED_STATUSES:
        raise ValidationError("Status must be APPROVED, PENDING or REJECTED")
    return status


class AttendanceService:
    """Attendance ledger: employee marks plus admin upsert / clear / delete."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        slots: SlotService,
        users: UserRepository,
        *,
        clock: Clock,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        grace_minutes: int = GRACE_MINUTES,
    ):
        self._attendance = attendance
        self._slots = slots
        self._users = users
        self._clock = clock
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._grace_minutes = int(grace_minutes)

    def _user_id_for(self, employee_code: str) -> int:
        user = self._users.get_by_employee_code((employee_code or "").strip())
        if not user or user.role != Role.EMPLOYEE:
            raise NotFoundError("Employee not found")
        return user.user_id

    def mark_attendance(self, user_id: int, slot_id: int, *, now: Optional[datetime] = None) -> MarkOutcome:
        now = to_naive_local(now or self._clock.now(), self._clock.tz)
        today = now.date()

        slot = self._slots.get_active_slot(slot_id)
        snapshot = SlotSnapshot.of(slot)
        decision = self._factory.classify(
            now_minutes=minutes_since_midnight(now),
            slot=snapshot,
            grace_minutes=self._grace_minutes,
        )

        salary_log = None
        if decision.status == AttendanceStatus.APPROVED:
            salary_log = NewSalaryLog(action=SalaryAction.AUTO_APPROVED, created_by=None, created_at=now)

        # The unique key on (user, date, slot) turns a duplicate into ConflictError.
        record = self._attendance.insert(
            NewAttendance(
                user_id=int(user_id),
                attendance_date=today,
                slot_id=slot.slot_id,
                attendance_time=now,
                status=decision.status,
                slot_salary=decision.slot_salary,
                slot_snapshot=snapshot,
                late_by_minutes=decision.late_by_minutes,
                warning_message=decision.warning_message,
            ),
            salary_log=salary_log,
        )
        logger.info(
            "user %s marked slot %s on %s: %s (late %s min)",
            user_id, slot.slot_id, today, record.status.value, record.late_by_minutes,
        )
        return MarkOutcome(record=record)

    def upsert_attendance(
        self,
        employee_code: str,
        work_date: date,
        slot_id: int,
        status: Union[AttendanceStatus, str],
        *,
        attendance_time: Optional[Union[datetime, str]] = None,
        admin_note: Optional[str] = None,
        admin_user_id: int,
    ) -> AttendanceRecord:
        status = _coerce_status(status)
        user_id = self._user_id_for(employee_code)
        slot = self._slots.get_slot(slot_id)
        note = clean_note(admin_note, MAX_ADMIN_NOTE_LENGTH) or ""

        if attendance_time is None:
            stamped = at_local_time(work_date, DEFAULT_UPSERT_HOUR)
        elif isinstance(attendance_time, str):
            stamped = parse_local_datetime(attendance_time, self._clock.tz)
        else:
            stamped = to_naive_local(attendance_time, self._clock.tz)

        now = to_naive_local(self._clock.now(), self._clock.tz)
        snapshot = SlotSnapshot.of(slot)
        salary_log = None
        if status == AttendanceStatus.APPROVED:
            salary_log = NewSalaryLog(action=SalaryAction.ADMIN_MODIFIED, created_by=int(admin_user_id), created_at=now)

        record = self._attendance.upsert(
            NewAttendance(
                user_id=user_id,
                attendance_date=work_date,
                slot_id=slot.slot_id,
                attendance_time=stamped,
                status=status,
                slot_salary=snapshot.salary if status == AttendanceStatus.APPROVED else Decimal("0"),
                slot_snapshot=snapshot,
                admin_note=note,
                reviewed_by=int(admin_user_id),
                reviewed_at=now,
            ),
            salary_log=salary_log,
        )
        logger.info(
            "admin %s set %s %s slot %s to %s",
            admin_user_id, employee_code, work_date, slot.slot_id, status.value,
        )
        return record

    def clear_attendance(self, employee_code: str, work_date: date, slot_id: Optional[int] = None) -> DeletionResult:
        """Reset the day (or one slot) to absent, purging the matching salary logs."""
        result = self._attendance.delete_for_day(
            user_id=self._user_id_for(employee_code),
            attendance_date=work_date,
            slot_id=slot_id,
            purge_salary_logs=True,
        )
        logger.info(
            "cleared %s on %s slot=%s: %s record(s), %s log(s)",
            employee_code, work_date, slot_id, result.deleted_records, result.deleted_logs,
        )
        return result

    def delete_attendance(self, employee_code: str, work_date: date, slot_id: Optional[int] = None) -> DeletionResult:
        """Remove records but keep their salary logs as audit trail."""
        result = self._attendance.delete_for_day(
            user_id=self._user_id_for(employee_code),
            attendance_date=work_date,
            slot_id=slot_id,
            purge_salary_logs=False,
        )
        logger.info(
            "deleted %s on %s slot=%s: %s record(s)",
            employee_code, work_date, slot_id, result.deleted_records,
        )
        return result
