from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus
from ..slots.model import Slot


@dataclass(frozen=True)
class SlotSnapshot:
    """Copy of a slot's defining fields taken when a record is written.

    Records keep their snapshot even after the slot is edited or deleted.
    """

    slot_id: int
    name: str
    start_minutes: int
    end_minutes: int
    salary: Decimal

    @classmethod
    def of(cls, slot: Slot) -> "SlotSnapshot":
        return cls(
            slot_id=slot.slot_id,
            name=slot.name,
            start_minutes=slot.start_minutes,
            end_minutes=slot.end_minutes,
            salary=slot.salary,
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance mark for (user, date, slot)."""

    attendance_id: int
    user_id: int
    attendance_date: date
    slot_id: int
    attendance_time: datetime
    status: AttendanceStatus
    slot_salary: Decimal
    slot_snapshot: SlotSnapshot
    late_by_minutes: int = 0
    warning_message: str = ""
    admin_note: str = ""
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewAttendance:
    """Field set for inserting or overwriting a record; the key is (user_id, attendance_date, slot_id)."""

    user_id: int
    attendance_date: date
    slot_id: int
    attendance_time: datetime
    status: AttendanceStatus
    slot_salary: Decimal
    slot_snapshot: SlotSnapshot
    late_by_minutes: int = 0
    warning_message: str = ""
    admin_note: str = ""
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports/exports: a record joined with its employee."""

    record: AttendanceRecord
    employee_code: str
    full_name: str


@dataclass(frozen=True)
class DeletionResult:
    deleted_records: int
    deleted_logs: int = 0

    @property
    def deleted_any(self) -> bool:
        return self.deleted_records > 0
