from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from ..salary_logs.model import NewSalaryLog
from .model import AttendanceRecord, AttendanceReportRow, DeletionResult, NewAttendance
from .query import AttendanceQuery


class AttendanceRepository(Protocol):
    """Ledger store. Each write runs as one transaction together with its salary log changes."""

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, new: NewAttendance, *, salary_log: Optional[NewSalaryLog] = None) -> AttendanceRecord:
        """Insert a new record.

        Raises ConflictError when (user_id, attendance_date, slot_id) already exists.
        """

        raise NotImplementedError

    def upsert(self, new: NewAttendance, *, salary_log: Optional[NewSalaryLog] = None) -> AttendanceRecord:
        """Create or overwrite the record for the key, replacing its salary logs."""

        raise NotImplementedError

    def decide_pending(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_note: Optional[str] = None,
        salary_log: Optional[NewSalaryLog] = None,
    ) -> Optional[AttendanceRecord]:
        """Move a PENDING record to APPROVED (snapshot salary) or REJECTED (0).

        Returns None when no PENDING record with that id exists.
        """

        raise NotImplementedError

    def delete_for_day(
        self,
        *,
        user_id: int,
        attendance_date: date,
        slot_id: Optional[int] = None,
        purge_salary_logs: bool,
    ) -> DeletionResult:
        raise NotImplementedError

    def list_report_rows(self, query: AttendanceQuery) -> Sequence[AttendanceReportRow]:
        """Records joined with employees, ordered by date, employee code, slot end."""

        raise NotImplementedError
