from __future__ import annotations

import logging
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock
from ..common.datetime_utils import to_naive_local
from ..common.validators import clean_note
from ..core.constants import MAX_ADMIN_NOTE_LENGTH
from ..core.enums import AttendanceStatus, SalaryAction
from ..core.exceptions import InvalidStateError, NotFoundError
from ..salary_logs.model import NewSalaryLog

logger = logging.getLogger(__name__)


class ApprovalService:
    """Admin review of PENDING records.

    The status guard lives in the repository's UPDATE, so two concurrent
    approvals cannot both succeed.
    """

    def __init__(self, attendance: AttendanceRepository, *, clock: Clock):
        self._attendance = attendance
        self._clock = clock

    def _require_pending(self, attendance_id: int, verb: str) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance not found")
        if record.status != AttendanceStatus.PENDING:
            raise InvalidStateError(
                f"Cannot {verb} attendance with status {record.status.value}. Only PENDING slots can be {verb}d."
            )
        return record

    def _decide(
        self,
        attendance_id: int,
        status: AttendanceStatus,
        verb: str,
        *,
        admin_user_id: int,
        admin_note: Optional[str],
    ) -> AttendanceRecord:
        self._require_pending(attendance_id, verb)
        now = to_naive_local(self._clock.now(), self._clock.tz)

        salary_log = None
        if status == AttendanceStatus.APPROVED:
            salary_log = NewSalaryLog(action=SalaryAction.ADMIN_APPROVED, created_by=int(admin_user_id), created_at=now)

        record = self._attendance.decide_pending(
            attendance_id=int(attendance_id),
            status=status,
            reviewed_by=int(admin_user_id),
            reviewed_at=now,
            admin_note=clean_note(admin_note, MAX_ADMIN_NOTE_LENGTH),
            salary_log=salary_log,
        )
        if record is None:
            # Lost a race: someone else decided (or deleted) it since the read.
            self._require_pending(attendance_id, verb)
            raise InvalidStateError(f"Cannot {verb} attendance: it is no longer PENDING.")

        logger.info("admin %s %sd attendance %s", admin_user_id, verb, attendance_id)
        return record

    def approve(self, attendance_id: int, *, admin_user_id: int, admin_note: Optional[str] = None) -> AttendanceRecord:
        return self._decide(
            attendance_id, AttendanceStatus.APPROVED, "approve",
            admin_user_id=admin_user_id, admin_note=admin_note,
        )

    def reject(self, attendance_id: int, *, admin_user_id: int, admin_note: Optional[str] = None) -> AttendanceRecord:
        return self._decide(
            attendance_id, AttendanceStatus.REJECTED, "reject",
            admin_user_id=admin_user_id, admin_note=admin_note,
        )
