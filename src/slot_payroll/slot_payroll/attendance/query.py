from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceQuery:
    """Typed filter for ledger range reads (inclusive date range)."""

    start_date: date
    end_date: date
    user_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValidationError("End date must be on or after start date")
        if self.status == AttendanceStatus.ABSENT:
            raise ValidationError("ABSENT is derived, not stored; it cannot be used as a ledger filter")
