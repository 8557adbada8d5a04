from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import SalaryAction


@dataclass(frozen=True)
class SalaryLogEntry:
    """Immutable audit row for one salary grant."""

    log_id: int
    user_id: int
    attendance_id: int
    attendance_date: date
    slots: int
    amount: Decimal
    action: SalaryAction
    created_by: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class NewSalaryLog:
    """A grant to record alongside a ledger write.

    The ledger fills in the attendance key and logs the record's granted slot_salary as the amount.
    """

    action: SalaryAction
    created_by: Optional[int]
    created_at: datetime
    slots: int = 1
