from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from ...attendance.model import AttendanceRecord, SlotSnapshot


@dataclass(frozen=True)
class SalaryProposal:
    proposed_slots: int
    proposed_salary: Decimal
    is_late: bool = False
    late_by_minutes: int = 0
    warning_message: str = ""


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def propose(self, *, now_minutes: int, slots: Sequence[SlotSnapshot], grace_minutes: int) -> SalaryProposal:
        raise NotImplementedError

    @abstractmethod
    def day_salary(self, records: Iterable[AttendanceRecord]) -> Decimal:
        raise NotImplementedError
