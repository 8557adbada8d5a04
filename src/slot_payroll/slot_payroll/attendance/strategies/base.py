from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from ...core.enums import AttendanceStatus
from ..model import SlotSnapshot


@dataclass(frozen=True)
class MarkDecision:
    status: AttendanceStatus
    slot_salary: Decimal
    late_by_minutes: int = 0
    warning_message: str = ""


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a mark against one slot is classified."""

    @abstractmethod
    def decide_mark(self, *, now_minutes: int, slot: SlotSnapshot, grace_minutes: int) -> MarkDecision:
        raise NotImplementedError
