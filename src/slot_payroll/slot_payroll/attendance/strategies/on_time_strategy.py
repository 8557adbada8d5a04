from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import SlotSnapshot
from .base import AttendanceStrategy, MarkDecision


class OnTimeStrategy(AttendanceStrategy):
    """Marked on or before slot end: approved with the full slot salary."""

    def decide_mark(self, *, now_minutes: int, slot: SlotSnapshot, grace_minutes: int) -> MarkDecision:
        return MarkDecision(status=AttendanceStatus.APPROVED, slot_salary=slot.salary)
