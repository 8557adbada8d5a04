from __future__ import annotations

from decimal import Decimal

from ...core.enums import AttendanceStatus
from ..model import SlotSnapshot
from .base import AttendanceStrategy, MarkDecision


class LateStrategy(AttendanceStrategy):
    """Marked after the grace window: rejected, and never approvable later."""

    def decide_mark(self, *, now_minutes: int, slot: SlotSnapshot, grace_minutes: int) -> MarkDecision:
        late_by = now_minutes - slot.end_minutes
        return MarkDecision(
            status=AttendanceStatus.REJECTED,
            slot_salary=Decimal("0"),
            late_by_minutes=late_by,
            warning_message=f"Late by {late_by} minute(s). Attendance rejected.",
        )
