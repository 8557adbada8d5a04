from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import GRACE_MINUTES
from .model import SlotSnapshot
from .strategies.base import AttendanceStrategy, MarkDecision
from .strategies.grace_strategy import GracePeriodStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the classification strategy from minute-of-day vs slot end."""

    def for_mark(self, *, now_minutes: int, slot_end_minutes: int, grace_minutes: int) -> AttendanceStrategy:
        if now_minutes <= slot_end_minutes:
            return OnTimeStrategy()
        if now_minutes <= slot_end_minutes + grace_minutes:
            return GracePeriodStrategy()
        return LateStrategy()

    def classify(self, *, now_minutes: int, slot: SlotSnapshot, grace_minutes: int = GRACE_MINUTES) -> MarkDecision:
        strategy = self.for_mark(now_minutes=now_minutes, slot_end_minutes=slot.end_minutes, grace_minutes=grace_minutes)
        return strategy.decide_mark(now_minutes=now_minutes, slot=slot, grace_minutes=grace_minutes)
