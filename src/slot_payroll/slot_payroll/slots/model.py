from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


def windows_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open [start, end) overlap; touching endpoints do not overlap."""
    return start_a < end_b and start_b < end_a


@dataclass(frozen=True)
class Slot:
    """Domain entity: a named daily time window paying a flat salary."""

    slot_id: int
    name: str
    start_minutes: int
    end_minutes: int
    salary: Decimal
    is_active: bool = True
    sort_order: int = 0

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        return windows_overlap(self.start_minutes, self.end_minutes, start_minutes, end_minutes)


@dataclass(frozen=True)
class SlotDraft:
    """Validated field set for a slot insert or a full-row update."""

    name: str
    start_minutes: int
    end_minutes: int
    salary: Decimal
    is_active: bool = True
    sort_order: int = 0


def admin_sort_key(slot: Slot) -> tuple:
    return (not slot.is_active, slot.sort_order, slot.end_minutes)


def employee_sort_key(slot: Slot) -> tuple:
    return (slot.sort_order, slot.end_minutes)
