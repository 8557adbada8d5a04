from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Slot, SlotDraft


class SlotRepository(Protocol):
    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Slot]:
        """All slots in admin order (active first, then sort_order, end_minutes)."""

        raise NotImplementedError

    def list_active(self, *, exclude_id: Optional[int] = None) -> Sequence[Slot]:
        """Active slots in employee order (sort_order, end_minutes)."""

        raise NotImplementedError

    def create(self, draft: SlotDraft) -> int:
        raise NotImplementedError

    def update(self, slot_id: int, draft: SlotDraft) -> bool:
        raise NotImplementedError

    def delete(self, slot_id: int) -> bool:
        raise NotImplementedError
