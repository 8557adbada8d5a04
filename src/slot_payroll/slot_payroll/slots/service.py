from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence, Union

from ..common.cache import ACTIVE_SLOTS_KEY, NullCache, SlotCache, slot_key
from ..common.validators import require_amount, require_max_length, require_non_empty
from ..core.constants import MAX_SLOT_NAME_LENGTH
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Slot, SlotDraft, admin_sort_key, employee_sort_key
from .repository import SlotRepository
from .timeparse import coerce_end_minutes, coerce_start_minutes

logger = logging.getLogger(__name__)

TimeInput = Union[int, str]


class SlotService:
    """Slot registry: CRUD over daily windows, keeping active slots non-overlapping."""

    def __init__(self, slots: SlotRepository, *, cache: Optional[SlotCache] = None):
        self._slots = slots
        self._cache = cache or NullCache()

    @staticmethod
    def _validated(draft: SlotDraft) -> SlotDraft:
        name = require_non_empty(draft.name, "Slot name")
        require_max_length(name, "Slot name", MAX_SLOT_NAME_LENGTH)
        if draft.end_minutes <= draft.start_minutes:
            raise ValidationError("End time must be after start time")
        if isinstance(draft.sort_order, bool) or not isinstance(draft.sort_order, int):
            raise ValidationError("sortOrder must be an integer")
        return replace(draft, name=name, salary=require_amount(draft.salary, "Salary"))

    def _find_collision(self, draft: SlotDraft, *, exclude_id: Optional[int] = None) -> Optional[Slot]:
        if not draft.is_active:
            return None
        for other in self._slots.list_active(exclude_id=exclude_id):
            if other.overlaps(draft.start_minutes, draft.end_minutes):
                return other
        return None

    def _raise_overlap(self, draft: SlotDraft, other: Slot) -> None:
        logger.warning(
            "slot %r [%s, %s) overlaps active slot %s %r",
            draft.name, draft.start_minutes, draft.end_minutes, other.slot_id, other.name,
        )
        raise ConflictError("Slot overlaps an existing active slot")

    def create_slot(
        self,
        *,
        name: str,
        start: TimeInput,
        end: TimeInput,
        salary: Union[Decimal, int, float, str],
        sort_order: int = 0,
        is_active: bool = True,
    ) -> Slot:
        draft = self._validated(
            SlotDraft(
                name=name,
                start_minutes=coerce_start_minutes(start),
                end_minutes=coerce_end_minutes(end),
                salary=salary,
                is_active=bool(is_active),
                sort_order=sort_order,
            )
        )

        other = self._find_collision(draft)
        if other:
            self._raise_overlap(draft, other)

        slot_id = self._slots.create(draft)
        self._cache.invalidate_slots(slot_id)

        # Overlap is checked against a snapshot; re-check now the row is visible.
        other = self._find_collision(draft, exclude_id=slot_id)
        if other:
            self._slots.delete(slot_id)
            self._cache.invalidate_slots(slot_id)
            self._raise_overlap(draft, other)

        logger.info("slot %s %r created [%s, %s)", slot_id, draft.name, draft.start_minutes, draft.end_minutes)
        return Slot(slot_id=slot_id, **vars(draft))

    def update_slot(
        self,
        slot_id: int,
        *,
        name: Optional[str] = None,
        start: Optional[TimeInput] = None,
        end: Optional[TimeInput] = None,
        salary: Optional[Union[Decimal, int, float, str]] = None,
        sort_order: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Slot:
        current = self._slots.get_by_id(int(slot_id))
        if not current:
            raise NotFoundError("Slot not found")

        draft = self._validated(
            SlotDraft(
                name=current.name if name is None else name,
                start_minutes=current.start_minutes if start is None else coerce_start_minutes(start),
                end_minutes=current.end_minutes if end is None else coerce_end_minutes(end),
                salary=current.salary if salary is None else salary,
                is_active=current.is_active if is_active is None else bool(is_active),
                sort_order=current.sort_order if sort_order is None else sort_order,
            )
        )

        other = self._find_collision(draft, exclude_id=current.slot_id)
        if other:
            self._raise_overlap(draft, other)

        if not self._slots.update(current.slot_id, draft):
            raise NotFoundError("Slot not found")
        self._cache.invalidate_slots(current.slot_id)

        other = self._find_collision(draft, exclude_id=current.slot_id)
        if other:
            previous = SlotDraft(
                name=current.name,
                start_minutes=current.start_minutes,
                end_minutes=current.end_minutes,
                salary=current.salary,
                is_active=current.is_active,
                sort_order=current.sort_order,
            )
            self._slots.update(current.slot_id, previous)
            self._cache.invalidate_slots(current.slot_id)
            self._raise_overlap(draft, other)

        logger.info("slot %s updated", current.slot_id)
        return Slot(slot_id=current.slot_id, **vars(draft))

    def delete_slot(self, slot_id: int) -> None:
        # Attendance records keep their own snapshot, so no reference check here.
        if not self._slots.delete(int(slot_id)):
            raise NotFoundError("Slot not found")
        self._cache.invalidate_slots(int(slot_id))
        logger.info("slot %s deleted", slot_id)

    def list_slots(self, *, active_only: bool = False) -> Sequence[Slot]:
        if not active_only:
            return sorted(self._slots.list_all(), key=admin_sort_key)

        cached = self._cache.get(ACTIVE_SLOTS_KEY)
        if cached is not None:
            return list(cached)
        slots = tuple(sorted(self._slots.list_active(), key=employee_sort_key))
        self._cache.set(ACTIVE_SLOTS_KEY, slots)
        return list(slots)

    def get_slot(self, slot_id: int) -> Slot:
        slot = self._cache.get(slot_key(slot_id))
        if slot is None:
            slot = self._slots.get_by_id(int(slot_id))
            if slot is not None:
                self._cache.set(slot_key(slot_id), slot)
        if slot is None:
            raise NotFoundError("Slot not found")
        return slot

    def get_active_slot(self, slot_id: int) -> Slot:
        try:
            slot = self.get_slot(slot_id)
        except NotFoundError:
            raise NotFoundError("Slot not found or inactive")
        if not slot.is_active:
            raise NotFoundError("Slot not found or inactive")
        return slot
