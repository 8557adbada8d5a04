from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from ...attendance.model import AttendanceRecord, SlotSnapshot
from ...core.constants import GRACE_MINUTES
from ...core.enums import AttendanceStatus
from .base import PayrollCalculator, SalaryProposal


class SlotProposalCalculator(PayrollCalculator):
    """Standard rule: every slot that has ended by now is proposed.

    Lateness is measured from the last proposed slot's end plus grace.
    """

    def propose(
        self,
        *,
        now_minutes: int,
        slots: Sequence[SlotSnapshot],
        grace_minutes: int = GRACE_MINUTES,
    ) -> SalaryProposal:
        ended = [s for s in sorted(slots, key=lambda s: s.end_minutes) if s.end_minutes <= now_minutes]
        salary = sum((s.salary for s in ended), Decimal("0"))
        if not ended:
            return SalaryProposal(proposed_slots=0, proposed_salary=salary)

        late_by = now_minutes - (ended[-1].end_minutes + grace_minutes)
        if late_by <= 0:
            return SalaryProposal(proposed_slots=len(ended), proposed_salary=salary)
        return SalaryProposal(
            proposed_slots=len(ended),
            proposed_salary=salary,
            is_late=True,
            late_by_minutes=late_by,
            warning_message=f"Late by {late_by} minute(s). Your attendance is pending admin approval.",
        )

    def day_salary(self, records: Iterable[AttendanceRecord]) -> Decimal:
        return sum(
            (r.slot_salary for r in records if r.status == AttendanceStatus.APPROVED),
            Decimal("0"),
        )
