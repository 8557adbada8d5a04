from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import SalaryLogEntry


class SalaryLogRepository(Protocol):
    """Read side of the salary audit trail.

    Writes happen inside the attendance ledger's transactions.
    """

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[SalaryLogEntry]:
        raise NotImplementedError
