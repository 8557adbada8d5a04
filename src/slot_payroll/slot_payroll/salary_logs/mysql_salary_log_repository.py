from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import SalaryAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, in_clause
from .model import NewSalaryLog, SalaryLogEntry
from .repository import SalaryLogRepository

_COLUMNS = "log_id, user_id, attendance_id, attendance_date, slots, amount, action, created_by, created_at"


def _to_entry(r: dict) -> SalaryLogEntry:
    return SalaryLogEntry(
        log_id=int(r["log_id"]),
        user_id=int(r["user_id"]),
        attendance_id=int(r["attendance_id"]),
        attendance_date=r["attendance_date"],
        slots=int(r["slots"]),
        amount=as_decimal(r["amount"]),
        action=SalaryAction(r["action"]),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        created_at=r["created_at"],
    )


def insert_salary_log(cur, *, user_id: int, attendance_id: int, attendance_date: date, amount: Decimal, log: NewSalaryLog) -> int:
    """Insert using a cursor that is already inside the caller's transaction."""
    cur.execute(
        """
        INSERT INTO salary_logs(user_id, attendance_id, attendance_date, slots, amount, action, created_by, created_at)
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(user_id),
            int(attendance_id),
            attendance_date,
            int(log.slots),
            amount,
            log.action.value,
            log.created_by,
            log.created_at,
        ),
    )
    return int(cur.lastrowid)


def delete_salary_logs(cur, attendance_ids: Sequence[int]) -> int:
    if not attendance_ids:
        return 0
    ids = [int(i) for i in attendance_ids]
    cur.execute(f"DELETE FROM salary_logs WHERE attendance_id IN ({in_clause(ids)})", tuple(ids))
    return int(cur.rowcount)


class MySQLSalaryLogRepository(SalaryLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[SalaryLogEntry]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if start_date is not None:
            clauses.append("attendance_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("attendance_date<=%s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM salary_logs
                WHERE {" AND ".join(clauses)}
                ORDER BY attendance_date ASC, created_at ASC, log_id ASC
                """,
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]
