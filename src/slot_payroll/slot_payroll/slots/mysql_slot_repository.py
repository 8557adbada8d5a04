from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import Slot, SlotDraft
from .repository import SlotRepository

_COLUMNS = "slot_id, name, start_minutes, end_minutes, salary, is_active, sort_order"


def _to_slot(r: dict) -> Slot:
    return Slot(
        slot_id=int(r["slot_id"]),
        name=r["name"],
        start_minutes=int(r["start_minutes"]),
        end_minutes=int(r["end_minutes"]),
        salary=as_decimal(r["salary"]),
        is_active=bool(r["is_active"]),
        sort_order=int(r.get("sort_order") or 0),
    )


class MySQLSlotRepository(SlotRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, slot_id: int) -> Optional[Slot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM slots WHERE slot_id=%s", (int(slot_id),))
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def list_all(self) -> Sequence[Slot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM slots ORDER BY is_active DESC, sort_order ASC, end_minutes ASC")
            return [_to_slot(r) for r in fetchall(cur)]

    def list_active(self, *, exclude_id: Optional[int] = None) -> Sequence[Slot]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if exclude_id is not None:
            clauses.append("slot_id<>%s")
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM slots
                WHERE {" AND ".join(clauses)}
                ORDER BY sort_order ASC, end_minutes ASC
                """,
                tuple(params),
            )
            return [_to_slot(r) for r in fetchall(cur)]

    def create(self, draft: SlotDraft) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO slots(name, start_minutes, end_minutes, salary, is_active, sort_order)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    draft.name,
                    draft.start_minutes,
                    draft.end_minutes,
                    draft.salary,
                    int(draft.is_active),
                    draft.sort_order,
                ),
            )
            return int(cur.lastrowid)

    def update(self, slot_id: int, draft: SlotDraft) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE slots
                SET name=%s, start_minutes=%s, end_minutes=%s, salary=%s, is_active=%s, sort_order=%s
                WHERE slot_id=%s
                """,
                (
                    draft.name,
                    draft.start_minutes,
                    draft.end_minutes,
                    draft.salary,
                    int(draft.is_active),
                    draft.sort_order,
                    int(slot_id),
                ),
            )
            # rowcount is 0 when the row exists but nothing changed.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM slots WHERE slot_id=%s", (int(slot_id),))
            return fetchone(cur) is not None

    def delete(self, slot_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM slots WHERE slot_id=%s", (int(slot_id),))
            return cur.rowcount > 0
