from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import EMPLOYEE_CODE_DIGITS, EMPLOYEE_CODE_PREFIX
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewUser, User
from .repository import UserRepository

_COLUMNS = "user_id, employee_code, full_name, email, phone, password_hash, role, is_active, must_change_password"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        employee_code=row["employee_code"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        email=row.get("email"),
        phone=row.get("phone"),
        is_active=bool(row.get("is_active", True)),
        must_change_password=bool(row.get("must_change_password", False)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE employee_code=%s", (employee_code,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_by_role(self, role: Role, *, active_only: bool = False) -> Sequence[User]:
        sql = f"SELECT {_COLUMNS} FROM users WHERE role=%s"
        if active_only:
            sql += " AND is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY employee_code ASC", (role.value,))
            return [_to_user(r) for r in fetchall(cur)]

    def next_employee_code(self) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) hands the incremented value back on this connection only.
            cur.execute(
                """
                INSERT INTO counters(counter_key, seq) VALUES('employee', LAST_INSERT_ID(1))
                ON DUPLICATE KEY UPDATE seq=LAST_INSERT_ID(seq + 1)
                """
            )
            seq = int(cur.lastrowid)
        return f"{EMPLOYEE_CODE_PREFIX}{seq:0{EMPLOYEE_CODE_DIGITS}d}"

    def create(self, new: NewUser) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(employee_code, full_name, email, phone, password_hash, role, is_active, must_change_password)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new.employee_code,
                    new.full_name,
                    new.email,
                    new.phone,
                    new.password_hash,
                    new.role.value,
                    1 if new.is_active else 0,
                    1 if new.must_change_password else 0,
                ),
            )
            return int(cur.lastrowid)

    def update_profile(
        self,
        user_id: int,
        *,
        full_name: str,
        email: Optional[str],
        phone: Optional[str],
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET full_name=%s, email=%s, phone=%s, is_active=%s WHERE user_id=%s",
                (full_name, email, phone, 1 if is_active else 0, int(user_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM users WHERE user_id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def set_password(self, user_id: int, *, password_hash: str, must_change_password: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s, must_change_password=%s WHERE user_id=%s",
                (password_hash, 1 if must_change_password else 0, int(user_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0
