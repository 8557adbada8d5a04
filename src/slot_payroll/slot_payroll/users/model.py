from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an admin or an employee.

    Plain data object; it carries no DB access code.
    """

    user_id: int
    employee_code: str
    full_name: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    must_change_password: bool = False


@dataclass(frozen=True)
class NewUser:
    employee_code: str
    full_name: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    must_change_password: bool = False
