from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import NewUser, User


class UserRepository(Protocol):
    """Repository interface for users.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role, *, active_only: bool = False) -> Sequence[User]:
        raise NotImplementedError

    def next_employee_code(self) -> str:
        raise NotImplementedError

    def create(self, new: NewUser) -> int:
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        full_name: str,
        email: Optional[str],
        phone: Optional[str],
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def set_password(self, user_id: int, *, password_hash: str, must_change_password: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError
