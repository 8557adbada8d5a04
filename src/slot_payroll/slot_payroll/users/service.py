from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_max_length, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import NewUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def generate_one_time_password() -> str:
    """10 uppercase hex characters, handed out once at account creation."""
    return secrets.token_hex(5).upper()


def _verify(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Unknown hash method (e.g. a placeholder hash)
        return False


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    employee_code: str
    full_name: str
    role: Role
    must_change_password: bool


@dataclass(frozen=True)
class CreatedEmployee:
    user: User
    initial_password: Optional[str] = None


class AuthService:
    """Use case: authenticate by employee code and manage one's own password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, employee_code: str, password: str) -> SessionUser:
        user = self._users.get_by_employee_code((employee_code or "").strip())
        if not user or not user.is_active or not _verify(user.password_hash, password or ""):
            logger.info("failed login for employee code %r", employee_code)
            raise AuthenticationError("Invalid credentials")

        return SessionUser(
            user_id=user.user_id,
            employee_code=user.employee_code,
            full_name=user.full_name,
            role=user.role,
            must_change_password=user.must_change_password,
        )

    def change_password(self, user_id: int, *, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not _verify(user.password_hash, current_password or ""):
            raise ValidationError("Invalid current password")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        self._users.set_password(
            user.user_id,
            password_hash=generate_password_hash(new_password),
            must_change_password=False,
        )
        logger.info("user %s changed password", user.employee_code)


class UserService:
    """Use case: manage employees (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_employee(self, employee_code: str) -> User:
        user = self._users.get_by_employee_code((employee_code or "").strip())
        if not user or user.role != Role.EMPLOYEE:
            raise NotFoundError("Employee not found")
        return user

    def list_employees(self, *, active_only: bool = False) -> Sequence[User]:
        return self._users.list_by_role(Role.EMPLOYEE, active_only=active_only)

    def create_employee(
        self,
        *,
        full_name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password: Optional[str] = None,
    ) -> CreatedEmployee:
        full_name = require_max_length(require_non_empty(full_name, "Name"), "Name", 120)
        email = require_email(email) if email else None
        phone = phone.strip() if phone else None

        initial_password = None
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        else:
            password = initial_password = generate_one_time_password()

        code = self._users.next_employee_code()
        user_id = self._users.create(
            NewUser(
                employee_code=code,
                full_name=full_name,
                email=email,
                phone=phone,
                password_hash=generate_password_hash(password),
                role=Role.EMPLOYEE,
                must_change_password=initial_password is not None,
            )
        )
        logger.info("employee %s created", code)
        return CreatedEmployee(user=self.get_user(user_id), initial_password=initial_password)

    def update_employee(
        self,
        employee_code: str,
        *,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> User:
        user = self.get_employee(employee_code)

        if full_name is not None:
            full_name = require_max_length(require_non_empty(full_name, "Name"), "Name", 120)
        self._users.update_profile(
            user.user_id,
            full_name=user.full_name if full_name is None else full_name,
            email=user.email if email is None else require_email(email),
            phone=user.phone if phone is None else phone.strip(),
            is_active=user.is_active if is_active is None else bool(is_active),
        )
        if password is not None:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            self._users.set_password(
                user.user_id,
                password_hash=generate_password_hash(password),
                must_change_password=False,
            )

        logger.info("employee %s updated", user.employee_code)
        return self.get_user(user.user_id)

    def delete_employee(self, employee_code: str) -> None:
        user = self.get_employee(employee_code)
        if not self._users.delete_by_id(user.user_id):
            raise NotFoundError("Employee not found")
        logger.info("employee %s deleted", user.employee_code)
