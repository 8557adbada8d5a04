from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles the core relies on for authorization."""

    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class AttendanceStatus(str, Enum):
    """Per-slot attendance status.

    ABSENT is never persisted: it is derived by reports when a day has no records.
    """

    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    ABSENT = "ABSENT"


# Statuses an admin may write directly through an upsert.
STORED_STATUSES = frozenset({AttendanceStatus.APPROVED, AttendanceStatus.PENDING, AttendanceStatus.REJECTED})


class SalaryAction(str, Enum):
    """Why a salary log entry was written."""

    AUTO_APPROVED = "AUTO_APPROVED"
    ADMIN_APPROVED = "ADMIN_APPROVED"
    ADMIN_MODIFIED = "ADMIN_MODIFIED"
