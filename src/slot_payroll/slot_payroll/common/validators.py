from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..core.exceptions import ValidationError

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("10000000000")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_int_range(value: int, field_name: str, *, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < low or value > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def require_amount(value, field_name: str) -> Decimal:
    """Money amounts are Decimals >= 0 with at most 2 decimal places (DECIMAL(12,2) columns)."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    if amount >= MAX_AMOUNT:
        raise ValidationError(f"{field_name} must be below {MAX_AMOUNT}")
    cents = amount.quantize(CENT)
    if cents != amount:
        raise ValidationError(f"{field_name} must have at most 2 decimal places")
    return cents


def clean_note(value: Optional[str], max_len: int) -> Optional[str]:
    if value is None:
        return None
    return require_max_length(value.strip(), "Admin note", max_len)


_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_email(value: str, field_name: str = "Email") -> str:
    value = require_non_empty(value, field_name).lower()
    if not _EMAIL.match(value):
        raise ValidationError(f"{field_name} is not a valid email address")
    return value
