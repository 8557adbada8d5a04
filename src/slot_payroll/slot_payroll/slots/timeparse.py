"""Human time strings to minutes since midnight.

Accepted: ``"1:00 PM"``, ``"01:00:00 pm"`` (12-hour, hour 1-12) and
``"13:00"``, ``"13:00:00"`` (24-hour, hour 0-23).
"""

from __future__ import annotations

import re
from typing import Optional, Union

from ..common.validators import require_int_range
from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import ValidationError

_TWELVE_HOUR = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*(AM|PM)$")
_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def _check_seconds(seconds: Optional[str]) -> None:
    if seconds is not None and int(seconds) > 59:
        raise ValidationError(f"Invalid seconds: {seconds}")


def parse_time_to_minutes(value: str) -> int:
    cleaned = (value or "").strip().upper()

    match = _TWELVE_HOUR.match(cleaned)
    if match:
        hours, minutes, period = int(match.group(1)), int(match.group(2)), match.group(4)
        if hours < 1 or hours > 12:
            raise ValidationError(f"Invalid hour in 12-hour format: {hours}")
        if minutes > 59:
            raise ValidationError(f"Invalid minutes: {minutes}")
        _check_seconds(match.group(3))
        if period == "PM" and hours != 12:
            hours += 12
        elif period == "AM" and hours == 12:
            hours = 0
        return hours * 60 + minutes

    match = _TWENTY_FOUR_HOUR.match(cleaned)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23:
            raise ValidationError(f"Invalid hour in 24-hour format: {hours}")
        if minutes > 59:
            raise ValidationError(f"Invalid minutes: {minutes}")
        _check_seconds(match.group(3))
        return hours * 60 + minutes

    raise ValidationError(f'Invalid time format: "{value}". Expected e.g. "01:00 PM" or "13:00"')


def coerce_start_minutes(value: Union[int, str]) -> int:
    if isinstance(value, str):
        return parse_time_to_minutes(value)
    return require_int_range(value, "startMinutes", low=0, high=MINUTES_PER_DAY - 1)


def coerce_end_minutes(value: Union[int, str]) -> int:
    if isinstance(value, str):
        return parse_time_to_minutes(value)
    return require_int_range(value, "endMinutes", low=1, high=MINUTES_PER_DAY)


def format_minutes(minutes: int) -> str:
    """1439 -> '23:59'; 1440 -> '24:00'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
