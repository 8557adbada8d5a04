from __future__ import annotations

from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of "now" in the business timezone."""

    @property
    def tz(self) -> ZoneInfo:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class ZoneClock:
    """Wall clock pinned to one timezone; all lateness math is relative to it."""

    def __init__(self, tz: ZoneInfo):
        self._tz = tz

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)
