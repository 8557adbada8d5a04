from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

ACTIVE_SLOTS_KEY = "slots:active"


def slot_key(slot_id: int) -> str:
    return f"slot:{int(slot_id)}"


class SlotCache(Protocol):
    """Lookup cache for slot reads.

    Correctness never depends on it: every implementation may drop entries at any time.
    """

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def invalidate_slots(self, slot_id: Optional[int] = None) -> None:
        raise NotImplementedError


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache(SlotCache):
    """Process-local cache with per-entry expiry."""

    def __init__(self, *, default_ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self._default_ttl = float(default_ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_slots(self, slot_id: Optional[int] = None) -> None:
        with self._lock:
            self._entries.pop(ACTIVE_SLOTS_KEY, None)
            if slot_id is not None:
                self._entries.pop(slot_key(slot_id), None)


class NullCache(SlotCache):
    """Cache that never stores anything (caching disabled)."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        return None

    def delete(self, key: str) -> None:
        return None

    def invalidate_slots(self, slot_id: Optional[int] = None) -> None:
        return None
