"""
Infrastructure layer - clock

Single source of "today" for expiry calculations, replaceable in tests.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Optional


# =============================================================================
# Clock
# =============================================================================


class Clock(ABC):
    """Time service interface"""

    @abstractmethod
    def now(self) -> datetime:
        """Current time (UTC)"""
        ...

    def today(self) -> date:
        return self.now().date()

    def now_iso(self) -> str:
        return self.now().isoformat()


class SystemClock(Clock):
    """Wall clock"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class MockClock(Clock):
    """Fixed clock for tests"""

    def __init__(self, fixed_time: Optional[datetime] = None):
        self._fixed_time = fixed_time or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._offset = timedelta()

    def now(self) -> datetime:
        return self._fixed_time + self._offset

    def advance(self, delta: timedelta) -> None:
        self._offset += delta

    def set_time(self, dt: datetime) -> None:
        self._fixed_time = dt
        self._offset = timedelta()


_clock_instance: Clock = SystemClock()
_clock_lock = threading.Lock()


def get_clock() -> Clock:
    return _clock_instance


def set_clock(clock: Clock) -> None:
    """Swap the global clock (tests)"""
    global _clock_instance
    with _clock_lock:
        _clock_instance = clock


def today() -> date:
    return get_clock().today()


# =============================================================================
# Parsing
# =============================================================================


def parse_datetime(val) -> Optional[datetime]:
    """Lenient ISO-8601 parser; returns None for blanks and garbage."""
    if not val:
        return None
    if isinstance(val, datetime):
        dt = val
    elif isinstance(val, date):
        dt = datetime(val.year, val.month, val.day)
    else:
        try:
            dt = datetime.fromisoformat(str(val).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_date(val) -> Optional[date]:
    """Lenient date parser accepting ``YYYY-MM-DD`` or full timestamps."""
    if not val:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    text = str(val).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        dt = parse_datetime(text)
        return dt.date() if dt else None


def format_date(val) -> str:
    """``YYYY-MM-DD`` or empty string; the wire format for date fields."""
    d = parse_date(val)
    return d.isoformat() if d else ""


def days_until(val, reference: Optional[date] = None) -> Optional[int]:
    """Whole days from ``reference`` (default today) to ``val``; negative when past."""
    d = parse_date(val)
    if d is None:
        return None
    ref = reference or today()
    return (d - ref).days
