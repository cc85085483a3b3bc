"""
ROS Core Time — Explicit Clock Protocol
=========================================
Doctrine: NO datetime.now() inside engine logic.
Time is injected via the Clock protocol so lifecycle stamps
(movedAt, restoredAt, submittedAt) and reminder buckets are
deterministic under test.

Reminder classification works on calendar days in the operator's
local timezone, so the clock also exposes a local-date view.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo


DEFAULT_LOCAL_TIME_ZONE = "Asia/Kolkata"


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Production clock — real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a fixed timestamp.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        assert clock.now_utc().year == 2025
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        """Advance the fixed time (useful for multi-step test scenarios)."""
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)


# ══════════════════════════════════════════════════════════════
# LOCAL CALENDAR HELPERS
# ══════════════════════════════════════════════════════════════

def to_local_date(value: datetime, tz_name: str = DEFAULT_LOCAL_TIME_ZONE) -> date:
    """Calendar date of an instant in the given timezone (naive = already local)."""
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(ZoneInfo(tz_name)).date()


def local_today(clock: Clock, tz_name: str = DEFAULT_LOCAL_TIME_ZONE) -> date:
    return to_local_date(clock.now_utc(), tz_name)


def iso_timestamp(clock: Clock) -> str:
    """ISO-8601 UTC timestamp as stored on records (e.g. movedAt)."""
    return clock.now_utc().isoformat()


# ══════════════════════════════════════════════════════════════
# DEFAULT CLOCK (infrastructure use only)
# ══════════════════════════════════════════════════════════════

_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    """Override the default clock (testing only)."""
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    """Get the current default clock."""
    return _default_clock


def now_utc() -> datetime:
    """Convenience: get current UTC time from default clock."""
    return _default_clock.now_utc()
