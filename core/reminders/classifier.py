"""
ROS Reminders — Urgency Classifier
====================================
Pure, synchronous helpers. No store access, no wall clock: `today` is
either passed explicitly or derived from an injected Clock in the
configured local timezone.

    Δdays = dateAtLocalMidnight − todayAtLocalMidnight

    Δ < 0  → OVERDUE
    Δ == 0 → DUE_TODAY
    Δ == 1 → DUE_TOMORROW
    Δ == 2 → UPCOMING
    Δ > 2  → NONE (not urgent enough to flag)

Absent or unparseable dates are NONE.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from core.numbering import sequence_key
from core.reminders.models import (
    NEAR_BUCKETS,
    UPCOMING_HORIZON_DAYS,
    Urgency,
)
from core.time.clock import DEFAULT_LOCAL_TIME_ZONE, Clock, get_default_clock, local_today, to_local_date

T = TypeVar("T")

REMINDER_FIELD = "reminderDate"
REMINDER_SOURCES = ("agents", "payments")


def parse_reminder_date(value: Any, tz_name: str = DEFAULT_LOCAL_TIME_ZONE) -> Optional[date]:
    """
    Accepts date, datetime, or an ISO-8601 string ("2025-01-01",
    "2025-01-01T10:30:00Z"). Anything else is None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_local_date(value, tz_name)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return to_local_date(datetime.fromisoformat(text), tz_name)
    except ValueError:
        return None


def _resolve_today(today: Optional[date], clock: Optional[Clock], tz_name: str) -> date:
    if today is not None:
        return today
    return local_today(clock or get_default_clock(), tz_name)


def days_until(
    value: Any,
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> Optional[int]:
    target = parse_reminder_date(value, tz_name)
    if target is None:
        return None
    return (target - _resolve_today(today, clock, tz_name)).days


def classify(
    value: Any,
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> Urgency:
    delta = days_until(value, today=today, clock=clock, tz_name=tz_name)
    if delta is None:
        return Urgency.NONE
    if delta < 0:
        return Urgency.OVERDUE
    if delta == 0:
        return Urgency.DUE_TODAY
    if delta == 1:
        return Urgency.DUE_TOMORROW
    if delta <= UPCOMING_HORIZON_DAYS:
        return Urgency.UPCOMING
    return Urgency.NONE


def is_near(
    value: Any,
    *,
    include_upcoming: bool = False,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> bool:
    bucket = classify(value, today=today, clock=clock, tz_name=tz_name)
    if bucket in NEAR_BUCKETS:
        return True
    return include_upcoming and bucket is Urgency.UPCOMING


def sort_by_urgency(
    items: Iterable[T],
    *,
    date_of: Callable[[T], Any],
    id_of: Callable[[T], str],
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> List[T]:
    """
    Display order: severity ascending, then date ascending, then id
    descending. Two stable passes: the id pass first, the primary key last.
    """
    resolved_today = _resolve_today(today, clock, tz_name)
    by_id_desc = sorted(items, key=lambda item: sequence_key(id_of(item)), reverse=True)

    def primary(item: T):
        raw = date_of(item)
        bucket = classify(raw, today=resolved_today, tz_name=tz_name)
        parsed = parse_reminder_date(raw, tz_name)
        return (bucket.severity, parsed or date.max)

    return sorted(by_id_desc, key=primary)


# ══════════════════════════════════════════════════════════════
# RECORD-LEVEL HELPERS (badges, pending counts)
# ══════════════════════════════════════════════════════════════

def _reminder_values(record: Mapping[str, Any]) -> List[Any]:
    values: List[Any] = []
    for source in REMINDER_SOURCES:
        collection = record.get(source) or {}
        entries = collection.values() if isinstance(collection, Mapping) else collection
        for entry in entries:
            if isinstance(entry, Mapping) and entry.get(REMINDER_FIELD):
                values.append(entry[REMINDER_FIELD])
    return values


def nearest_reminder_date(
    record: Mapping[str, Any], tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> Optional[date]:
    """Earliest valid reminderDate across the record's agents and payments."""
    parsed = [parse_reminder_date(v, tz_name) for v in _reminder_values(record)]
    valid = [d for d in parsed if d is not None]
    return min(valid) if valid else None


def count_by_urgency(
    values: Iterable[Any],
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> Dict[Urgency, int]:
    resolved_today = _resolve_today(today, clock, tz_name)
    counts = {bucket: 0 for bucket in Urgency}
    for value in values:
        counts[classify(value, today=resolved_today, tz_name=tz_name)] += 1
    return counts


def pending_reminder_count(
    values: Iterable[Any],
    *,
    include_upcoming: bool = False,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
) -> int:
    resolved_today = _resolve_today(today, clock, tz_name)
    return sum(
        1 for v in values
        if is_near(v, include_upcoming=include_upcoming, today=resolved_today, tz_name=tz_name)
    )
