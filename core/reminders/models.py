"""
ROS Reminders — Urgency Buckets
=================================
Classification of a follow-up date relative to today.
Severity drives display ordering: most urgent first.
"""

from __future__ import annotations

from enum import Enum


class Urgency(Enum):
    OVERDUE = "OVERDUE"
    DUE_TODAY = "DUE_TODAY"
    DUE_TOMORROW = "DUE_TOMORROW"
    UPCOMING = "UPCOMING"
    NONE = "NONE"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    Urgency.OVERDUE: 0,
    Urgency.DUE_TODAY: 1,
    Urgency.DUE_TOMORROW: 2,
    Urgency.UPCOMING: 3,
    Urgency.NONE: 4,
}

# Buckets counted as "pending" by default; UPCOMING is opt-in per call site.
NEAR_BUCKETS = frozenset({Urgency.OVERDUE, Urgency.DUE_TODAY, Urgency.DUE_TOMORROW})

# Furthest day offset that still gets a bucket other than NONE.
UPCOMING_HORIZON_DAYS = 2
