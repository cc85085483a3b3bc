"""
ROS Reminders — Public API
============================
"""

from core.reminders.classifier import (
    classify,
    count_by_urgency,
    days_until,
    is_near,
    nearest_reminder_date,
    parse_reminder_date,
    pending_reminder_count,
    sort_by_urgency,
)
from core.reminders.models import NEAR_BUCKETS, Urgency

__all__ = [
    "NEAR_BUCKETS",
    "Urgency",
    "classify",
    "count_by_urgency",
    "days_until",
    "is_near",
    "nearest_reminder_date",
    "parse_reminder_date",
    "pending_reminder_count",
    "sort_by_urgency",
]
