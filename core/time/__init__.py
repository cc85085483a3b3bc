"""
ROS Core Time — Public API
============================
Explicit clock protocol and local-calendar helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    DEFAULT_LOCAL_TIME_ZONE,
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    iso_timestamp,
    local_today,
    now_utc,
    set_default_clock,
    to_local_date,
)

__all__ = [
    "DEFAULT_LOCAL_TIME_ZONE",
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "iso_timestamp",
    "local_today",
    "to_local_date",
]
