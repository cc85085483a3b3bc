"""
ROS Ledger — Aggregator
=========================
Numeric totals over sub-record collections. Pure and synchronous.

Coercion rule (matches how amounts were captured in the field forms):
a value is read as a floating-point number from its leading numeric
text, so "1500" → 1500.0 and "12.5 INR" → 12.5. None, "", booleans and
text with no leading number are 0. Results are NOT rounded; rounding
is a display concern, except where a helper says otherwise.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

COMMISSION_FIELD = "commission"
PAID_AMOUNT_FIELD = "paidAmount"


def coerce_amount(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        number = float(match.group(1))
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float) -> int:
    """Nearest integer, halves toward +∞ (so -2.5 → -2, 2.5 → 3)."""
    return int(math.floor(value + 0.5))


def _field_value(entry: Any, field_name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(field_name)
    fields = getattr(entry, "fields", None)
    if isinstance(fields, Mapping):
        return fields.get(field_name)
    return None


def _entries(collection: Any) -> Iterable[Any]:
    if collection is None:
        return ()
    if isinstance(collection, Mapping):
        return collection.values()
    return collection


def sum_field(collection: Any, field_name: str) -> float:
    """
    Sum one field across a collection.

    `collection` may be a list of dicts, an id → entry mapping, or any
    iterable of objects exposing a `fields` mapping (SubRecord).
    """
    return sum(
        (coerce_amount(_field_value(e, field_name)) for e in _entries(collection)),
        0.0,
    )


def commission_total(payments: Any) -> float:
    return sum_field(payments, COMMISSION_FIELD)


def paid_total(payments: Any) -> float:
    return sum_field(payments, PAID_AMOUNT_FIELD)


def record_financials(record: Mapping[str, Any]) -> dict:
    """Per-record summary shown next to the payments tab."""
    payments = record.get("payments") or {}
    return {
        "payment_count": len(list(_entries(payments))),
        "commission_total": commission_total(payments),
        "paid_total": paid_total(payments),
    }
