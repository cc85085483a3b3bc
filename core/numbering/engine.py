"""
ROS Numbering — Identifier Generator
======================================
Deterministic next-identifier derivation from an existing collection.

Algorithm (next_id):
- scan every record's identifier field
- match ^<prefix>(\\d+)$ case-insensitively, track the maximum
- empty collection             → <prefix>1
- records exist, none matched  → <prefix><count + 1>
- otherwise                    → <prefix><max + 1>

"Largest suffix seen" beats "count of records" so gaps from deletions
never cause collisions; only the no-match degenerate case counts.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from core.numbering.models import DEFAULT_ID_FIELD, SUB_ID_SEPARATOR, IdentifierPolicy

TRAILING_NUMBER = re.compile(r"^(.*?)(\d+)$")


def _identifier_of(record: Any, id_field: str) -> str:
    if isinstance(record, str):
        return record
    if isinstance(record, Mapping):
        value = record.get(id_field)
    else:
        value = getattr(record, id_field, None)
        fields = getattr(record, "fields", None)
        if value is None and isinstance(fields, Mapping):
            value = fields.get(id_field)
    return "" if value is None else str(value).strip()


def max_sequence(
    existing_records: Iterable[Any], policy: IdentifierPolicy,
) -> Optional[int]:
    """Largest matched numeric suffix, or None when nothing matched."""
    pattern = policy.pattern()
    best: Optional[int] = None
    for record in existing_records:
        match = pattern.match(_identifier_of(record, policy.id_field))
        if match is None:
            continue
        n = int(match.group(1))
        if best is None or n > best:
            best = n
    return best


def next_id(
    existing_records: Iterable[Any],
    prefix: str,
    *,
    id_field: str = DEFAULT_ID_FIELD,
) -> str:
    policy = IdentifierPolicy(prefix=prefix, id_field=id_field)
    records: List[Any] = list(existing_records)
    if not records:
        return policy.format(1)
    best = max_sequence(records, policy)
    if best is None:
        return policy.format(len(records) + 1)
    return policy.format(best + 1)


def next_sub_id(
    existing_subrecords: Iterable[Any],
    parent_id_no: str,
    *,
    id_field: str = "id",
) -> str:
    """Collection-scoped id for a nested entry: <parentIdNo>-<n>."""
    if not parent_id_no:
        raise ValueError("parent_id_no must be non-empty.")
    return next_id(
        existing_subrecords,
        f"{parent_id_no}{SUB_ID_SEPARATOR}",
        id_field=id_field,
    )


def sequence_key(identifier: Any) -> Tuple[str, int, str]:
    """
    Sort key comparing the trailing number of an identifier numerically,
    so H10 sorts after H9. Identifiers without one use the bare string.
    """
    text = "" if identifier is None else str(identifier).strip()
    match = TRAILING_NUMBER.match(text)
    if match is None:
        return (text.upper(), -1, text)
    return (match.group(1).upper(), int(match.group(2)), text)
