"""
ROS Numbering — Identifier Policy
===================================
Declares how sequential record identifiers look for one record type.

Doctrine:
- Identifiers are <prefix><n>, e.g. H12, AW3, AC7.
- Sub-record identifiers reuse the pattern with the parent's id as
  prefix plus a dash: H12-1, H12-2.
- Generation is a pure scan over existing identifiers; no counters are
  stored, so deletions leave gaps rather than reissuing numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_ID_FIELD = "idNo"
SUB_ID_SEPARATOR = "-"


@dataclass(frozen=True)
class IdentifierPolicy:
    """
    Fields:
        prefix:     prepended before the sequence (e.g. "H", "AW")
        id_field:   record field holding the identifier (default "idNo")
        max_digits: optional cap on the numeric part accepted by validate()
    """

    prefix: str
    id_field: str = DEFAULT_ID_FIELD
    max_digits: Optional[int] = None

    def __post_init__(self):
        if not self.prefix or not isinstance(self.prefix, str):
            raise ValueError("prefix must be a non-empty string.")
        if not self.id_field:
            raise ValueError("id_field must be non-empty.")
        if self.max_digits is not None and self.max_digits < 1:
            raise ValueError("max_digits must be >= 1.")

    def pattern(self) -> "re.Pattern[str]":
        return re.compile(rf"^{re.escape(self.prefix)}(\d+)$", re.IGNORECASE)

    def format(self, sequence: int) -> str:
        if not isinstance(sequence, int) or sequence < 1:
            raise ValueError("sequence must be int >= 1.")
        return f"{self.prefix}{sequence}"

    def validate(self, identifier: str) -> bool:
        """Well-formed: prefix, then a number without leading zero, within max_digits."""
        match = self.pattern().match(str(identifier or "").strip())
        if match is None:
            return False
        digits = match.group(1)
        if digits.startswith("0"):
            return False
        return self.max_digits is None or len(digits) <= self.max_digits
