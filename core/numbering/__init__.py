"""
ROS Numbering — Public API
============================
"""

from core.numbering.engine import max_sequence, next_id, next_sub_id, sequence_key
from core.numbering.models import (
    DEFAULT_ID_FIELD,
    SUB_ID_SEPARATOR,
    IdentifierPolicy,
)

__all__ = [
    "DEFAULT_ID_FIELD",
    "SUB_ID_SEPARATOR",
    "IdentifierPolicy",
    "max_sequence",
    "next_id",
    "next_sub_id",
    "sequence_key",
]
