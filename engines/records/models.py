"""
ROS Records Engine — Models
=============================
Result types for record creation and the visit-level rule derived from
a hospital's agent count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from engines.lifecycle.models import Record

VISIT_FULLY = "Visit Fully"
VISIT_MEDIUM = "Visit Medium"
VISIT_LOW = "Visit Low"

# (minimum agent count, level), highest first
VISIT_THRESHOLDS = (
    (8, VISIT_FULLY),
    (4, VISIT_MEDIUM),
    (1, VISIT_LOW),
)

VISIT_TYPE_FIELD = "visitType"
VISIT_TYPE_MANUAL_FIELD = "visitTypeManual"

# Fields owned by the service; update() refuses to touch them.
SYSTEM_FIELDS = ("idNo", "createdAt", "updatedAt", "comments", "auditTrail", "documents")


def visit_level_for(agent_count: int) -> str:
    for minimum, level in VISIT_THRESHOLDS:
        if agent_count >= minimum:
            return level
    return ""


@dataclass(frozen=True)
class CreateResult:
    """
    The record is created even when some uploads fail; failed uploads
    are listed by document name.
    """

    record: Record
    upload_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.upload_errors
