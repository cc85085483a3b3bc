"""
ROS Records Engine — Public API
=================================
"""

from engines.records.models import CreateResult, visit_level_for
from engines.records.services import RecordService

__all__ = [
    "CreateResult",
    "RecordService",
    "visit_level_for",
]
