"""
ROS Sub-record Ledger — Public API
====================================
Nested payment/worker/agent entries with submit-to-lock semantics.
"""

from engines.subledger.models import Comment, SubmitResult, SubRecord
from engines.subledger.policies import OverrideTable, validate_submission
from engines.subledger.services import SubRecordLedger

__all__ = [
    "Comment",
    "OverrideTable",
    "SubmitResult",
    "SubRecord",
    "SubRecordLedger",
    "validate_submission",
]
