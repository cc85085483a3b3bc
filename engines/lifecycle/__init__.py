"""
ROS Lifecycle Engine — Public API
===================================
Active ⇄ Archived moves with audit trail, purge, and reconciliation.
"""

from engines.lifecycle.commands import ArchiveRequest, PurgeRequest, RestoreRequest
from engines.lifecycle.events import LIFECYCLE_EVENT_TYPES
from engines.lifecycle.models import Record
from engines.lifecycle.reconcile import ConsistencyIssue, ReconciliationSweep
from engines.lifecycle.services import LifecycleManager

__all__ = [
    "ArchiveRequest",
    "ConsistencyIssue",
    "LIFECYCLE_EVENT_TYPES",
    "LifecycleManager",
    "PurgeRequest",
    "Record",
    "ReconciliationSweep",
    "RestoreRequest",
]
