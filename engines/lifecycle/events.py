"""
ROS Lifecycle Engine — Event Types and Payload Builders
=========================================================
Engine: Lifecycle (Active ⇄ Archived)

Lifecycle owns partition moves: archive → restore → archive ...
and the irreversible purge of an archived copy. Every move appends an
audit entry to the record; listeners are told after the store accepted
the move.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

LIFECYCLE_RECORD_ARCHIVED_V1 = "lifecycle.record.archived.v1"
LIFECYCLE_RECORD_RESTORED_V1 = "lifecycle.record.restored.v1"
LIFECYCLE_RECORD_PURGED_V1 = "lifecycle.record.purged.v1"

LIFECYCLE_EVENT_TYPES = (
    LIFECYCLE_RECORD_ARCHIVED_V1,
    LIFECYCLE_RECORD_RESTORED_V1,
    LIFECYCLE_RECORD_PURGED_V1,
)

# Audit-trail action names stored on the record itself.
ACTION_CREATED = "created"
ACTION_ARCHIVED = "archived"
ACTION_RESTORED = "restored"

AUDIT_TRAIL_FIELD = "auditTrail"


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_audit_entry(action: str, at: str, reason: Optional[str] = None) -> Dict[str, Any]:
    return {"action": action, "at": at, "reason": reason or ""}


def append_audit_entry(fields: Dict[str, Any], entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Oldest first; earlier history is never dropped."""
    trail = list(fields.get(AUDIT_TRAIL_FIELD) or [])
    trail.append(entry)
    return trail


def build_move_payload(
    *,
    type_name: str,
    record_id: str,
    source: str,
    destination: str,
    at: str,
    reason: Optional[str],
) -> Dict[str, Any]:
    return {
        "type_name": type_name,
        "record_id": record_id,
        "source": source,
        "destination": destination,
        "at": at,
        "reason": reason or "",
    }


def build_purge_payload(*, type_name: str, record_id: str, at: str) -> Dict[str, Any]:
    return {"type_name": type_name, "record_id": record_id, "at": at}
