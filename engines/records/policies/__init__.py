"""
ROS Records Engine — Policies
===============================
Duplicate detection for new records.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import RecordTypeRule
from core.store.paths import Partition, collection_path, record_path
from core.store.protocol import DocumentStore


def _normalized(value: Any) -> str:
    return "" if value is None else str(value).strip()


def duplicate_contact_policy(
    store: DocumentStore,
    rule: RecordTypeRule,
    fields: Mapping[str, Any],
    *,
    exclude_id: Optional[str] = None,
) -> Optional[RejectionReason]:
    """
    Reject when another active record of this type, or of a configured
    peer type, already carries the same contact number.
    """
    if not rule.contact_field:
        return None
    contact = _normalized(fields.get(rule.contact_field))
    if not contact:
        return None

    for peer in rule.peers():
        matches = store.query_equal(
            collection_path(Partition.ACTIVE, peer), rule.contact_field, contact,
        )
        for match in matches:
            if peer == rule.type_name and match.key == exclude_id:
                continue
            return RejectionReason(
                code=ReasonCode.DUPLICATE_CONTACT,
                message=f"Already registered as {peer} {match.key}",
                policy_name="duplicate_contact_policy",
            )
    return None


def duplicate_id_policy(
    store: DocumentStore, rule: RecordTypeRule, record_id: str,
) -> Optional[RejectionReason]:
    """An id may not be reused while either partition still holds it."""
    for partition in Partition:
        if store.read(record_path(partition, rule.type_name, record_id)) is not None:
            return RejectionReason(
                code=ReasonCode.DUPLICATE_ID,
                message=f"ID {record_id} already exists ({partition.value})",
                policy_name="duplicate_id_policy",
            )
    return None
