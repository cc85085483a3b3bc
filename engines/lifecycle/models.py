"""
ROS Lifecycle Engine — Record Model
=====================================
Read-side view of a stored record: its top-level fields plus, when
loaded with its subtree, the nested sub-collections keyed by kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.store.paths import Partition, split_path
from core.store.protocol import Snapshot

# Fields written by lifecycle moves; never part of the business payload.
ARCHIVE_MARKERS = ("originalId", "movedAt", "reason")
RESTORE_MARKERS = ("restoredAt", "revertReason")


@dataclass(frozen=True)
class Record:
    type_name: str
    id: str
    partition: Partition
    fields: Dict[str, Any]
    version: int = 0
    subcollections: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.type_name:
            raise ValueError("type_name must be non-empty.")
        if not self.id:
            raise ValueError("id must be non-empty.")

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @property
    def comments(self) -> List[Dict[str, Any]]:
        return list(self.fields.get("comments") or [])

    @property
    def audit_trail(self) -> List[Dict[str, Any]]:
        return list(self.fields.get("auditTrail") or [])

    @property
    def moved_at(self) -> Optional[str]:
        return self.fields.get("movedAt")

    @property
    def archive_reason(self) -> Optional[str]:
        return self.fields.get("reason")

    def business_fields(self) -> Dict[str, Any]:
        """Fields minus lifecycle bookkeeping; stable across archive/restore."""
        skip = set(ARCHIVE_MARKERS) | set(RESTORE_MARKERS) | {"auditTrail", "updatedAt"}
        return {k: v for k, v in self.fields.items() if k not in skip}

    def subcollection(self, kind: str) -> Dict[str, Dict[str, Any]]:
        return dict(self.subcollections.get(kind, {}))

    def as_document(self) -> Dict[str, Any]:
        """Fields with sub-collections inlined, as read-side helpers expect."""
        doc = dict(self.fields)
        for kind, entries in self.subcollections.items():
            doc[kind] = dict(entries)
        return doc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type_name,
            "id": self.id,
            "partition": self.partition.value,
            "version": self.version,
            "fields": dict(self.fields),
            "subcollections": {k: dict(v) for k, v in self.subcollections.items()},
        }

    @classmethod
    def from_snapshot(
        cls, snapshot: Snapshot, descendants: Iterable[Snapshot] = (),
    ) -> "Record":
        partition_name, type_name, record_id = split_path(snapshot.path)[:3]
        nested: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for child in descendants:
            parts = split_path(child.path)
            # <Partition>/<Type>/<id>/<kind>/<subId>
            if len(parts) != 5:
                continue
            nested.setdefault(parts[3], {})[parts[4]] = child.fields
        return cls(
            type_name=type_name,
            id=record_id,
            partition=Partition(partition_name),
            fields=snapshot.fields,
            version=snapshot.version,
            subcollections=nested,
        )
