"""
ROS Sub-record Ledger — Application Service
==============================================
add → edit → submit (lock) → override-only edits, plus remove/comment,
for one parent record's sub-collection of one kind.

Entries are kept as an id → SubRecord mapping in insertion order;
ordered() gives the newest-first view. When a document store is
attached every mutation is written through first, so a StorageError
leaves the in-memory state exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.commands.rejection import RejectionReason
from core.config.rules import SUB_KIND_AGENTS, SUB_KIND_PAYMENTS, SUB_KINDS
from core.errors import NotFoundError
from core.ledger.aggregator import sum_field
from core.numbering import next_id, next_sub_id, sequence_key
from core.store.paths import Partition, subcollection_path, subrecord_path
from core.store.protocol import DocumentStore
from core.time.clock import (
    DEFAULT_LOCAL_TIME_ZONE,
    Clock,
    get_default_clock,
    iso_timestamp,
    local_today,
)
from engines.subledger.models import Comment, SubmitResult, SubRecord
from engines.subledger.policies import (
    OverrideTable,
    comment_text_policy,
    field_editable_policy,
    remove_requires_unlocked_policy,
    validate_submission,
)

logger = logging.getLogger("ros.subledger")

AGENT_PREFILL_FIELDS = ("name", "mobileNo", "upiNo")


class SubRecordLedger:
    """Nested entries of one kind under one parent record."""

    def __init__(
        self,
        *,
        kind: str,
        parent_id: str,
        type_name: Optional[str] = None,
        partition: Partition = Partition.ACTIVE,
        store: Optional[DocumentStore] = None,
        clock: Optional[Clock] = None,
        override_table: Optional[OverrideTable] = None,
        tz_name: str = DEFAULT_LOCAL_TIME_ZONE,
        entries: Optional[Iterable[SubRecord]] = None,
    ):
        if kind not in SUB_KINDS:
            raise ValueError(f"Unknown sub-collection kind '{kind}'.")
        if not parent_id:
            raise ValueError("parent_id must be non-empty.")
        if store is not None and not type_name:
            raise ValueError("type_name is required when a store is attached.")
        self._kind = kind
        self._parent_id = parent_id
        self._type_name = type_name
        self._partition = partition
        self._store = store
        self._clock = clock or get_default_clock()
        self._overrides = override_table or OverrideTable.default()
        self._tz_name = tz_name
        self._entries: Dict[str, SubRecord] = {}
        self._versions: Dict[str, int] = {}
        for entry in entries or ():
            self._entries[entry.id] = entry

    @classmethod
    def load(
        cls,
        store: DocumentStore,
        *,
        type_name: str,
        record_id: str,
        kind: str,
        partition: Partition = Partition.ACTIVE,
        **options: Any,
    ) -> "SubRecordLedger":
        """Hydrate from the store, oldest entry first by createdAt."""
        ledger = cls(
            kind=kind,
            parent_id=record_id,
            type_name=type_name,
            partition=partition,
            store=store,
            **options,
        )
        path = subcollection_path(partition, type_name, record_id, kind)
        snapshots = sorted(
            store.children(path),
            key=lambda s: (str(s.get("createdAt") or ""), sequence_key(s.key)),
        )
        for snap in snapshots:
            entry = SubRecord.from_fields(
                kind, snap.fields, fallback_id=snap.key, fallback_parent=record_id,
            )
            ledger._entries[entry.id] = entry
            ledger._versions[entry.id] = snap.version
        return ledger

    # ── Reads ─────────────────────────────────────────────────

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def parent_id(self) -> str:
        return self._parent_id

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, sub_id: object) -> bool:
        return sub_id in self._entries

    def get(self, sub_id: str) -> SubRecord:
        entry = self._entries.get(sub_id)
        if entry is None:
            raise NotFoundError(f"{self._parent_id}/{self._kind}/{sub_id}")
        return entry

    def ordered(self) -> List[SubRecord]:
        """Newest first."""
        return list(reversed(list(self._entries.values())))

    def to_mapping(self) -> Dict[str, Dict[str, Any]]:
        return {sub_id: entry.to_fields() for sub_id, entry in self._entries.items()}

    def total(self, field_name: str) -> float:
        return sum_field(self._entries.values(), field_name)

    # ── Store write-through ───────────────────────────────────

    def _path(self, sub_id: str) -> str:
        return subrecord_path(
            self._partition, self._type_name, self._parent_id, self._kind, sub_id,
        )

    def _persist(self, entry: SubRecord) -> None:
        if self._store is None:
            return
        snapshot = self._store.write(
            self._path(entry.id),
            entry.to_fields(),
            expected_version=self._versions.get(entry.id, 0),
        )
        self._versions[entry.id] = snapshot.version

    def _commit(self, entry: SubRecord) -> SubRecord:
        self._persist(entry)
        self._entries[entry.id] = entry
        return entry

    # ── Mutations ─────────────────────────────────────────────

    def add(self, fields: Optional[Mapping[str, Any]] = None) -> SubRecord:
        initial = dict(fields or {})
        if self._kind == SUB_KIND_PAYMENTS:
            initial.setdefault(
                "date", local_today(self._clock, self._tz_name).isoformat(),
            )
        entry = SubRecord(
            id=next_sub_id(self._entries.values(), self._parent_id),
            parent_id=self._parent_id,
            kind=self._kind,
            fields=initial,
            created_at=iso_timestamp(self._clock),
        )
        self._commit(entry)
        logger.info(f"Added {self._kind} entry {entry.id}")
        return entry

    def add_payment_for_agent(
        self,
        agent_ledger: "SubRecordLedger",
        agent_id: str,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> SubRecord:
        """New payment pre-filled with the named agent's contact details; `fields` add to it."""
        if self._kind != SUB_KIND_PAYMENTS:
            raise ValueError("add_payment_for_agent needs a payments ledger.")
        if agent_ledger.kind != SUB_KIND_AGENTS:
            raise ValueError("agent_ledger must be an agents ledger.")
        agent = agent_ledger.get(agent_id)
        prefill = {name: agent.get(name, "") for name in AGENT_PREFILL_FIELDS}
        prefill["agentId"] = agent.id
        prefill.update(fields or {})
        return self.add(prefill)

    def edit(self, sub_id: str, field_name: str, value: Any) -> Optional[RejectionReason]:
        entry = self.get(sub_id)
        rejection = field_editable_policy(entry, field_name, self._overrides)
        if rejection is not None:
            logger.info(f"Edit of {sub_id}.{field_name} ignored: {rejection.code}")
            return rejection
        self._commit(entry.with_field(field_name, value))
        return None

    def submit(self, sub_id: str) -> SubmitResult:
        entry = self.get(sub_id)
        if entry.locked:
            return SubmitResult(ok=True, subrecord=entry)
        errors = validate_submission(self._kind, entry.fields)
        if errors:
            return SubmitResult(ok=False, errors=errors, subrecord=entry)
        locked = self._commit(entry.locked_at(iso_timestamp(self._clock)))
        logger.info(f"Submitted {self._kind} entry {sub_id}")
        return SubmitResult(ok=True, subrecord=locked)

    def remove(self, sub_id: str) -> Optional[RejectionReason]:
        entry = self.get(sub_id)
        rejection = remove_requires_unlocked_policy(entry)
        if rejection is not None:
            logger.info(f"Remove of {sub_id} ignored: {rejection.code}")
            return rejection
        if self._store is not None:
            self._store.delete(self._path(sub_id))
        del self._entries[sub_id]
        self._versions.pop(sub_id, None)
        logger.info(f"Removed {self._kind} entry {sub_id}")
        return None

    def comment(self, sub_id: str, text: str) -> Optional[RejectionReason]:
        """Permitted on locked and unlocked entries alike."""
        entry = self.get(sub_id)
        rejection = comment_text_policy(text)
        if rejection is not None:
            return rejection
        note = Comment(
            id=next_id(entry.comments, "c", id_field="id"),
            text=text.strip(),
            created_at=iso_timestamp(self._clock),
        )
        self._commit(entry.with_comment(note))
        return None
