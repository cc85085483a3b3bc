"""
ROS Lifecycle Engine — Application Service
============================================
Moves a record (with its whole nested subtree) between the Active and
Archived partitions, and purges archived copies.

Move protocol:
- Stores with atomic batches: destination writes + source delete are
  committed as one batch. No duplicate or loss window.
- Other stores: a move-intent journal entry is written first, then the
  destination subtree (root last, so its presence marks a complete
  copy), then the source delete, then the journal entry is cleared.
  A failed copy is rolled back so the move can be retried; a failed
  source delete or rollback leaves the journal for the
  ReconciliationSweep.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from core.errors import NotFoundError, StorageError, ValidationError, VersionConflictError
from core.store.paths import (
    Partition,
    collection_path,
    move_journal_path,
    rebase_path,
    record_path,
)
from core.store.protocol import BatchOp, DocumentStore, delete_op, supports_batches, write_op
from core.time.clock import Clock, get_default_clock, iso_timestamp
from engines.lifecycle.commands import ArchiveRequest, PurgeRequest, RestoreRequest
from engines.lifecycle.events import (
    ACTION_ARCHIVED,
    ACTION_RESTORED,
    AUDIT_TRAIL_FIELD,
    LIFECYCLE_RECORD_ARCHIVED_V1,
    LIFECYCLE_RECORD_PURGED_V1,
    LIFECYCLE_RECORD_RESTORED_V1,
    append_audit_entry,
    build_audit_entry,
    build_move_payload,
    build_purge_payload,
)
from engines.lifecycle.models import ARCHIVE_MARKERS, Record
from engines.lifecycle.policies import restore_requires_reason_policy

logger = logging.getLogger("ros.lifecycle")

LifecycleListener = Callable[[str, Dict[str, Any]], None]


class LifecycleManager:
    """Archive / restore / purge over a DocumentStore."""

    def __init__(
        self,
        *,
        store: DocumentStore,
        clock: Optional[Clock] = None,
        listeners: Iterable[LifecycleListener] = (),
    ):
        self._store = store
        self._clock = clock or get_default_clock()
        self._listeners: List[LifecycleListener] = list(listeners)

    @property
    def store(self) -> DocumentStore:
        return self._store

    def add_listener(self, listener: LifecycleListener) -> None:
        self._listeners.append(listener)

    # ── Reads ─────────────────────────────────────────────────

    def get(
        self,
        type_name: str,
        record_id: str,
        partition: Partition = Partition.ACTIVE,
        *,
        with_subtree: bool = True,
    ) -> Record:
        path = record_path(partition, type_name, record_id)
        root = self._store.read(path)
        if root is None:
            raise NotFoundError(path)
        descendants = [s for s in self._store.walk(path) if s.path != path] if with_subtree else []
        return Record.from_snapshot(root, descendants)

    def list_partition(self, type_name: str, partition: Partition) -> List[Record]:
        """Top-level records only, ordered by id."""
        return [
            Record.from_snapshot(s)
            for s in self._store.children(collection_path(partition, type_name))
        ]

    # ── Moves ─────────────────────────────────────────────────

    def archive(
        self,
        type_name: str,
        record_id: str,
        reason: Optional[str] = None,
        *,
        expected_version: Optional[int] = None,
    ) -> Record:
        root = self._source_root(Partition.ACTIVE, type_name, record_id, expected_version)
        now = iso_timestamp(self._clock)
        fields = dict(root.fields)
        fields.update({"originalId": record_id, "movedAt": now, "reason": reason or ""})
        fields[AUDIT_TRAIL_FIELD] = append_audit_entry(
            root.fields, build_audit_entry(ACTION_ARCHIVED, now, reason),
        )
        archived = self._move(
            type_name=type_name,
            record_id=record_id,
            source=Partition.ACTIVE,
            root_fields=fields,
            action=ACTION_ARCHIVED,
            reason=reason,
            at=now,
        )
        self._emit(LIFECYCLE_RECORD_ARCHIVED_V1, build_move_payload(
            type_name=type_name,
            record_id=record_id,
            source=Partition.ACTIVE.value,
            destination=Partition.ARCHIVED.value,
            at=now,
            reason=reason,
        ))
        return archived

    def restore(
        self,
        type_name: str,
        record_id: str,
        reason: str,
        *,
        expected_version: Optional[int] = None,
    ) -> Record:
        rejection = restore_requires_reason_policy(reason)
        if rejection is not None:
            raise ValidationError({"reason": rejection.message})
        reason = reason.strip()

        root = self._source_root(Partition.ARCHIVED, type_name, record_id, expected_version)
        now = iso_timestamp(self._clock)
        fields = {k: v for k, v in root.fields.items() if k not in ARCHIVE_MARKERS}
        fields.update({"restoredAt": now, "revertReason": reason})
        fields[AUDIT_TRAIL_FIELD] = append_audit_entry(
            root.fields, build_audit_entry(ACTION_RESTORED, now, reason),
        )
        restored = self._move(
            type_name=type_name,
            record_id=record_id,
            source=Partition.ARCHIVED,
            root_fields=fields,
            action=ACTION_RESTORED,
            reason=reason,
            at=now,
        )
        self._emit(LIFECYCLE_RECORD_RESTORED_V1, build_move_payload(
            type_name=type_name,
            record_id=record_id,
            source=Partition.ARCHIVED.value,
            destination=Partition.ACTIVE.value,
            at=now,
            reason=reason,
        ))
        return restored

    def permanently_delete(self, type_name: str, record_id: str) -> None:
        """Irreversible. Only archived copies can be purged."""
        path = record_path(Partition.ARCHIVED, type_name, record_id)
        if self._store.read(path) is None:
            raise NotFoundError(path)
        self._store.delete(path)
        now = iso_timestamp(self._clock)
        logger.info(f"Purged {path}")
        self._emit(LIFECYCLE_RECORD_PURGED_V1, build_purge_payload(
            type_name=type_name, record_id=record_id, at=now,
        ))

    def handle(self, request: Any) -> Optional[Record]:
        if isinstance(request, ArchiveRequest):
            return self.archive(
                request.type_name, request.record_id, request.reason,
                expected_version=request.expected_version,
            )
        if isinstance(request, RestoreRequest):
            return self.restore(
                request.type_name, request.record_id, request.reason,
                expected_version=request.expected_version,
            )
        if isinstance(request, PurgeRequest):
            self.permanently_delete(request.type_name, request.record_id)
            return None
        raise ValueError(f"Unsupported lifecycle request: {type(request).__name__}")

    # ── Internals ─────────────────────────────────────────────

    def _source_root(
        self,
        partition: Partition,
        type_name: str,
        record_id: str,
        expected_version: Optional[int],
    ):
        path = record_path(partition, type_name, record_id)
        root = self._store.read(path)
        if root is None:
            raise NotFoundError(path)
        if expected_version is not None and root.version != expected_version:
            raise VersionConflictError(path, expected_version, root.version)
        return root

    def _move(
        self,
        *,
        type_name: str,
        record_id: str,
        source: Partition,
        root_fields: Dict[str, Any],
        action: str,
        reason: Optional[str],
        at: str,
    ) -> Record:
        destination = source.opposite
        src_root = record_path(source, type_name, record_id)
        dst_root = record_path(destination, type_name, record_id)

        # Descendants first, root last.
        writes: List[BatchOp] = [
            write_op(rebase_path(s.path, src_root, dst_root), s.fields, expected_version=0)
            for s in self._store.walk(src_root)
            if s.path != src_root
        ]
        writes.append(write_op(dst_root, root_fields, expected_version=0))

        if supports_batches(self._store):
            self._store.commit_batch(writes + [delete_op(src_root)])
        else:
            self._move_journaled(
                type_name=type_name,
                record_id=record_id,
                source=source,
                writes=writes,
                action=action,
                reason=reason,
                at=at,
            )

        logger.info(
            f"Moved {type_name}/{record_id} {source.value} → {destination.value} "
            f"({action}, {len(writes)} documents)"
        )
        return self.get(type_name, record_id, destination)

    def _move_journaled(
        self,
        *,
        type_name: str,
        record_id: str,
        source: Partition,
        writes: List[BatchOp],
        action: str,
        reason: Optional[str],
        at: str,
    ) -> None:
        src_root = record_path(source, type_name, record_id)
        dst_root = record_path(source.opposite, type_name, record_id)
        journal = move_journal_path(type_name, record_id)

        self._store.write(journal, {
            "typeName": type_name,
            "recordId": record_id,
            "source": source.value,
            "destination": source.opposite.value,
            "action": action,
            "reason": reason or "",
            "startedAt": at,
        }, expected_version=0)

        written: List[str] = []
        try:
            for op in writes:
                self._store.write(op.path, op.fields, expected_version=op.expected_version)
                written.append(op.path)
        except StorageError as exc:
            logger.error(
                f"Move of {src_root} stopped while copying to {dst_root}: {exc}. "
                f"Source is intact; rolling back {len(written)} copied documents."
            )
            self._rollback_copy(written, journal)
            raise

        try:
            self._store.delete(src_root)
        except StorageError as exc:
            logger.warning(
                f"Duplicate record: {dst_root} written but {src_root} not deleted: {exc}. "
                f"Journal {journal} left for reconciliation."
            )
            raise

        self._store.delete(journal)

    def _rollback_copy(self, written: List[str], journal: str) -> None:
        """
        Undo a partial copy so the move can simply be retried. Only
        documents this move wrote are removed. If any removal fails the
        journal stays and the reconciliation sweep finishes the job.
        """
        try:
            for path in reversed(written):
                self._store.delete(path)
            self._store.delete(journal)
        except StorageError as exc:
            logger.error(
                f"Rollback of partial copy failed: {exc}. "
                f"Journal {journal} left for reconciliation."
            )

    def _emit(self, event_type: str, payload: Dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event_type, payload)
            except Exception as exc:
                logger.error(
                    f"Lifecycle listener failed for {event_type} "
                    f"{payload.get('type_name')}/{payload.get('record_id')}: {exc}",
                    exc_info=True,
                )
