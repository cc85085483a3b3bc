"""
ROS Store — Django ORM Document Store
=======================================
DocumentStore backed by the StoredDocument table.

- Every write bumps `version`; `expected_version` is checked under a
  row lock inside transaction.atomic().
- commit_batch() runs all operations in one transaction, so record
  archive/restore moves are atomic on this backend.
- Subscribers are in-process and are notified AFTER commit.

Database failures surface as StorageError; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from django.db import DatabaseError, transaction
from django.db.models import Q

from core.errors import StorageError, VersionConflictError
from core.store.paths import is_descendant, parent_of
from core.store.protocol import (
    OP_DELETE,
    BatchOp,
    ChangeListener,
    Snapshot,
    Unsubscribe,
)

logger = logging.getLogger("ros.store")


def _to_snapshot(row) -> Snapshot:
    return Snapshot(path=row.path, fields=dict(row.fields or {}), version=row.version)


def _subtree(path: str) -> Q:
    return Q(path=path) | Q(path__startswith=path + "/")


class DjangoDocumentStore:
    supports_atomic_batches = True

    def __init__(self) -> None:
        self._listeners: Dict[str, List[ChangeListener]] = {}

    # ── Reads ─────────────────────────────────────────────────

    def read(self, path: str) -> Optional[Snapshot]:
        from core.store.models import StoredDocument

        try:
            row = StoredDocument.objects.filter(path=path).first()
        except DatabaseError as exc:
            raise StorageError(f"Read failed: {exc}", path=path) from exc
        return _to_snapshot(row) if row is not None else None

    def children(self, path: str) -> List[Snapshot]:
        from core.store.models import StoredDocument

        try:
            rows = StoredDocument.objects.filter(parent_path=path).order_by("path")
            return [_to_snapshot(r) for r in rows]
        except DatabaseError as exc:
            raise StorageError(f"List failed: {exc}", path=path) from exc

    def walk(self, path: str) -> List[Snapshot]:
        from core.store.models import StoredDocument

        try:
            rows = StoredDocument.objects.filter(_subtree(path)).order_by("path")
            return [_to_snapshot(r) for r in rows]
        except DatabaseError as exc:
            raise StorageError(f"Walk failed: {exc}", path=path) from exc

    def query_equal(self, path: str, field_name: str, value: Any) -> List[Snapshot]:
        from core.store.models import StoredDocument

        try:
            rows = StoredDocument.objects.filter(
                parent_path=path, **{f"fields__{field_name}": value},
            ).order_by("path")
            return [_to_snapshot(r) for r in rows]
        except DatabaseError as exc:
            raise StorageError(f"Query failed: {exc}", path=path) from exc

    # ── Writes ────────────────────────────────────────────────

    def _apply_write(self, path: str, fields: Dict[str, Any], expected_version: Optional[int]) -> Snapshot:
        from core.store.models import StoredDocument

        row = StoredDocument.objects.select_for_update().filter(path=path).first()
        actual = row.version if row is not None else 0
        if expected_version is not None and actual != expected_version:
            raise VersionConflictError(path, expected_version, actual)
        if row is None:
            row = StoredDocument(path=path, parent_path=parent_of(path), fields=fields, version=1)
        else:
            row.fields = fields
            row.version = actual + 1
        row.save()
        return _to_snapshot(row)

    def _apply_delete(self, path: str) -> None:
        from core.store.models import StoredDocument

        StoredDocument.objects.filter(_subtree(path)).delete()

    def write(
        self, path: str, fields: Dict[str, Any], *, expected_version: Optional[int] = None,
    ) -> Snapshot:
        try:
            with transaction.atomic():
                snapshot = self._apply_write(path, fields, expected_version)
                transaction.on_commit(lambda: self._notify([path]))
        except DatabaseError as exc:
            raise StorageError(f"Write failed: {exc}", path=path) from exc
        return snapshot

    def delete(self, path: str) -> None:
        try:
            with transaction.atomic():
                self._apply_delete(path)
                transaction.on_commit(lambda: self._notify([path]))
        except DatabaseError as exc:
            raise StorageError(f"Delete failed: {exc}", path=path) from exc

    def commit_batch(self, ops: Sequence[BatchOp]) -> None:
        paths = [op.path for op in ops]
        try:
            with transaction.atomic():
                for op in ops:
                    if op.kind == OP_DELETE:
                        self._apply_delete(op.path)
                    else:
                        self._apply_write(op.path, op.fields, op.expected_version)
                transaction.on_commit(lambda: self._notify(paths))
        except DatabaseError as exc:
            raise StorageError(f"Batch aborted: {exc}") from exc
        logger.debug("batch committed (%d ops)", len(ops))

    # ── Subscriptions ─────────────────────────────────────────

    def subscribe(self, path: str, on_change: ChangeListener) -> Unsubscribe:
        self._listeners.setdefault(path, []).append(on_change)
        on_change(self.read(path))

        def unsubscribe() -> None:
            listeners = self._listeners.get(path, [])
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    def _notify(self, changed_paths: Sequence[str]) -> None:
        """
        Called via transaction.on_commit(). Listener failure must never
        affect the committed write.
        """
        for watched, listeners in list(self._listeners.items()):
            if not any(is_descendant(p, watched) or is_descendant(watched, p) for p in changed_paths):
                continue
            snapshot = self.read(watched)
            for listener in list(listeners):
                try:
                    listener(snapshot)
                except Exception as exc:
                    logger.error(
                        f"Post-commit listener for {watched} failed: {exc}",
                        exc_info=True,
                    )
