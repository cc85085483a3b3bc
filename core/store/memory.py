"""
ROS Store — In-Memory Document Store
======================================
Reference implementation of the DocumentStore contract.

Used by tests and by single-process tooling. Documents are kept as a
flat path → (fields, version) map; hierarchy is derived from paths.
Snapshots are deep copies, so callers can never mutate stored state
by holding on to a returned dict.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

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


class InMemoryDocumentStore:
    """
    Path-addressed document store held in a dict.

    atomic_batches=False models a backend without multi-key
    transactions; callers must then fall back to sequential writes.
    """

    def __init__(self, *, atomic_batches: bool = True) -> None:
        self._docs: Dict[str, Tuple[Dict[str, Any], int]] = {}
        self._listeners: Dict[str, List[ChangeListener]] = {}
        self.supports_atomic_batches = atomic_batches

    # ── Reads ─────────────────────────────────────────────────

    def _snapshot(self, path: str) -> Optional[Snapshot]:
        entry = self._docs.get(path)
        if entry is None:
            return None
        fields, version = entry
        return Snapshot(path=path, fields=copy.deepcopy(fields), version=version)

    def read(self, path: str) -> Optional[Snapshot]:
        return self._snapshot(path)

    def children(self, path: str) -> List[Snapshot]:
        return [
            self._snapshot(p)
            for p in sorted(self._docs)
            if parent_of(p) == path
        ]

    def walk(self, path: str) -> List[Snapshot]:
        return [self._snapshot(p) for p in sorted(self._docs) if is_descendant(p, path)]

    def query_equal(self, path: str, field_name: str, value: Any) -> List[Snapshot]:
        return [s for s in self.children(path) if s.fields.get(field_name) == value]

    # ── Writes ────────────────────────────────────────────────

    def _current_version(self, path: str) -> int:
        entry = self._docs.get(path)
        return entry[1] if entry is not None else 0

    def _check_version(self, path: str, expected_version: Optional[int]) -> None:
        if expected_version is None:
            return
        actual = self._current_version(path)
        if actual != expected_version:
            raise VersionConflictError(path, expected_version, actual)

    def _apply_write(self, path: str, fields: Dict[str, Any]) -> Snapshot:
        if not isinstance(fields, dict):
            raise StorageError("fields must be a dict.", path=path)
        version = self._current_version(path) + 1
        self._docs[path] = (copy.deepcopy(fields), version)
        return Snapshot(path=path, fields=copy.deepcopy(fields), version=version)

    def _apply_delete(self, path: str) -> int:
        doomed = [p for p in self._docs if is_descendant(p, path)]
        for p in doomed:
            del self._docs[p]
        return len(doomed)

    def write(
        self, path: str, fields: Dict[str, Any], *, expected_version: Optional[int] = None,
    ) -> Snapshot:
        self._check_version(path, expected_version)
        snapshot = self._apply_write(path, fields)
        logger.debug("write %s v%d", path, snapshot.version)
        self._notify([path])
        return snapshot

    def delete(self, path: str) -> None:
        removed = self._apply_delete(path)
        logger.debug("delete %s (%d documents)", path, removed)
        self._notify([path])

    def commit_batch(self, ops: Sequence[BatchOp]) -> None:
        if not self.supports_atomic_batches:
            raise StorageError("Atomic batches are not supported by this store.")
        staged = dict(self._docs)
        try:
            for op in ops:
                self._check_version(op.path, op.expected_version)
                if op.kind == OP_DELETE:
                    self._apply_delete(op.path)
                else:
                    self._apply_write(op.path, op.fields)
        except Exception:
            self._docs = staged
            raise
        logger.debug("batch committed (%d ops)", len(ops))
        self._notify([op.path for op in ops])

    # ── Subscriptions ─────────────────────────────────────────

    def subscribe(self, path: str, on_change: ChangeListener) -> Unsubscribe:
        self._listeners.setdefault(path, []).append(on_change)
        on_change(self._snapshot(path))

        def unsubscribe() -> None:
            listeners = self._listeners.get(path, [])
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    def _notify(self, changed_paths: Sequence[str]) -> None:
        for watched, listeners in list(self._listeners.items()):
            if not any(is_descendant(p, watched) or is_descendant(watched, p) for p in changed_paths):
                continue
            snapshot = self._snapshot(watched)
            for listener in list(listeners):
                try:
                    listener(snapshot)
                except Exception as exc:
                    logger.error(
                        f"Change listener for {watched} failed: {exc}",
                        exc_info=True,
                    )

    @property
    def document_count(self) -> int:
        return len(self._docs)
