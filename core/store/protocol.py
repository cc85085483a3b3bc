"""
ROS Store — Document Store Contract
=====================================
The persistence mechanism is an external collaborator: a hierarchical
key-value document store with path-addressed read/write/delete, a
subscribe-for-changes primitive and equality queries over a
collection's direct children.

Every stored document carries a store-managed integer `version`.
Writes may pass `expected_version` (0 = must not exist); a mismatch
raises VersionConflictError instead of silently overwriting.

Stores that can commit several writes/deletes atomically advertise
`supports_atomic_batches = True` and implement `commit_batch`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from core.store.paths import key_of

OP_WRITE = "WRITE"
OP_DELETE = "DELETE"


# ══════════════════════════════════════════════════════════════
# SNAPSHOT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of one stored document."""

    path: str
    fields: Dict[str, Any]
    version: int

    @property
    def key(self) -> str:
        return key_of(self.path)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


# ══════════════════════════════════════════════════════════════
# BATCH OPERATIONS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BatchOp:
    kind: str  # WRITE | DELETE
    path: str
    fields: Dict[str, Any] = field(default_factory=dict)
    expected_version: Optional[int] = None

    def __post_init__(self):
        if self.kind not in (OP_WRITE, OP_DELETE):
            raise ValueError(f"Unknown batch op kind: {self.kind}")
        if not self.path:
            raise ValueError("path must be non-empty.")


def write_op(path: str, fields: Dict[str, Any], expected_version: Optional[int] = None) -> BatchOp:
    return BatchOp(kind=OP_WRITE, path=path, fields=fields, expected_version=expected_version)


def delete_op(path: str) -> BatchOp:
    return BatchOp(kind=OP_DELETE, path=path)


ChangeListener = Callable[[Optional[Snapshot]], None]
Unsubscribe = Callable[[], None]


# ══════════════════════════════════════════════════════════════
# STORE PROTOCOLS
# ══════════════════════════════════════════════════════════════

class DocumentStore(Protocol):
    supports_atomic_batches: bool

    def read(self, path: str) -> Optional[Snapshot]:
        ...  # pragma: no cover

    def write(
        self, path: str, fields: Dict[str, Any], *, expected_version: Optional[int] = None,
    ) -> Snapshot:
        """Replace the document at path (not its descendants)."""
        ...  # pragma: no cover

    def delete(self, path: str) -> None:
        """Remove the document at path and every descendant."""
        ...  # pragma: no cover

    def children(self, path: str) -> List[Snapshot]:
        """Direct child documents of path, ordered by key."""
        ...  # pragma: no cover

    def walk(self, path: str) -> List[Snapshot]:
        """The document at path (if any) and all descendants, ordered by path."""
        ...  # pragma: no cover

    def subscribe(self, path: str, on_change: ChangeListener) -> Unsubscribe:
        """
        Push the current snapshot of path immediately, then again after
        every change to path or any descendant. Returns unsubscribe().
        """
        ...  # pragma: no cover

    def query_equal(self, path: str, field_name: str, value: Any) -> List[Snapshot]:
        """Direct children of path whose field equals value."""
        ...  # pragma: no cover

    def commit_batch(self, ops: Sequence[BatchOp]) -> None:
        """All-or-nothing; only meaningful when supports_atomic_batches."""
        ...  # pragma: no cover


class BlobStore(Protocol):
    def upload(self, data: bytes, path: str) -> str:
        """Store bytes at path; return a retrievable URL. Raises UploadError."""
        ...  # pragma: no cover


def supports_batches(store: Any) -> bool:
    return bool(getattr(store, "supports_atomic_batches", False)) and callable(
        getattr(store, "commit_batch", None)
    )
