"""
ROS Store — Public API
========================
Document store contract, path convention and the in-memory store.

The Django-backed store and blob store live in core.store.django_store
and core.store.blobs; import them explicitly where Django is configured.
"""

from core.store.memory import InMemoryDocumentStore
from core.store.paths import (
    MOVE_JOURNAL_ROOT,
    Partition,
    collection_path,
    join_path,
    move_journal_path,
    record_path,
    subcollection_path,
    subrecord_path,
)
from core.store.protocol import (
    BatchOp,
    BlobStore,
    DocumentStore,
    Snapshot,
    delete_op,
    supports_batches,
    write_op,
)

__all__ = [
    "BatchOp",
    "BlobStore",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MOVE_JOURNAL_ROOT",
    "Partition",
    "Snapshot",
    "collection_path",
    "delete_op",
    "join_path",
    "move_journal_path",
    "record_path",
    "subcollection_path",
    "subrecord_path",
    "supports_batches",
    "write_op",
]
