"""
ROS Store — Path Convention
=============================
Logical addressing inside the hierarchical document store:

    <Partition>/<Type>/<recordId>
    <Partition>/<Type>/<recordId>/<subKind>/<subId>

Two partitions per type: Active and Archived. Archiving relocates a
record between partitions; it never changes its id.
"""

from __future__ import annotations

from enum import Enum
from typing import List


class Partition(Enum):
    ACTIVE = "Active"
    ARCHIVED = "Archived"

    @property
    def opposite(self) -> "Partition":
        return Partition.ARCHIVED if self is Partition.ACTIVE else Partition.ACTIVE


# Pending non-atomic moves are journaled here until the source delete lands.
MOVE_JOURNAL_ROOT = "_moves"

SEPARATOR = "/"


def _check_segment(segment: str) -> str:
    if not isinstance(segment, str) or not segment.strip():
        raise ValueError("path segment must be a non-empty string.")
    if SEPARATOR in segment:
        raise ValueError(f"path segment '{segment}' must not contain '/'.")
    return segment


def join_path(*segments: str) -> str:
    return SEPARATOR.join(_check_segment(s) for s in segments)


def split_path(path: str) -> List[str]:
    return [s for s in path.split(SEPARATOR) if s]


def parent_of(path: str) -> str:
    parts = split_path(path)
    return SEPARATOR.join(parts[:-1])


def key_of(path: str) -> str:
    parts = split_path(path)
    return parts[-1] if parts else ""


def is_descendant(path: str, root: str) -> bool:
    return path == root or path.startswith(root + SEPARATOR)


def rebase_path(path: str, old_root: str, new_root: str) -> str:
    """Move `path` from under `old_root` to the same position under `new_root`."""
    if not is_descendant(path, old_root):
        raise ValueError(f"'{path}' is not under '{old_root}'.")
    return new_root + path[len(old_root):]


def collection_path(partition: Partition, type_name: str) -> str:
    return join_path(partition.value, type_name)


def record_path(partition: Partition, type_name: str, record_id: str) -> str:
    return join_path(partition.value, type_name, record_id)


def subcollection_path(
    partition: Partition, type_name: str, record_id: str, sub_kind: str,
) -> str:
    return join_path(partition.value, type_name, record_id, sub_kind)


def subrecord_path(
    partition: Partition, type_name: str, record_id: str, sub_kind: str, sub_id: str,
) -> str:
    return join_path(partition.value, type_name, record_id, sub_kind, sub_id)


def move_journal_path(type_name: str, record_id: str) -> str:
    return join_path(MOVE_JOURNAL_ROOT, type_name, record_id)
