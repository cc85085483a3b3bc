"""
ROS Core — Error Taxonomy
===========================
ValidationError   — field → message map; local, recoverable, blocks
                    only the submission that produced it.
StorageError      — backend/network failure; surfaced to the caller,
                    never retried automatically, local state unchanged.
UploadError       — blob upload failure; the parent operation proceeds
                    independently.

Consistency risk (duplicate/lost record after an interrupted move)
is NOT an exception type; see engines.lifecycle.reconcile.
"""

from __future__ import annotations

from typing import Dict, Optional


class ValidationError(Exception):
    """One or more fields failed validation."""

    def __init__(self, errors: Dict[str, str]):
        if not errors:
            raise ValueError("ValidationError requires at least one field error.")
        self.errors = dict(errors)
        super().__init__(
            "Validation failed: "
            + ", ".join(f"{k}: {v}" for k, v in sorted(self.errors.items()))
        )


class StorageError(Exception):
    """Document store read/write/delete failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message if path is None else f"{message} [{path}]")


class VersionConflictError(StorageError):
    """Optimistic-concurrency token mismatch: the document changed since it was read."""

    def __init__(self, path: str, expected_version: int, actual_version: int):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Version conflict: expected {expected_version}, "
            f"found {actual_version}",
            path=path,
        )


class NotFoundError(LookupError):
    """Addressed record or sub-record does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not found: {path}")


class UploadError(Exception):
    """Blob store rejected an upload."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Upload to '{path}' failed: {detail}")
