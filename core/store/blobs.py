"""
ROS Store — Blob Upload Collaborators
=======================================
Photo/document fields are uploaded separately from the record write.
An upload failure raises UploadError to the caller; the record
operation that triggered it proceeds independently.
"""

from __future__ import annotations

import logging
from typing import Dict

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from core.errors import UploadError

logger = logging.getLogger("ros.store")


class InMemoryBlobStore:
    """Test blob store. `fail_paths` simulates rejected uploads."""

    def __init__(self, base_url: str = "memory://blobs") -> None:
        self._base_url = base_url.rstrip("/")
        self._blobs: Dict[str, bytes] = {}
        self.fail_paths: set = set()

    def upload(self, data: bytes, path: str) -> str:
        if not isinstance(data, (bytes, bytearray)):
            raise UploadError(path, "data must be bytes.")
        if path in self.fail_paths:
            raise UploadError(path, "simulated upload failure")
        self._blobs[path] = bytes(data)
        return f"{self._base_url}/{path}"

    def get(self, path: str) -> bytes:
        return self._blobs[path]


class DjangoFileBlobStore:
    """Blob store over Django's configured default file storage."""

    def upload(self, data: bytes, path: str) -> str:
        try:
            name = default_storage.save(path, ContentFile(data))
            return default_storage.url(name)
        except Exception as exc:
            logger.error(f"Upload to {path} failed: {exc}", exc_info=True)
            raise UploadError(path, str(exc)) from exc
