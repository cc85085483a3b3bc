"""
ROS Django Adapter Wiring
=========================
Constructs HttpApiDependencies for the Django runtime.

This module is adapter-only glue:
- ORM-backed document store, Django file storage for uploads
- record types and timezone from ROS_* settings
- one lazily built instance per process
"""

from __future__ import annotations

import threading

from core.config.rules import load_config_from_settings
from core.http_api.dependencies import HttpApiDependencies
from core.store.blobs import DjangoFileBlobStore
from core.store.django_store import DjangoDocumentStore
from core.time.clock import SystemClock
from engines.records.services import RecordService

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def _create_dependencies() -> HttpApiDependencies:
    config = load_config_from_settings()
    clock = SystemClock()
    record_service = RecordService(
        store=DjangoDocumentStore(),
        config=config,
        clock=clock,
        blob_store=DjangoFileBlobStore(),
    )
    return HttpApiDependencies(
        record_service=record_service,
        config=config,
        clock=clock,
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def override_dependencies(dependencies: HttpApiDependencies | None) -> None:
    """Swap the process-wide wiring (None rebuilds lazily on next use)."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = dependencies
