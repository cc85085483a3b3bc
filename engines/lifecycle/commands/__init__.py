"""
ROS Lifecycle Engine — Request Commands
=========================================
Typed lifecycle requests accepted by the HTTP adapter and the service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def _check_address(type_name: str, record_id: str) -> None:
    if not type_name or "/" in type_name:
        raise ValueError("type_name must be a non-empty path segment.")
    if not record_id or "/" in record_id:
        raise ValueError("record_id must be a non-empty path segment.")


@dataclass(frozen=True)
class ArchiveRequest:
    """Move an active record to the Archived partition."""
    type_name: str
    record_id: str
    reason: Optional[str] = None
    expected_version: Optional[int] = None

    def __post_init__(self):
        _check_address(self.type_name, self.record_id)


@dataclass(frozen=True)
class RestoreRequest:
    """
    Move an archived record back to Active.

    An empty reason is not rejected here: the service turns it into a
    field-level ValidationError so forms can show it next to the input.
    """
    type_name: str
    record_id: str
    reason: str = ""
    expected_version: Optional[int] = None

    def __post_init__(self):
        _check_address(self.type_name, self.record_id)


@dataclass(frozen=True)
class PurgeRequest:
    """Irreversibly delete an archived record."""
    type_name: str
    record_id: str

    def __post_init__(self):
        _check_address(self.type_name, self.record_id)
