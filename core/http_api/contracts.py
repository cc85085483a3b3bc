"""
ROS HTTP API - Contracts
========================
Framework-agnostic request/response DTOs for record endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from core.config.rules import SUB_KINDS


def _check_segment(value: Any, field_name: str) -> None:
    if not value or not isinstance(value, str) or "/" in value:
        raise ValueError(f"{field_name} must be a non-empty path segment.")


@dataclass(frozen=True)
class SubRecordAddress:
    type_name: str
    record_id: str
    kind: str
    sub_id: Optional[str] = None

    def __post_init__(self):
        _check_segment(self.type_name, "type_name")
        _check_segment(self.record_id, "record_id")
        if self.kind not in SUB_KINDS:
            raise ValueError(f"kind must be one of {', '.join(SUB_KINDS)}.")
        if self.sub_id is not None:
            _check_segment(self.sub_id, "sub_id")


@dataclass(frozen=True)
class SubRecordAddHttpRequest:
    address: SubRecordAddress
    fields: dict[str, Any] = field(default_factory=dict)
    agent_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.fields, dict):
            raise ValueError("fields must be an object.")
        if self.agent_id is not None and not isinstance(self.agent_id, str):
            raise ValueError("agent_id must be a string.")


@dataclass(frozen=True)
class SubRecordEditHttpRequest:
    address: SubRecordAddress
    field_name: str
    value: Any = None

    def __post_init__(self):
        if self.address.sub_id is None:
            raise ValueError("sub_id is required.")
        if not self.field_name or not isinstance(self.field_name, str):
            raise ValueError("field must be a non-empty string.")


@dataclass(frozen=True)
class SubRecordActionHttpRequest:
    """submit / remove: the address is the whole request."""
    address: SubRecordAddress

    def __post_init__(self):
        if self.address.sub_id is None:
            raise ValueError("sub_id is required.")


@dataclass(frozen=True)
class SubRecordCommentHttpRequest:
    address: SubRecordAddress
    text: str

    def __post_init__(self):
        if self.address.sub_id is None:
            raise ValueError("sub_id is required.")
        if not isinstance(self.text, str):
            raise ValueError("text must be a string.")


@dataclass(frozen=True)
class RemindersReadRequest:
    type_name: str
    include_upcoming: Optional[bool] = None

    def __post_init__(self):
        _check_segment(self.type_name, "type_name")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}


@dataclass(frozen=True)
class HttpApiResult:
    """Envelope plus the HTTP status the adapter should send."""
    status: int
    payload: dict[str, Any]
