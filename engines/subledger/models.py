"""
ROS Sub-record Ledger — Models
================================
A SubRecord is one nested entry (payment, worker, agent) owned by a
parent record. Stored form is a flat camelCase document:

    {id, parentId, isLocked, submittedAt, createdAt, comments, ...business fields}

Older documents sometimes carry submittedAt without isLocked; either
marker means the entry is locked.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

RESERVED_FIELDS = (
    "id",
    "parentId",
    "isLocked",
    "submittedAt",
    "createdAt",
    "comments",
)


@dataclass(frozen=True)
class Comment:
    """Append-only note. Never edited once written."""

    id: str
    text: str
    created_at: str

    def __post_init__(self):
        if not self.id:
            raise ValueError("id must be non-empty.")
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("text must be a non-empty string.")

    def to_fields(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "createdAt": self.created_at}

    @classmethod
    def from_fields(cls, raw: Mapping[str, Any]) -> "Comment":
        return cls(
            id=str(raw.get("id")),
            text=str(raw.get("text", "")),
            created_at=str(raw.get("createdAt", "")),
        )


def comments_from_fields(raw: Any) -> Tuple[Comment, ...]:
    """Tolerates missing/blank entries in legacy comment lists."""
    if not raw:
        return ()
    entries = raw.values() if isinstance(raw, Mapping) else raw
    return tuple(
        Comment.from_fields(c)
        for c in entries
        if isinstance(c, Mapping) and str(c.get("text", "")).strip()
    )


@dataclass(frozen=True)
class SubRecord:
    id: str
    parent_id: str
    kind: str
    fields: Dict[str, Any] = field(default_factory=dict)
    locked: bool = False
    submitted_at: Optional[str] = None
    created_at: Optional[str] = None
    comments: Tuple[Comment, ...] = ()

    def __post_init__(self):
        if not self.id:
            raise ValueError("id must be non-empty.")
        if not self.parent_id:
            raise ValueError("parent_id must be non-empty.")
        for name in RESERVED_FIELDS:
            if name in self.fields:
                raise ValueError(f"'{name}' is managed by the ledger.")

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def with_field(self, name: str, value: Any) -> "SubRecord":
        updated = dict(self.fields)
        updated[name] = value
        return replace(self, fields=updated)

    def with_comment(self, comment: Comment) -> "SubRecord":
        return replace(self, comments=(comment,) + self.comments)

    def locked_at(self, submitted_at: str) -> "SubRecord":
        return replace(self, locked=True, submitted_at=submitted_at)

    def to_fields(self) -> Dict[str, Any]:
        doc = dict(self.fields)
        doc.update({
            "id": self.id,
            "parentId": self.parent_id,
            "isLocked": self.locked,
            "submittedAt": self.submitted_at,
            "createdAt": self.created_at,
            "comments": [c.to_fields() for c in self.comments],
        })
        return doc

    @classmethod
    def from_fields(
        cls, kind: str, raw: Mapping[str, Any], *, fallback_id: str = "", fallback_parent: str = "",
    ) -> "SubRecord":
        business = {k: v for k, v in raw.items() if k not in RESERVED_FIELDS}
        submitted_at = raw.get("submittedAt") or None
        return cls(
            id=str(raw.get("id") or fallback_id),
            parent_id=str(raw.get("parentId") or fallback_parent),
            kind=kind,
            fields=business,
            locked=bool(raw.get("isLocked")) or submitted_at is not None,
            submitted_at=submitted_at,
            created_at=raw.get("createdAt"),
            comments=comments_from_fields(raw.get("comments")),
        )


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of submit(): ok, or a field → message map with state unchanged."""

    ok: bool
    errors: Dict[str, str] = field(default_factory=dict)
    subrecord: Optional[SubRecord] = None

    def __post_init__(self):
        if self.ok and self.errors:
            raise ValueError("A successful submit carries no errors.")
        if not self.ok and not self.errors:
            raise ValueError("A failed submit must carry errors.")
