"""
ROS Sub-record Ledger — Policies
==================================
Field-level editability and submission rules for nested entries.

One declarative table (kind, field) → editable_when_locked drives every
locked-entry decision; per-kind validators gate submission.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import (
    DEFAULT_OVERRIDE_FIELDS,
    SUB_KIND_AGENTS,
    SUB_KIND_PAYMENTS,
    SUB_KIND_WORKERS,
)
from core.ledger.aggregator import coerce_amount
from engines.subledger.models import RESERVED_FIELDS, SubRecord

MOBILE_PATTERN = re.compile(r"^\d{10}$")


# ══════════════════════════════════════════════════════════════
# OVERRIDE TABLE
# ══════════════════════════════════════════════════════════════

class OverrideTable:
    """(kind, field) → editable_when_locked. Unlisted pairs are locked."""

    def __init__(self, entries: Optional[Mapping[Tuple[str, str], bool]] = None):
        self._entries: Dict[Tuple[str, str], bool] = dict(entries or {})

    @classmethod
    def from_fields(cls, override_fields: Mapping[str, Iterable[str]]) -> "OverrideTable":
        return cls({
            (kind, name): True
            for kind, names in override_fields.items()
            for name in names
        })

    @classmethod
    def default(cls) -> "OverrideTable":
        return cls.from_fields(DEFAULT_OVERRIDE_FIELDS)

    def editable_when_locked(self, kind: str, field_name: str) -> bool:
        return self._entries.get((kind, field_name), False)


# ══════════════════════════════════════════════════════════════
# MUTATION POLICIES
# ══════════════════════════════════════════════════════════════

def field_editable_policy(
    subrecord: SubRecord, field_name: str, table: OverrideTable,
) -> Optional[RejectionReason]:
    """Unlocked entries accept any business field; locked ones only overrides."""
    if subrecord.locked and not table.editable_when_locked(subrecord.kind, field_name):
        return RejectionReason(
            code=ReasonCode.FIELD_LOCKED,
            message=(
                f"'{field_name}' on {subrecord.kind} entry '{subrecord.id}' "
                f"is locked after submission."
            ),
            policy_name="field_editable_policy",
        )
    if field_name in RESERVED_FIELDS:
        return RejectionReason(
            code=ReasonCode.FIELD_RESERVED,
            message=f"'{field_name}' is managed by the ledger.",
            policy_name="field_editable_policy",
        )
    return None


def remove_requires_unlocked_policy(subrecord: SubRecord) -> Optional[RejectionReason]:
    if subrecord.locked:
        return RejectionReason(
            code=ReasonCode.SUBRECORD_LOCKED,
            message=f"{subrecord.kind} entry '{subrecord.id}' is submitted and cannot be removed.",
            policy_name="remove_requires_unlocked_policy",
        )
    return None


def comment_text_policy(text: Any) -> Optional[RejectionReason]:
    if not isinstance(text, str) or not text.strip():
        return RejectionReason(
            code=ReasonCode.EMPTY_COMMENT,
            message="Comment text must not be empty.",
            policy_name="comment_text_policy",
        )
    return None


# ══════════════════════════════════════════════════════════════
# SUBMISSION VALIDATORS
# ══════════════════════════════════════════════════════════════

def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_mobile(fields: Mapping[str, Any], errors: Dict[str, str], *, required: bool) -> None:
    mobile = fields.get("mobileNo")
    if _blank(mobile):
        if required:
            errors["mobileNo"] = "Mobile No is required"
    elif not MOBILE_PATTERN.match(str(mobile).strip()):
        errors["mobileNo"] = "Enter valid 10-digit mobile number"


def validate_agent(fields: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if _blank(fields.get("name")):
        errors["name"] = "Name is required"
    if _blank(fields.get("designation")):
        errors["designation"] = "Designation is required"
    _check_mobile(fields, errors, required=True)
    return errors


def validate_payment(fields: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    # 0 is a valid commission; null and blank are not
    if _blank(fields.get("commission")):
        errors["commission"] = "Commission is required"
    if _blank(fields.get("paymentMode")):
        errors["paymentMode"] = "Payment Mode is required"
    if _blank(fields.get("date")):
        errors["date"] = "Date is required"
    return errors


def validate_worker(fields: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if _blank(fields.get("name")):
        errors["name"] = "Name is required"
    if _blank(fields.get("designation")):
        errors["designation"] = "Designation is required"
    if coerce_amount(fields.get("basicSalary")) <= 0:
        errors["basicSalary"] = "Basic salary must be greater than 0"
    _check_mobile(fields, errors, required=False)
    return errors


VALIDATORS: Dict[str, Callable[[Mapping[str, Any]], Dict[str, str]]] = {
    SUB_KIND_AGENTS: validate_agent,
    SUB_KIND_PAYMENTS: validate_payment,
    SUB_KIND_WORKERS: validate_worker,
}


def validate_submission(kind: str, fields: Mapping[str, Any]) -> Dict[str, str]:
    validator = VALIDATORS.get(kind)
    if validator is None:
        raise ValueError(f"No validator for sub-collection kind '{kind}'.")
    return validator(fields)
