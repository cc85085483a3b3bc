"""
ROS Command Layer — Rejection Model
======================================
Structured reasons for mutations that were declined by policy.

A rejection is NOT an exception. Locked-field edits and removal of
locked sub-records are silent no-ops for the caller's state; the
RejectionReason is returned so callers and logs can explain why
nothing changed.

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (reason_code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a declined mutation.

    Fields:
        code:        Machine-readable rejection code (e.g. 'SUBRECORD_LOCKED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes. Extensible by engines.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Sub-record ledger ─────────────────────────────────────
    SUBRECORD_LOCKED = "SUBRECORD_LOCKED"
    FIELD_LOCKED = "FIELD_LOCKED"
    FIELD_RESERVED = "FIELD_RESERVED"
    EMPTY_COMMENT = "EMPTY_COMMENT"

    # ── Record lifecycle ──────────────────────────────────────
    REASON_REQUIRED = "REASON_REQUIRED"

    # ── Records ───────────────────────────────────────────────
    DUPLICATE_CONTACT = "DUPLICATE_CONTACT"
    DUPLICATE_ID = "DUPLICATE_ID"
