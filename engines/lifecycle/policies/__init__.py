"""
ROS Lifecycle Engine — Policies
=================================
Preconditions for partition moves.
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import ReasonCode, RejectionReason


def restore_requires_reason_policy(reason: Any) -> Optional[RejectionReason]:
    if not isinstance(reason, str) or not reason.strip():
        return RejectionReason(
            code=ReasonCode.REASON_REQUIRED,
            message="Reason is required to restore a record",
            policy_name="restore_requires_reason_policy",
        )
    return None
