"""
ROS Command Layer — Public API
================================
Policy rejections are values, not exceptions.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
