"""
ROS HTTP API - Error Mapping
============================
Stable transport error mapping for policy rejections and service failures.

    ValidationError      → 400 VALIDATION_FAILED (details = field map)
    ValueError           → 400 INVALID_REQUEST
    NotFoundError        → 404 NOT_FOUND
    VersionConflictError → 409 VERSION_CONFLICT
    StorageError         → 503 STORAGE_UNAVAILABLE
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.commands.rejection import RejectionReason
from core.errors import NotFoundError, StorageError, ValidationError, VersionConflictError
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse, HttpApiResult

logger = logging.getLogger("ros.http")


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(data: Any) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data).to_dict()


def rejection_details(reason: RejectionReason) -> dict[str, Any]:
    """Rejections are no-ops, not failures: reported inside a successful envelope."""
    return {"applied": False, "rejection": reason.to_dict()}


def exception_result(exc: Exception) -> HttpApiResult:
    if isinstance(exc, ValidationError):
        return HttpApiResult(400, error_response(
            code="VALIDATION_FAILED", message="Validation failed.", details=exc.errors,
        ))
    if isinstance(exc, NotFoundError):
        return HttpApiResult(404, error_response(
            code="NOT_FOUND", message=str(exc), details={"path": exc.path},
        ))
    if isinstance(exc, VersionConflictError):
        return HttpApiResult(409, error_response(
            code="VERSION_CONFLICT",
            message=str(exc),
            details={
                "path": exc.path,
                "expected_version": exc.expected_version,
                "actual_version": exc.actual_version,
            },
        ))
    if isinstance(exc, StorageError):
        logger.error(f"Storage failure: {exc}")
        return HttpApiResult(503, error_response(
            code="STORAGE_UNAVAILABLE", message=str(exc), details={"path": exc.path},
        ))
    if isinstance(exc, ValueError):
        return HttpApiResult(400, error_response(code="INVALID_REQUEST", message=str(exc)))
    raise TypeError(f"Unmapped exception type: {type(exc).__name__}") from exc
