"""
ROS Django Adapter Views
========================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import (
    HttpApiResult,
    RemindersReadRequest,
    SubRecordActionHttpRequest,
    SubRecordAddHttpRequest,
    SubRecordAddress,
    SubRecordCommentHttpRequest,
    SubRecordEditHttpRequest,
)
from core.http_api.errors import error_response
from core.http_api.handlers import (
    get_reminders,
    post_record_archive,
    post_record_purge,
    post_record_restore,
    post_subrecord_add,
    post_subrecord_comment,
    post_subrecord_edit,
    post_subrecord_remove,
    post_subrecord_submit,
)
from engines.lifecycle.commands import ArchiveRequest, PurgeRequest, RestoreRequest


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _respond(result: HttpApiResult) -> JsonResponse:
    return JsonResponse(result.payload, status=result.status)


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_optional_int(value: Any, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer.") from exc


def _parse_optional_bool(value: Any) -> bool | None:
    if value is None or value == "":
        return None
    return str(value).strip().lower() in ("1", "true", "yes")


def _dispatch_write(
    handler: Callable[..., HttpApiResult],
    contract_factory: Callable[[dict[str, Any]], Any],
    request: HttpRequest,
) -> JsonResponse:
    try:
        body = _parse_json_body(request)
        contract = contract_factory(body)
    except (ValueError, KeyError, TypeError) as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(handler(contract, build_dependencies()))


# ── Lifecycle ─────────────────────────────────────────────────

@csrf_exempt
@require_POST
def record_archive_view(request: HttpRequest, type_name: str, record_id: str):
    return _dispatch_write(
        post_record_archive,
        lambda body: ArchiveRequest(
            type_name=type_name,
            record_id=record_id,
            reason=body.get("reason"),
            expected_version=_parse_optional_int(body.get("expected_version"), "expected_version"),
        ),
        request,
    )


@csrf_exempt
@require_POST
def record_restore_view(request: HttpRequest, type_name: str, record_id: str):
    return _dispatch_write(
        post_record_restore,
        lambda body: RestoreRequest(
            type_name=type_name,
            record_id=record_id,
            reason=body.get("reason") or "",
            expected_version=_parse_optional_int(body.get("expected_version"), "expected_version"),
        ),
        request,
    )


@csrf_exempt
@require_POST
def record_purge_view(request: HttpRequest, type_name: str, record_id: str):
    return _dispatch_write(
        post_record_purge,
        lambda body: PurgeRequest(type_name=type_name, record_id=record_id),
        request,
    )


# ── Reminders ─────────────────────────────────────────────────

@require_GET
def reminders_view(request: HttpRequest, type_name: str):
    try:
        contract = RemindersReadRequest(
            type_name=type_name,
            include_upcoming=_parse_optional_bool(request.GET.get("include_upcoming")),
        )
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(get_reminders(contract, build_dependencies()))


# ── Sub-records ───────────────────────────────────────────────

@csrf_exempt
@require_POST
def subrecord_add_view(request: HttpRequest, type_name: str, record_id: str, kind: str):
    return _dispatch_write(
        post_subrecord_add,
        lambda body: SubRecordAddHttpRequest(
            address=SubRecordAddress(type_name, record_id, kind),
            fields=body.get("fields") or {},
            agent_id=body.get("agent_id"),
        ),
        request,
    )


@csrf_exempt
@require_POST
def subrecord_edit_view(request: HttpRequest, type_name: str, record_id: str, kind: str, sub_id: str):
    return _dispatch_write(
        post_subrecord_edit,
        lambda body: SubRecordEditHttpRequest(
            address=SubRecordAddress(type_name, record_id, kind, sub_id),
            field_name=body["field"],
            value=body.get("value"),
        ),
        request,
    )


@csrf_exempt
@require_POST
def subrecord_submit_view(request: HttpRequest, type_name: str, record_id: str, kind: str, sub_id: str):
    return _dispatch_write(
        post_subrecord_submit,
        lambda body: SubRecordActionHttpRequest(
            address=SubRecordAddress(type_name, record_id, kind, sub_id),
        ),
        request,
    )


@csrf_exempt
@require_POST
def subrecord_remove_view(request: HttpRequest, type_name: str, record_id: str, kind: str, sub_id: str):
    return _dispatch_write(
        post_subrecord_remove,
        lambda body: SubRecordActionHttpRequest(
            address=SubRecordAddress(type_name, record_id, kind, sub_id),
        ),
        request,
    )


@csrf_exempt
@require_POST
def subrecord_comment_view(request: HttpRequest, type_name: str, record_id: str, kind: str, sub_id: str):
    return _dispatch_write(
        post_subrecord_comment,
        lambda body: SubRecordCommentHttpRequest(
            address=SubRecordAddress(type_name, record_id, kind, sub_id),
            text=body.get("text", ""),
        ),
        request,
    )
