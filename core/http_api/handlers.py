"""
ROS HTTP API - Framework-Agnostic Handlers
==========================================
Pure handler functions over contracts and injected dependencies.
Every handler returns an HttpApiResult; known service exceptions are
mapped to error envelopes, anything else propagates.
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from core.config.rules import SUB_KIND_AGENTS, SUB_KIND_PAYMENTS
from core.errors import NotFoundError, StorageError, ValidationError
from core.http_api.contracts import (
    HttpApiResult,
    RemindersReadRequest,
    SubRecordAddress,
    SubRecordActionHttpRequest,
    SubRecordAddHttpRequest,
    SubRecordCommentHttpRequest,
    SubRecordEditHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import exception_result, rejection_details, success_response
from core.reminders import (
    classify,
    count_by_urgency,
    days_until,
    is_near,
    nearest_reminder_date,
    sort_by_urgency,
)
from core.time.clock import local_today
from engines.lifecycle.commands import ArchiveRequest, PurgeRequest, RestoreRequest

MAPPED_ERRORS = (ValidationError, NotFoundError, StorageError, ValueError)


def _guarded(handler: Callable[..., HttpApiResult]) -> Callable[..., HttpApiResult]:
    @functools.wraps(handler)
    def wrapper(*args, **kwargs) -> HttpApiResult:
        try:
            return handler(*args, **kwargs)
        except MAPPED_ERRORS as exc:
            return exception_result(exc)

    return wrapper


def _ok(data: Any, status: int = 200) -> HttpApiResult:
    return HttpApiResult(status, success_response(data))


# ══════════════════════════════════════════════════════════════
# LIFECYCLE
# ══════════════════════════════════════════════════════════════

@_guarded
def post_record_archive(request: ArchiveRequest, deps: HttpApiDependencies) -> HttpApiResult:
    record = deps.record_service.lifecycle.handle(request)
    return _ok(record.to_dict())


@_guarded
def post_record_restore(request: RestoreRequest, deps: HttpApiDependencies) -> HttpApiResult:
    record = deps.record_service.lifecycle.handle(request)
    return _ok(record.to_dict())


@_guarded
def post_record_purge(request: PurgeRequest, deps: HttpApiDependencies) -> HttpApiResult:
    deps.record_service.lifecycle.handle(request)
    return _ok({"type": request.type_name, "id": request.record_id, "purged": True})


# ══════════════════════════════════════════════════════════════
# REMINDERS
# ══════════════════════════════════════════════════════════════

@_guarded
def get_reminders(request: RemindersReadRequest, deps: HttpApiDependencies) -> HttpApiResult:
    service = deps.record_service
    service.rule_for(request.type_name)
    tz_name = deps.config.local_time_zone
    include_upcoming = (
        deps.config.reminders_include_upcoming
        if request.include_upcoming is None
        else request.include_upcoming
    )
    today = local_today(deps.clock, tz_name)

    entries = []
    for summary in service.list_records(request.type_name):
        record = service.get(request.type_name, summary.id)
        nearest = nearest_reminder_date(record.as_document(), tz_name)
        entries.append({
            "id": record.id,
            "idNo": record.get("idNo"),
            "name": record.get("name") or record.get("hospitalName"),
            "reminderDate": nearest.isoformat() if nearest else None,
            "urgency": classify(nearest, today=today, tz_name=tz_name).value,
            "daysUntil": days_until(nearest, today=today, tz_name=tz_name),
        })

    near = [
        e for e in entries
        if is_near(e["reminderDate"], include_upcoming=include_upcoming, today=today, tz_name=tz_name)
    ]
    ordered = sort_by_urgency(
        near,
        date_of=lambda e: e["reminderDate"],
        id_of=lambda e: e["id"],
        today=today,
        tz_name=tz_name,
    )
    counts = count_by_urgency(
        (e["reminderDate"] for e in entries), today=today, tz_name=tz_name,
    )
    return _ok({
        "items": ordered,
        "counts": {bucket.value: n for bucket, n in counts.items()},
        "pending": len(near),
    })


# ══════════════════════════════════════════════════════════════
# SUB-RECORDS
# ══════════════════════════════════════════════════════════════

def _ledger(deps: HttpApiDependencies, address):
    return deps.record_service.ledger(address.type_name, address.record_id, address.kind)


def _after_membership_change(deps: HttpApiDependencies, address) -> None:
    if address.kind == SUB_KIND_AGENTS:
        deps.record_service.sync_visit_type(address.type_name, address.record_id)


@_guarded
def post_subrecord_add(request: SubRecordAddHttpRequest, deps: HttpApiDependencies) -> HttpApiResult:
    address = request.address
    ledger = _ledger(deps, address)
    if request.agent_id is not None:
        if address.kind != SUB_KIND_PAYMENTS:
            raise ValueError("agent_id is only accepted for payments.")
        agents = _ledger(deps, SubRecordAddress(address.type_name, address.record_id, SUB_KIND_AGENTS))
        entry = ledger.add_payment_for_agent(agents, request.agent_id, request.fields)
    else:
        entry = ledger.add(request.fields)
    _after_membership_change(deps, address)
    return _ok(entry.to_fields(), status=201)


@_guarded
def post_subrecord_edit(request: SubRecordEditHttpRequest, deps: HttpApiDependencies) -> HttpApiResult:
    address = request.address
    ledger = _ledger(deps, address)
    rejection = ledger.edit(address.sub_id, request.field_name, request.value)
    if rejection is not None:
        return _ok(rejection_details(rejection))
    return _ok({"applied": True, "entry": ledger.get(address.sub_id).to_fields()})


@_guarded
def post_subrecord_submit(request: SubRecordActionHttpRequest, deps: HttpApiDependencies) -> HttpApiResult:
    address = request.address
    result = _ledger(deps, address).submit(address.sub_id)
    if not result.ok:
        raise ValidationError(result.errors)
    return _ok(result.subrecord.to_fields())


@_guarded
def post_subrecord_remove(request: SubRecordActionHttpRequest, deps: HttpApiDependencies) -> HttpApiResult:
    address = request.address
    rejection = _ledger(deps, address).remove(address.sub_id)
    if rejection is not None:
        return _ok(rejection_details(rejection))
    _after_membership_change(deps, address)
    return _ok({"applied": True, "id": address.sub_id})


@_guarded
def post_subrecord_comment(request: SubRecordCommentHttpRequest, deps: HttpApiDependencies) -> HttpApiResult:
    address = request.address
    ledger = _ledger(deps, address)
    rejection = ledger.comment(address.sub_id, request.text)
    if rejection is not None:
        raise ValidationError({"text": rejection.message})
    return _ok({"applied": True, "entry": ledger.get(address.sub_id).to_fields()})
