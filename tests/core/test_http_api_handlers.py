from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.config.rules import InMemoryConfigStore
from core.http_api import (
    HttpApiDependencies,
    RemindersReadRequest,
    SubRecordActionHttpRequest,
    SubRecordAddHttpRequest,
    SubRecordAddress,
    SubRecordCommentHttpRequest,
    SubRecordEditHttpRequest,
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
from core.errors import StorageError
from core.http_api.errors import exception_result
from core.store import InMemoryDocumentStore
from core.time.clock import FixedClock
from engines.lifecycle.commands import ArchiveRequest, PurgeRequest, RestoreRequest
from engines.records import RecordService

# 11:30 IST on 2025-03-10
T0 = datetime(2025, 3, 10, 6, 0, tzinfo=timezone.utc)


def _deps(**config) -> HttpApiDependencies:
    clock = FixedClock(T0)
    config_store = InMemoryConfigStore(**config)
    service = RecordService(store=InMemoryDocumentStore(), config=config_store, clock=clock)
    return HttpApiDependencies(record_service=service, config=config_store, clock=clock)


def _hospital(deps: HttpApiDependencies, name: str = "City") -> str:
    return deps.record_service.create("HospitalData", {"name": name}).record.id


def _payments(record_id: str, sub_id: str | None = None) -> SubRecordAddress:
    return SubRecordAddress("HospitalData", record_id, "payments", sub_id)


# ── Lifecycle ────────────────────────────────────────────────

def test_archive_restore_purge_round_trip() -> None:
    deps = _deps()
    record_id = _hospital(deps)

    archived = post_record_archive(ArchiveRequest("HospitalData", record_id, reason="closed"), deps)
    assert archived.status == 200
    assert archived.payload["data"]["partition"] == "Archived"

    restored = post_record_restore(RestoreRequest("HospitalData", record_id, reason="reopened"), deps)
    assert restored.payload["data"]["fields"]["revertReason"] == "reopened"

    post_record_archive(ArchiveRequest("HospitalData", record_id), deps)
    purged = post_record_purge(PurgeRequest("HospitalData", record_id), deps)
    assert purged.payload == {"ok": True, "data": {"type": "HospitalData", "id": "H1", "purged": True}}


def test_restore_without_reason_is_validation_error() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    post_record_archive(ArchiveRequest("HospitalData", record_id), deps)

    result = post_record_restore(RestoreRequest("HospitalData", record_id, reason=" "), deps)

    assert result.status == 400
    assert result.payload["error"]["code"] == "VALIDATION_FAILED"
    assert result.payload["error"]["details"] == {"reason": "Reason is required to restore a record"}


def test_archive_missing_record_is_not_found() -> None:
    result = post_record_archive(ArchiveRequest("HospitalData", "H99"), _deps())
    assert result.status == 404
    assert result.payload["error"]["code"] == "NOT_FOUND"


def test_stale_version_is_conflict() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    result = post_record_archive(ArchiveRequest("HospitalData", record_id, expected_version=7), deps)
    assert result.status == 409
    assert result.payload["error"]["details"]["actual_version"] == 1


def test_storage_failure_is_service_unavailable() -> None:
    result = exception_result(StorageError("write failed", path="Active/HospitalData/H1"))
    assert result.status == 503
    assert result.payload["error"]["code"] == "STORAGE_UNAVAILABLE"
    assert result.payload["error"]["details"] == {"path": "Active/HospitalData/H1"}


# ── Sub-records ──────────────────────────────────────────────

def test_payment_add_edit_submit_lock_cycle() -> None:
    deps = _deps()
    record_id = _hospital(deps)

    added = post_subrecord_add(SubRecordAddHttpRequest(_payments(record_id)), deps)
    assert added.status == 201
    sub_id = added.payload["data"]["id"]
    assert sub_id == "H1-1"
    assert added.payload["data"]["date"] == "2025-03-10"

    incomplete = post_subrecord_submit(SubRecordActionHttpRequest(_payments(record_id, sub_id)), deps)
    assert incomplete.status == 400
    assert incomplete.payload["error"]["details"] == {
        "commission": "Commission is required",
        "paymentMode": "Payment Mode is required",
    }

    for name, value in (("commission", "250"), ("paymentMode", "UPI")):
        edited = post_subrecord_edit(SubRecordEditHttpRequest(_payments(record_id, sub_id), name, value), deps)
        assert edited.payload["data"]["applied"] is True

    submitted = post_subrecord_submit(SubRecordActionHttpRequest(_payments(record_id, sub_id)), deps)
    assert submitted.status == 200
    assert submitted.payload["data"]["isLocked"] is True

    ignored = post_subrecord_edit(
        SubRecordEditHttpRequest(_payments(record_id, sub_id), "commission", "1"), deps,
    )
    assert ignored.status == 200
    assert ignored.payload["data"]["applied"] is False
    assert ignored.payload["data"]["rejection"]["code"] == "FIELD_LOCKED"

    override = post_subrecord_edit(
        SubRecordEditHttpRequest(_payments(record_id, sub_id), "reminderDate", "2025-03-11"), deps,
    )
    assert override.payload["data"]["entry"]["reminderDate"] == "2025-03-11"
    assert override.payload["data"]["entry"]["commission"] == "250"

    kept = post_subrecord_remove(SubRecordActionHttpRequest(_payments(record_id, sub_id)), deps)
    assert kept.payload["data"]["rejection"]["code"] == "SUBRECORD_LOCKED"


def test_payment_prefilled_from_agent() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    agents = SubRecordAddress("HospitalData", record_id, "agents")
    post_subrecord_add(SubRecordAddHttpRequest(agents, {"name": "Ravi", "mobileNo": "9876543210"}), deps)

    added = post_subrecord_add(
        SubRecordAddHttpRequest(_payments(record_id), {"commission": 100}, agent_id="H1-1"), deps,
    )

    assert added.payload["data"]["name"] == "Ravi"
    assert added.payload["data"]["agentId"] == "H1-1"
    assert added.payload["data"]["commission"] == 100


def test_agent_id_only_for_payments() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    result = post_subrecord_add(
        SubRecordAddHttpRequest(SubRecordAddress("HospitalData", record_id, "agents"), agent_id="H1-1"),
        deps,
    )
    assert result.status == 400
    assert result.payload["error"]["code"] == "INVALID_REQUEST"


def test_agent_add_and_remove_resync_visit_type() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    agents = SubRecordAddress("HospitalData", record_id, "agents")

    for n in range(4):
        added = post_subrecord_add(SubRecordAddHttpRequest(agents, {"name": f"Agent {n}"}), deps)
        assert added.status == 201
        assert added.payload["ok"] is True
    assert deps.record_service.get("HospitalData", record_id).get("visitType") == "Visit Medium"
    assert len(deps.record_service.ledger("HospitalData", record_id, "agents")) == 4

    removed = post_subrecord_remove(
        SubRecordActionHttpRequest(SubRecordAddress("HospitalData", record_id, "agents", "H1-4")), deps,
    )
    assert removed.status == 200
    assert removed.payload["data"] == {"applied": True, "id": "H1-4"}
    assert deps.record_service.get("HospitalData", record_id).get("visitType") == "Visit Low"


def test_removing_last_agent_clears_visit_type() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    agents = SubRecordAddress("HospitalData", record_id, "agents")
    assert post_subrecord_add(SubRecordAddHttpRequest(agents, {"name": "A"}), deps).status == 201
    assert deps.record_service.get("HospitalData", record_id).get("visitType") == "Visit Low"

    removed = post_subrecord_remove(
        SubRecordActionHttpRequest(SubRecordAddress("HospitalData", record_id, "agents", "H1-1")), deps,
    )
    assert removed.status == 200
    assert deps.record_service.get("HospitalData", record_id).get("visitType") == ""


def test_comment_on_entry() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    post_subrecord_add(SubRecordAddHttpRequest(_payments(record_id)), deps)

    result = post_subrecord_comment(SubRecordCommentHttpRequest(_payments(record_id, "H1-1"), "called"), deps)
    assert result.payload["data"]["entry"]["comments"][0]["text"] == "called"

    empty = post_subrecord_comment(SubRecordCommentHttpRequest(_payments(record_id, "H1-1"), ""), deps)
    assert empty.status == 400
    assert "text" in empty.payload["error"]["details"]


def test_unknown_sub_id_is_not_found() -> None:
    deps = _deps()
    record_id = _hospital(deps)
    result = post_subrecord_submit(SubRecordActionHttpRequest(_payments(record_id, "H1-9")), deps)
    assert result.status == 404


def test_address_validation() -> None:
    with pytest.raises(ValueError):
        SubRecordAddress("HospitalData", "H1", "invoices")
    with pytest.raises(ValueError):
        SubRecordActionHttpRequest(SubRecordAddress("HospitalData", "H1", "payments"))


# ── Reminders ────────────────────────────────────────────────

def _with_reminder(deps: HttpApiDependencies, name: str, reminder: str) -> str:
    record_id = _hospital(deps, name)
    ledger = deps.record_service.ledger("HospitalData", record_id, "payments")
    ledger.add({"reminderDate": reminder})
    return record_id


def test_reminders_sorted_by_urgency() -> None:
    deps = _deps()
    _with_reminder(deps, "Due today", "2025-03-10")
    _with_reminder(deps, "Overdue", "2025-03-08")
    _with_reminder(deps, "Upcoming", "2025-03-12")
    _with_reminder(deps, "Far", "2025-04-30")
    _hospital(deps, "No reminder")

    result = get_reminders(RemindersReadRequest("HospitalData"), deps)

    data = result.payload["data"]
    assert [item["name"] for item in data["items"]] == ["Overdue", "Due today"]
    assert data["items"][0]["urgency"] == "OVERDUE"
    assert data["items"][0]["daysUntil"] == -2
    assert data["pending"] == 2
    assert data["counts"] == {
        "OVERDUE": 1, "DUE_TODAY": 1, "DUE_TOMORROW": 0, "UPCOMING": 1, "NONE": 2,
    }


def test_reminders_include_upcoming() -> None:
    deps = _deps(reminders_include_upcoming=True)
    _with_reminder(deps, "Upcoming", "2025-03-12")
    result = get_reminders(RemindersReadRequest("HospitalData"), deps)
    assert result.payload["data"]["pending"] == 1

    explicit = get_reminders(RemindersReadRequest("HospitalData", include_upcoming=False), deps)
    assert explicit.payload["data"]["pending"] == 0


def test_reminders_unknown_type() -> None:
    result = get_reminders(RemindersReadRequest("Nope"), _deps())
    assert result.status == 400
