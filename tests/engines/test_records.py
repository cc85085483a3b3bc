"""
Records Engine Tests
======================
Create / update / comment / watch, duplicate detection, identifier
generation across partitions, uploads and visit levels.
"""

from datetime import datetime, timezone

import pytest

from core.config.rules import InMemoryConfigStore
from core.errors import NotFoundError, ValidationError, VersionConflictError
from core.store import InMemoryDocumentStore
from core.store.blobs import InMemoryBlobStore
from core.store.paths import Partition
from core.time.clock import FixedClock
from engines.records import RecordService, visit_level_for

T0 = datetime(2025, 3, 10, 6, 0, tzinfo=timezone.utc)


def _service(blob_store=None, **config):
    return RecordService(
        store=InMemoryDocumentStore(),
        config=InMemoryConfigStore(**config),
        clock=FixedClock(T0),
        blob_store=blob_store,
    )


# ══════════════════════════════════════════════════════════════
# CREATE
# ══════════════════════════════════════════════════════════════

class TestCreate:
    def test_generates_sequential_ids(self):
        service = _service()
        first = service.create("HospitalData", {"name": "City"}).record
        second = service.create("HospitalData", {"name": "Lake"}).record
        assert first.id == "H1"
        assert second.id == "H2"
        assert second.get("idNo") == "H2"

    def test_system_fields_stamped(self):
        record = _service().create("HospitalData", {"name": "City", "comments": ["x"]}).record
        assert record.get("createdAt") == T0.isoformat()
        assert record.get("updatedAt") == T0.isoformat()
        assert record.comments == []
        assert record.audit_trail == [{"action": "created", "at": T0.isoformat(), "reason": ""}]
        assert record.version == 1

    def test_variant_prefix(self):
        service = _service()
        worker = service.create("AgentData", {"agentType": "worker", "mobile": "9000000001"}).record
        client = service.create("AgentData", {"agentType": "client", "mobile": "9000000002"}).record
        assert worker.id == "AW1"
        # no AC ids yet, so the collection size decides the number
        assert client.id == "AC2"
        third = service.create("AgentData", {"agentType": "client", "mobile": "9000000003"}).record
        assert third.id == "AC3"

    def test_archived_ids_are_not_reissued(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        service.create("HospitalData", {"name": "Lake"})
        service.lifecycle.archive("HospitalData", "H2")
        assert service.create("HospitalData", {"name": "Hill"}).record.id == "H3"

    def test_supplied_id_accepted(self):
        record = _service().create("HospitalData", {"idNo": "H42", "name": "City"}).record
        assert record.id == "H42"

    @pytest.mark.parametrize("bad", ["X1", "H01", "H12345"])
    def test_malformed_supplied_id(self, bad):
        with pytest.raises(ValidationError) as exc_info:
            _service().create("HospitalData", {"idNo": bad})
        assert exc_info.value.errors == {"idNo": "ID must look like H1"}

    def test_supplied_id_taken_in_archive(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        service.lifecycle.archive("HospitalData", "H1")
        with pytest.raises(ValidationError) as exc_info:
            service.create("HospitalData", {"idNo": "H1"})
        assert exc_info.value.errors == {"idNo": "ID H1 already exists (Archived)"}

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc_info:
            _service().create("Nope", {})
        assert "type" in exc_info.value.errors


class TestDuplicateContact:
    def test_same_type_duplicate(self):
        service = _service()
        service.create("AgentData", {"agentType": "worker", "mobile": "9876543210"})
        with pytest.raises(ValidationError) as exc_info:
            service.create("AgentData", {"agentType": "client", "mobile": " 9876543210 "})
        assert exc_info.value.errors == {"mobile": "Already registered as AgentData AW1"}
        assert len(service.list_records("AgentData")) == 1

    def test_peer_type_duplicate(self):
        service = _service()
        service.create("WorkerData", {"department": "Security", "mobileNo1": "9000000000"})
        with pytest.raises(ValidationError) as exc_info:
            service.create("ClientData", {"mobileNo1": "9000000000"})
        assert exc_info.value.errors == {"mobileNo1": "Already registered as WorkerData SW-1"}

    def test_archived_records_do_not_block(self):
        service = _service()
        service.create("AgentData", {"mobile": "9876543210"})
        service.lifecycle.archive("AgentData", "AW1")
        assert service.create("AgentData", {"mobile": "9876543210"}).record.id == "AW2"

    def test_update_to_own_number_is_allowed(self):
        service = _service()
        service.create("AgentData", {"mobile": "9876543210"})
        service.create("AgentData", {"mobile": "9000000000"})
        service.update("AgentData", "AW1", {"mobile": "9876543210", "name": "Same"})
        with pytest.raises(ValidationError):
            service.update("AgentData", "AW2", {"mobile": "9876543210"})


class TestUploads:
    def test_documents_uploaded_after_create(self):
        blobs = InMemoryBlobStore()
        result = _service(blob_store=blobs).create(
            "WorkerData", {"department": "Home Care"}, documents={"photo.jpg": b"img"},
        )
        assert result.ok
        assert result.record.get("documents") == {"photo.jpg": "memory://blobs/WorkerData/JW1/photo.jpg"}

    def test_failed_upload_does_not_undo_create(self):
        blobs = InMemoryBlobStore()
        blobs.fail_paths.add("WorkerData/JW1/aadhar.pdf")
        service = _service(blob_store=blobs)

        result = service.create(
            "WorkerData", {}, documents={"photo.jpg": b"img", "aadhar.pdf": b"pdf"},
        )

        assert not result.ok
        assert result.upload_errors == {"aadhar.pdf": "simulated upload failure"}
        stored = service.get("WorkerData", "JW1")
        assert list(stored.get("documents")) == ["photo.jpg"]

    def test_documents_need_blob_store(self):
        service = _service()
        with pytest.raises(ValueError):
            service.create("WorkerData", {}, documents={"photo.jpg": b"img"})
        assert service.list_records("WorkerData") == []


# ══════════════════════════════════════════════════════════════
# UPDATE / COMMENT / WATCH
# ══════════════════════════════════════════════════════════════

class TestUpdate:
    def test_merges_changes(self):
        service = _service()
        service.create("HospitalData", {"name": "City", "location": "North"})
        updated = service.update("HospitalData", "H1", {"name": "City Care"})
        assert updated.get("name") == "City Care"
        assert updated.get("location") == "North"
        assert updated.version == 2

    def test_stale_version_conflicts(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        service.update("HospitalData", "H1", {"name": "A"}, expected_version=1)
        with pytest.raises(VersionConflictError):
            service.update("HospitalData", "H1", {"name": "B"}, expected_version=1)
        assert service.get("HospitalData", "H1").get("name") == "A"

    def test_system_fields_refused(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        with pytest.raises(ValidationError) as exc_info:
            service.update("HospitalData", "H1", {"idNo": "H9", "createdAt": "x"})
        assert exc_info.value.errors == {
            "idNo": "Managed by the system", "createdAt": "Managed by the system",
        }

    def test_missing_record(self):
        with pytest.raises(NotFoundError):
            _service().update("HospitalData", "H1", {"name": "x"})


class TestComments:
    def test_newest_first(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        service.add_comment("HospitalData", "H1", "first")
        record = service.add_comment("HospitalData", "H1", "second")
        assert [c["text"] for c in record.comments] == ["second", "first"]
        assert record.comments[0]["id"] == "c2"

    def test_empty_comment(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        with pytest.raises(ValidationError) as exc_info:
            service.add_comment("HospitalData", "H1", "  ")
        assert "text" in exc_info.value.errors

    def test_archived_record_comment(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        service.lifecycle.archive("HospitalData", "H1")
        record = service.add_comment("HospitalData", "H1", "note", Partition.ARCHIVED)
        assert record.partition is Partition.ARCHIVED


class TestWatch:
    def test_pushes_record_then_none_after_archive(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        seen = []
        unsubscribe = service.watch("HospitalData", "H1", seen.append)
        service.update("HospitalData", "H1", {"name": "City Care"})
        service.lifecycle.archive("HospitalData", "H1")
        unsubscribe()

        assert seen[0].get("name") == "City"
        assert seen[1].get("name") == "City Care"
        assert seen[-1] is None


# ══════════════════════════════════════════════════════════════
# SUB-COLLECTIONS + VISIT LEVEL
# ══════════════════════════════════════════════════════════════

class TestLedger:
    def test_ledger_uses_configured_overrides(self):
        service = _service(override_fields={"payments": ("paidAmount",)})
        service.create("HospitalData", {"name": "City"})
        ledger = service.ledger("HospitalData", "H1", "payments")
        entry = ledger.add({"commission": 10, "paymentMode": "Cash"})
        ledger.submit(entry.id)
        assert ledger.edit(entry.id, "paidAmount", 5) is None
        assert ledger.edit(entry.id, "reminderDate", "2025-03-12") is not None

        reloaded = service.get("HospitalData", "H1")
        assert reloaded.subcollection("payments")["H1-1"]["paidAmount"] == 5

    def test_kind_must_be_configured(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        with pytest.raises(ValidationError):
            service.ledger("HospitalData", "H1", "workers")

    def test_missing_parent(self):
        with pytest.raises(NotFoundError):
            _service().ledger("HospitalData", "H1", "payments")


class TestVisitLevel:
    @pytest.mark.parametrize("count, level", [
        (0, ""), (1, "Visit Low"), (3, "Visit Low"), (4, "Visit Medium"), (8, "Visit Fully"), (12, "Visit Fully"),
    ])
    def test_thresholds(self, count, level):
        assert visit_level_for(count) == level

    def test_sync_follows_agent_count(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        agents = service.ledger("HospitalData", "H1", "agents")
        for _ in range(4):
            agents.add({"name": "A"})
        assert service.sync_visit_type("HospitalData", "H1") == "Visit Medium"
        assert service.get("HospitalData", "H1").get("visitType") == "Visit Medium"

    def test_manual_choice_is_kept(self):
        service = _service()
        service.create("HospitalData", {"name": "City"})
        service.update("HospitalData", "H1", {"visitType": "Visit Fully"})
        service.ledger("HospitalData", "H1", "agents").add({"name": "A"})

        assert service.sync_visit_type("HospitalData", "H1") is None
        record = service.get("HospitalData", "H1")
        assert record.get("visitType") == "Visit Fully"
        assert record.get("visitTypeManual") is True
