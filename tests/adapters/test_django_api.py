from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from django.test import Client

from adapters.django_api import build_dependencies, override_dependencies
from core.config.rules import InMemoryConfigStore
from core.http_api.dependencies import HttpApiDependencies
from core.store.django_store import DjangoDocumentStore
from core.time.clock import FixedClock
from engines.records.services import RecordService

pytestmark = pytest.mark.django_db(transaction=True)

T0 = datetime(2025, 3, 10, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def deps():
    clock = FixedClock(T0)
    config = InMemoryConfigStore()
    service = RecordService(store=DjangoDocumentStore(), config=config, clock=clock)
    dependencies = HttpApiDependencies(record_service=service, config=config, clock=clock)
    override_dependencies(dependencies)
    yield dependencies
    override_dependencies(None)


@pytest.fixture
def client():
    return Client()


def _post(client: Client, url: str, body: dict | None = None):
    return client.post(url, data=json.dumps(body or {}), content_type="application/json")


def test_archive_and_restore_over_http(deps, client) -> None:
    deps.record_service.create("HospitalData", {"name": "City"})

    archived = _post(client, "/v1/records/HospitalData/H1/archive", {"reason": "closed"})
    assert archived.status_code == 200
    assert archived.json()["data"]["fields"]["reason"] == "closed"

    missing_reason = _post(client, "/v1/archived/HospitalData/H1/restore")
    assert missing_reason.status_code == 400
    assert missing_reason.json()["error"]["details"] == {
        "reason": "Reason is required to restore a record",
    }

    restored = _post(client, "/v1/archived/HospitalData/H1/restore", {"reason": "reopened"})
    assert restored.status_code == 200
    assert restored.json()["data"]["partition"] == "Active"


def test_purge_over_http(deps, client) -> None:
    deps.record_service.create("HospitalData", {"name": "City"})
    _post(client, "/v1/records/HospitalData/H1/archive")

    response = _post(client, "/v1/archived/HospitalData/H1/purge")

    assert response.status_code == 200
    assert response.json()["data"]["purged"] is True


def test_subrecord_flow_over_http(deps, client) -> None:
    deps.record_service.create("HospitalData", {"name": "City"})

    added = _post(client, "/v1/records/HospitalData/H1/payments", {
        "fields": {"commission": "300", "paymentMode": "Cash"},
    })
    assert added.status_code == 201
    assert added.json()["data"]["id"] == "H1-1"

    submitted = _post(client, "/v1/records/HospitalData/H1/payments/H1-1/submit")
    assert submitted.json()["data"]["isLocked"] is True

    locked = _post(client, "/v1/records/HospitalData/H1/payments/H1-1/edit", {
        "field": "commission", "value": "1",
    })
    assert locked.status_code == 200
    assert locked.json()["data"]["applied"] is False

    commented = _post(client, "/v1/records/HospitalData/H1/payments/H1-1/comment", {"text": "paid"})
    assert commented.json()["data"]["entry"]["comments"][0]["text"] == "paid"

    removed = _post(client, "/v1/records/HospitalData/H1/payments/H1-1/remove")
    assert removed.json()["data"]["rejection"]["code"] == "SUBRECORD_LOCKED"


def test_reminders_over_http(deps, client) -> None:
    deps.record_service.create("HospitalData", {"name": "City"})
    ledger = deps.record_service.ledger("HospitalData", "H1", "payments")
    ledger.add({"reminderDate": "2025-03-12"})

    default = client.get("/v1/reminders/HospitalData")
    assert default.status_code == 200
    assert default.json()["data"]["pending"] == 0

    upcoming = client.get("/v1/reminders/HospitalData?include_upcoming=true")
    assert upcoming.json()["data"]["items"][0]["urgency"] == "UPCOMING"


def test_invalid_json_body(deps, client) -> None:
    response = client.post(
        "/v1/records/HospitalData/H1/archive", data="not json", content_type="application/json",
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


def test_edit_requires_field_name(deps, client) -> None:
    response = _post(client, "/v1/records/HospitalData/H1/payments/H1-1/edit", {"value": 1})
    assert response.status_code == 400


def test_unknown_kind_rejected(deps, client) -> None:
    response = _post(client, "/v1/records/HospitalData/H1/invoices")
    assert response.status_code == 400


def test_methods_enforced(deps, client) -> None:
    assert client.get("/v1/records/HospitalData/H1/archive").status_code == 405
    assert _post(client, "/v1/reminders/HospitalData").status_code == 405


def test_default_wiring_uses_settings() -> None:
    override_dependencies(None)
    try:
        dependencies = build_dependencies()
        assert dependencies is build_dependencies()
        assert isinstance(dependencies.record_service.lifecycle.store, DjangoDocumentStore)
        assert dependencies.config.get_record_type("HospitalData") is not None
    finally:
        override_dependencies(None)
