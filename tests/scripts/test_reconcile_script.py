from __future__ import annotations

import json

import pytest

from core.store.django_store import DjangoDocumentStore
from scripts.reconcile_records import run

pytestmark = pytest.mark.django_db(transaction=True)


def test_reports_without_changing_anything(capsys) -> None:
    store = DjangoDocumentStore()
    store.write("Active/HospitalData/H1", {"name": "a"})
    store.write("Archived/HospitalData/H1", {"name": "b"})

    assert run(apply=False) == 0

    report = json.loads(capsys.readouterr().out)
    assert [(i["kind"], i["record_id"]) for i in report] == [("DUPLICATE", "H1")]
    assert store.read("Archived/HospitalData/H1") is not None


def test_apply_resolves_duplicates() -> None:
    store = DjangoDocumentStore()
    store.write("Active/HospitalData/H1", {"name": "a"})
    store.write("Archived/HospitalData/H1", {"name": "b"})

    assert run(apply=True) == 0

    assert store.read("Active/HospitalData/H1").get("name") == "a"
    assert store.read("Archived/HospitalData/H1") is None


def test_lost_record_sets_exit_code() -> None:
    store = DjangoDocumentStore()
    store.write("_moves/AgentData/AW4", {
        "typeName": "AgentData",
        "recordId": "AW4",
        "source": "Active",
        "destination": "Archived",
        "action": "archived",
        "reason": "",
        "startedAt": "2025-03-10T06:00:00+00:00",
    })

    assert run(apply=True) == 1
    assert store.read("_moves/AgentData/AW4") is not None
