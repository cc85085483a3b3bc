"""
ROS Records Engine — Application Service
==========================================
Record CRUD on top of the document store:

- create: generated or supplied idNo (unique across both partitions),
  duplicate-contact check across peer types, optional document uploads
- update: optimistic write guarded by the document version
- comment: newest-first, append-only
- watch: live snapshots of one record
- ledger: SubRecordLedger for one of the record's sub-collections

Archive/restore/purge belong to the LifecycleManager; this service
exposes it as `.lifecycle` so callers wire one object.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.config.rules import SUB_KIND_AGENTS, ConfigStore, RecordTypeRule
from core.errors import NotFoundError, UploadError, ValidationError
from core.numbering import IdentifierPolicy, next_id
from core.store.paths import (
    Partition,
    collection_path,
    join_path,
    record_path,
    subcollection_path,
)
from core.store.protocol import BlobStore, DocumentStore, Snapshot, Unsubscribe
from core.time.clock import Clock, get_default_clock, iso_timestamp
from engines.lifecycle.events import ACTION_CREATED, AUDIT_TRAIL_FIELD, build_audit_entry
from engines.lifecycle.models import Record
from engines.lifecycle.services import LifecycleManager
from engines.records.models import (
    SYSTEM_FIELDS,
    VISIT_TYPE_FIELD,
    VISIT_TYPE_MANUAL_FIELD,
    CreateResult,
    visit_level_for,
)
from engines.records.policies import duplicate_contact_policy, duplicate_id_policy
from engines.subledger.policies import OverrideTable, comment_text_policy
from engines.subledger.services import SubRecordLedger

logger = logging.getLogger("ros.records")


class RecordService:
    def __init__(
        self,
        *,
        store: DocumentStore,
        config: ConfigStore,
        clock: Optional[Clock] = None,
        blob_store: Optional[BlobStore] = None,
        lifecycle: Optional[LifecycleManager] = None,
    ):
        self._store = store
        self._config = config
        self._clock = clock or get_default_clock()
        self._blob_store = blob_store
        self._lifecycle = lifecycle or LifecycleManager(store=store, clock=self._clock)
        self._overrides = OverrideTable.from_fields(config.override_fields())

    @property
    def lifecycle(self) -> LifecycleManager:
        return self._lifecycle

    @property
    def config(self) -> ConfigStore:
        return self._config

    def rule_for(self, type_name: str) -> RecordTypeRule:
        rule = self._config.get_record_type(type_name)
        if rule is None:
            raise ValidationError({"type": f"Unknown record type '{type_name}'"})
        return rule

    # ── Reads ─────────────────────────────────────────────────

    def get(
        self, type_name: str, record_id: str, partition: Partition = Partition.ACTIVE,
    ) -> Record:
        return self._lifecycle.get(type_name, record_id, partition)

    def list_records(self, type_name: str, partition: Partition = Partition.ACTIVE) -> List[Record]:
        return self._lifecycle.list_partition(type_name, partition)

    def next_id_for(self, type_name: str, fields: Optional[Mapping[str, Any]] = None) -> str:
        """Scans both partitions so a restored record can never collide."""
        rule = self.rule_for(type_name)
        existing: List[Snapshot] = []
        for partition in Partition:
            existing.extend(self._store.children(collection_path(partition, type_name)))
        return next_id(existing, rule.prefix_for(fields), id_field=rule.id_field)

    def watch(
        self,
        type_name: str,
        record_id: str,
        on_change: Callable[[Optional[Record]], None],
        partition: Partition = Partition.ACTIVE,
    ) -> Unsubscribe:
        """Pushes the current record immediately, then after every change; None once gone."""
        def relay(snapshot: Optional[Snapshot]) -> None:
            on_change(Record.from_snapshot(snapshot) if snapshot is not None else None)

        return self._store.subscribe(record_path(partition, type_name, record_id), relay)

    # ── Mutations ─────────────────────────────────────────────

    def create(
        self,
        type_name: str,
        fields: Mapping[str, Any],
        *,
        documents: Optional[Mapping[str, bytes]] = None,
    ) -> CreateResult:
        rule = self.rule_for(type_name)
        if documents and self._blob_store is None:
            raise ValueError("A blob store is required to upload documents.")
        data = {k: v for k, v in fields.items() if k not in SYSTEM_FIELDS or k == rule.id_field}
        if rule.contact_field and isinstance(data.get(rule.contact_field), str):
            data[rule.contact_field] = data[rule.contact_field].strip()

        rejection = duplicate_contact_policy(self._store, rule, data)
        if rejection is not None:
            raise ValidationError({rule.contact_field: rejection.message})

        record_id = str(data.get(rule.id_field) or "").strip()
        if record_id:
            self._check_supplied_id(rule, record_id, data)
        else:
            record_id = self.next_id_for(type_name, data)

        now = iso_timestamp(self._clock)
        data.update({
            rule.id_field: record_id,
            "createdAt": now,
            "updatedAt": now,
            "comments": [],
            AUDIT_TRAIL_FIELD: [build_audit_entry(ACTION_CREATED, now)],
        })
        path = record_path(Partition.ACTIVE, type_name, record_id)
        snapshot = self._store.write(path, data, expected_version=0)
        logger.info(f"Created {type_name}/{record_id}")

        upload_errors: Dict[str, str] = {}
        if documents:
            snapshot, upload_errors = self._upload_documents(type_name, record_id, snapshot, documents)
        return CreateResult(record=Record.from_snapshot(snapshot), upload_errors=upload_errors)

    def _check_supplied_id(self, rule: RecordTypeRule, record_id: str, data: Mapping[str, Any]) -> None:
        prefixes = rule.all_prefixes()
        if not any(
            IdentifierPolicy(prefix=p, id_field=rule.id_field, max_digits=rule.max_digits).validate(record_id)
            for p in prefixes
        ):
            raise ValidationError({rule.id_field: f"ID must look like {rule.prefix_for(data)}1"})
        rejection = duplicate_id_policy(self._store, rule, record_id)
        if rejection is not None:
            raise ValidationError({rule.id_field: rejection.message})

    def _upload_documents(
        self,
        type_name: str,
        record_id: str,
        snapshot: Snapshot,
        documents: Mapping[str, bytes],
    ):
        urls: Dict[str, str] = {}
        errors: Dict[str, str] = {}
        for name, data in documents.items():
            try:
                urls[name] = self._blob_store.upload(data, join_path(type_name, record_id, name))
            except UploadError as exc:
                logger.warning(f"Upload {name} for {type_name}/{record_id} failed: {exc.detail}")
                errors[name] = exc.detail
        if urls:
            fields = dict(snapshot.fields)
            fields["documents"] = {**(fields.get("documents") or {}), **urls}
            snapshot = self._store.write(snapshot.path, fields, expected_version=snapshot.version)
        return snapshot, errors

    def update(
        self,
        type_name: str,
        record_id: str,
        changes: Mapping[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> Record:
        rule = self.rule_for(type_name)
        blocked = {k: "Managed by the system" for k in changes if k in SYSTEM_FIELDS}
        if blocked:
            raise ValidationError(blocked)

        path = record_path(Partition.ACTIVE, type_name, record_id)
        current = self._store.read(path)
        if current is None:
            raise NotFoundError(path)

        fields = dict(current.fields)
        fields.update(changes)
        if rule.contact_field in changes:
            rejection = duplicate_contact_policy(self._store, rule, fields, exclude_id=record_id)
            if rejection is not None:
                raise ValidationError({rule.contact_field: rejection.message})
        if VISIT_TYPE_FIELD in changes and VISIT_TYPE_MANUAL_FIELD not in changes:
            fields[VISIT_TYPE_MANUAL_FIELD] = True
        fields["updatedAt"] = iso_timestamp(self._clock)

        version = current.version if expected_version is None else expected_version
        snapshot = self._store.write(path, fields, expected_version=version)
        return Record.from_snapshot(snapshot)

    def add_comment(
        self,
        type_name: str,
        record_id: str,
        text: str,
        partition: Partition = Partition.ACTIVE,
    ) -> Record:
        rejection = comment_text_policy(text)
        if rejection is not None:
            raise ValidationError({"text": rejection.message})
        path = record_path(partition, type_name, record_id)
        current = self._store.read(path)
        if current is None:
            raise NotFoundError(path)

        comments = list(current.get("comments") or [])
        note = {
            "id": next_id(comments, "c", id_field="id"),
            "text": text.strip(),
            "createdAt": iso_timestamp(self._clock),
        }
        fields = dict(current.fields)
        fields["comments"] = [note] + comments
        snapshot = self._store.write(path, fields, expected_version=current.version)
        return Record.from_snapshot(snapshot)

    # ── Sub-collections ───────────────────────────────────────

    def ledger(
        self,
        type_name: str,
        record_id: str,
        kind: str,
        partition: Partition = Partition.ACTIVE,
    ) -> SubRecordLedger:
        rule = self.rule_for(type_name)
        if kind not in rule.sub_kinds:
            raise ValidationError({"kind": f"{type_name} has no '{kind}' entries"})
        path = record_path(partition, type_name, record_id)
        if self._store.read(path) is None:
            raise NotFoundError(path)
        return SubRecordLedger.load(
            self._store,
            type_name=type_name,
            record_id=record_id,
            kind=kind,
            partition=partition,
            clock=self._clock,
            override_table=self._overrides,
            tz_name=self._config.local_time_zone,
        )

    def sync_visit_type(self, type_name: str, record_id: str) -> Optional[str]:
        """
        Re-derive visitType from the agent count unless it was set by
        hand. Returns the level written, or None when left alone.
        """
        path = record_path(Partition.ACTIVE, type_name, record_id)
        current = self._store.read(path)
        if current is None:
            raise NotFoundError(path)
        if current.get(VISIT_TYPE_MANUAL_FIELD):
            return None
        agents = self._store.children(
            subcollection_path(Partition.ACTIVE, type_name, record_id, SUB_KIND_AGENTS),
        )
        level = visit_level_for(len(agents))
        if current.get(VISIT_TYPE_FIELD) == level:
            return level
        fields = dict(current.fields)
        fields[VISIT_TYPE_FIELD] = level
        self._store.write(path, fields, expected_version=current.version)
        return level
