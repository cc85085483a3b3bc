"""
ROS Lifecycle Engine — Reconciliation Sweep
=============================================
Finds and repairs what an interrupted non-atomic move leaves behind.

Issue kinds:
- PENDING_MOVE: a move journal entry survived. Resolution follows the
  journal: destination root present → finish the move (delete source);
  destination root absent → roll back (drop partial destination).
- DUPLICATE: the same id lives in both partitions with no journal.
  The copy whose latest audit entry is newer wins.
- LOST: journal present but neither copy exists. Reported, never
  auto-resolved; the journal stays as evidence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from core.store.paths import (
    MOVE_JOURNAL_ROOT,
    Partition,
    collection_path,
    join_path,
    move_journal_path,
    record_path,
)
from core.store.protocol import DocumentStore, Snapshot

logger = logging.getLogger("ros.reconcile")

ISSUE_PENDING_MOVE = "PENDING_MOVE"
ISSUE_DUPLICATE = "DUPLICATE"
ISSUE_LOST = "LOST"


@dataclass(frozen=True)
class ConsistencyIssue:
    kind: str
    type_name: str
    record_id: str
    detail: str
    source: Optional[Partition] = None
    destination: Optional[Partition] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "type_name": self.type_name,
            "record_id": self.record_id,
            "detail": self.detail,
            "source": self.source.value if self.source else None,
            "destination": self.destination.value if self.destination else None,
        }


def _latest_audit_at(snapshot: Snapshot) -> str:
    trail = snapshot.get("auditTrail") or []
    stamps = [str(e.get("at") or "") for e in trail if isinstance(e, dict)]
    return max(stamps) if stamps else ""


class ReconciliationSweep:
    def __init__(self, store: DocumentStore, *, type_names: Iterable[str]):
        self._store = store
        self._type_names = tuple(type_names)

    # ── Scan ──────────────────────────────────────────────────

    def scan(self) -> List[ConsistencyIssue]:
        issues: List[ConsistencyIssue] = []
        journaled = set()
        for type_name in self._type_names:
            for entry in self._store.children(join_path(MOVE_JOURNAL_ROOT, type_name)):
                journaled.add((type_name, entry.key))
                issues.append(self._journal_issue(type_name, entry))
            for record_id in self._duplicate_ids(type_name):
                if (type_name, record_id) in journaled:
                    continue
                issues.append(ConsistencyIssue(
                    kind=ISSUE_DUPLICATE,
                    type_name=type_name,
                    record_id=record_id,
                    detail="Record exists in both Active and Archived.",
                ))
        for issue in issues:
            logger.warning(f"{issue.kind} {issue.type_name}/{issue.record_id}: {issue.detail}")
        return issues

    def _duplicate_ids(self, type_name: str) -> List[str]:
        active = {s.key for s in self._store.children(collection_path(Partition.ACTIVE, type_name))}
        archived = {s.key for s in self._store.children(collection_path(Partition.ARCHIVED, type_name))}
        return sorted(active & archived)

    def _journal_issue(self, type_name: str, entry: Snapshot) -> ConsistencyIssue:
        source = Partition(entry.get("source"))
        destination = Partition(entry.get("destination"))
        src_exists = self._store.read(record_path(source, type_name, entry.key)) is not None
        dst_exists = self._store.read(record_path(destination, type_name, entry.key)) is not None
        if not src_exists and not dst_exists:
            return ConsistencyIssue(
                kind=ISSUE_LOST,
                type_name=type_name,
                record_id=entry.key,
                detail=f"Move {source.value} → {destination.value} left no copy.",
                source=source,
                destination=destination,
            )
        return ConsistencyIssue(
            kind=ISSUE_PENDING_MOVE,
            type_name=type_name,
            record_id=entry.key,
            detail=(
                f"Move {source.value} → {destination.value} started "
                f"{entry.get('startedAt')} did not finish."
            ),
            source=source,
            destination=destination,
        )

    # ── Resolve ───────────────────────────────────────────────

    def resolve(
        self, issues: Optional[Sequence[ConsistencyIssue]] = None,
    ) -> List[ConsistencyIssue]:
        """Repair what can be repaired; returns the issues that were fixed."""
        pending = self.scan() if issues is None else list(issues)
        fixed: List[ConsistencyIssue] = []
        for issue in pending:
            if issue.kind == ISSUE_PENDING_MOVE:
                self._finish_or_roll_back(issue)
            elif issue.kind == ISSUE_DUPLICATE:
                self._drop_stale_copy(issue)
            else:
                logger.error(
                    f"Record {issue.type_name}/{issue.record_id} lost; "
                    f"journal kept for manual recovery."
                )
                continue
            fixed.append(issue)
        return fixed

    def _finish_or_roll_back(self, issue: ConsistencyIssue) -> None:
        src = record_path(issue.source, issue.type_name, issue.record_id)
        dst = record_path(issue.destination, issue.type_name, issue.record_id)
        if self._store.read(dst) is not None:
            self._store.delete(src)
            logger.info(f"Completed pending move: removed {src}")
        else:
            self._store.delete(dst)
            logger.info(f"Rolled back pending move: cleared partial {dst}")
        self._store.delete(move_journal_path(issue.type_name, issue.record_id))

    def _drop_stale_copy(self, issue: ConsistencyIssue) -> None:
        active_path = record_path(Partition.ACTIVE, issue.type_name, issue.record_id)
        archived_path = record_path(Partition.ARCHIVED, issue.type_name, issue.record_id)
        active = self._store.read(active_path)
        archived = self._store.read(archived_path)
        if active is None or archived is None:
            return
        # Ties keep the Active copy.
        if _latest_audit_at(archived) > _latest_audit_at(active):
            self._store.delete(active_path)
            logger.info(f"Duplicate resolved: kept {archived_path}")
        else:
            self._store.delete(archived_path)
            logger.info(f"Duplicate resolved: kept {active_path}")
