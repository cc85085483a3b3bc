"""
Reconciliation runner for interrupted record moves.

Scans every configured record type for leftover move journals and
records present in both partitions. Reports by default; --apply repairs.

Usage:
    python scripts/reconcile_records.py
    python scripts/reconcile_records.py --apply
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path


def _setup_django() -> None:
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    import django

    django.setup()


def run(apply: bool) -> int:
    from core.config.rules import load_config_from_settings
    from core.store.django_store import DjangoDocumentStore
    from engines.lifecycle.reconcile import ISSUE_LOST, ReconciliationSweep

    config = load_config_from_settings()
    sweep = ReconciliationSweep(
        DjangoDocumentStore(),
        type_names=[rule.type_name for rule in config.record_types()],
    )
    issues = sweep.scan()
    print(json.dumps([issue.to_dict() for issue in issues], indent=2))

    if apply and issues:
        fixed = sweep.resolve(issues)
        print(f"\nResolved {len(fixed)} of {len(issues)} issues.")
    return 1 if any(issue.kind == ISSUE_LOST for issue in issues) else 0


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Repair pending moves and duplicates instead of only reporting them.",
    )
    args = parser.parse_args()
    _setup_django()
    sys.exit(run(args.apply))


if __name__ == "__main__":
    main()
