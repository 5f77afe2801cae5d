#!/usr/bin/env python3
"""
Audit the ledger against its invariants.

Usage:
    python scripts/reconcile_ledger.py [--config ledger.yaml]
        [--database-url URL] [--repair]

Prints one JSON line per violation and a summary line.  Exit status is 0
when the ledger is clean, 1 when violations remain.

--repair resyncs paid_amount on every debt reported with drift, then
audits again.  Cost/debt linkage violations are reported only; fixing
them needs a human decision (re-save or delete the cost).
"""

import argparse
import json
import sys
from pathlib import Path
from uuid import UUID

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from ledger_config import get_active_config
from ledger_config.bridges import build_ledger_policy, log_level_of
from ledger_kernel.db.engine import init_engine_from_url, session_scope
from ledger_kernel.invariants import LedgerInvariant
from ledger_kernel.logging_config import configure_logging
from ledger_kernel.selectors.reconciliation_selector import (
    ReconciliationReport,
    ReconciliationSelector,
)
from ledger_kernel.services.ledger_service import LedgerService


def _print_report(report: ReconciliationReport) -> None:
    for violation in report.violations:
        print(json.dumps(violation.as_dict()))
    print(json.dumps({
        "debts_checked": report.debts_checked,
        "costs_checked": report.costs_checked,
        "violations": len(report.violations),
        "clean": report.is_clean,
    }))


def _repair(session, policy, report: ReconciliationReport) -> int:
    service = LedgerService(session, policy=policy, auto_commit=False)
    repaired = 0
    for violation in report.for_invariant(LedgerInvariant.PAID_AMOUNT_MATCHES_TRANSACTIONS):
        result = service.resync_paid_amount(UUID(violation.entity_id))
        if not result.is_success:
            print(f"  repair failed for {violation.entity_id}: {result.message}", file=sys.stderr)
            continue
        repaired += 1
    return repaired


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Audit ledger invariants")
    parser.add_argument("--config", help="Ledger YAML config file")
    parser.add_argument("--database-url", help="Overrides database_url from the config")
    parser.add_argument(
        "--repair", action="store_true",
        help="Resync drifted paid amounts before the final audit",
    )
    args = parser.parse_args(argv)

    config = get_active_config(args.config)
    configure_logging(level=log_level_of(config))
    init_engine_from_url(args.database_url or config.database_url)
    policy = build_ledger_policy(config)

    with session_scope() as session:
        report = ReconciliationSelector(session).audit()
        if args.repair and not report.is_clean:
            repaired = _repair(session, policy, report)
            session.flush()
            print(f"Repaired {repaired} debt(s)", file=sys.stderr)
            report = ReconciliationSelector(session).audit()

    _print_report(report)
    return 0 if report.is_clean else 1


if __name__ == "__main__":
    sys.exit(main())
