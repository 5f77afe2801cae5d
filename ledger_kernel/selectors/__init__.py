"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.selectors.parent_registry import ParentRegistrySelector
from ledger_kernel.selectors.reconciliation_selector import (
    ReconciliationReport,
    ReconciliationSelector,
    Violation,
)

__all__ = [
    "LedgerSelector",
    "ParentRegistrySelector",
    "ReconciliationReport",
    "ReconciliationSelector",
    "Violation",
]
