"""
Ledger Invariants Contract.

These invariants must hold after every core operation completes, including
on failure recovery. They are not configurable.

This module only declares them. Enforcement is distributed across
DebtLinkageManager, TransactionPoster, DebtService and LedgerStore; the
ReconciliationSelector audits them against stored state.
"""

from enum import Enum, unique


@unique
class LedgerInvariant(str, Enum):
    """Non-configurable invariants enforced by the ledger kernel."""

    PAID_AMOUNT_MATCHES_TRANSACTIONS = "paid_amount_matches_transactions"
    """Debt.paid_amount equals its opening paid amount plus the sum of the
    amounts of live transactions linked to it."""

    COST_DEBT_LINKAGE = "cost_debt_linkage"
    """A cost with a supplier has exactly one derived PAYABLE debt; a cost
    without a supplier has none."""

    COST_DELETE_DISPOSES_DEBT = "cost_delete_disposes_debt"
    """Deleting a cost deletes its derived debt in application code."""

    REVERSAL_RESTORES_PAID_AMOUNT = "reversal_restores_paid_amount"
    """Deleting a transaction restores the debt's paid amount (floored at
    zero)."""


ALL_LEDGER_INVARIANTS: frozenset[LedgerInvariant] = frozenset(LedgerInvariant)

# The kernel package may not import from these packages.
# Enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "ledger_config",
)
