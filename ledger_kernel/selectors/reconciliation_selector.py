"""
Module: ledger_kernel.selectors.reconciliation_selector
Responsibility: Audit stored ledger state against the non-configurable
    invariants and list every violation.  Operator tooling for the
    partial-failure mode (atomic linkage disabled) and for data written
    outside the ledger services.
Architecture position: Kernel > Selectors.  Read-only.

Checks:
    PAID_AMOUNT_MATCHES_TRANSACTIONS
        - paid_amount != opening_paid_amount + sum of linked transactions.
    COST_DEBT_LINKAGE
        - cost with a supplier but no derived debt;
        - derived debt whose cost has no supplier;
        - derived debt whose partner is not the cost's supplier;
        - derived debt whose total is not the cost's amount;
        - derived debt that is not PAYABLE.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select

from ledger_kernel.invariants import LedgerInvariant
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.cost import Cost
from ledger_kernel.models.debt import Debt, DebtType
from ledger_kernel.models.transaction import Transaction
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.reconciliation")


@dataclass(frozen=True)
class Violation:
    """One invariant breach found by the audit."""

    invariant: LedgerInvariant
    entity_type: str
    entity_id: str
    detail: str
    expected: str | None = None
    actual: str | None = None

    def as_dict(self) -> dict:
        return {
            "invariant": self.invariant.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "detail": self.detail,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass(frozen=True)
class ReconciliationReport:
    debts_checked: int
    costs_checked: int
    violations: tuple[Violation, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.violations

    def for_invariant(self, invariant: LedgerInvariant) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.invariant == invariant)


class ReconciliationSelector(BaseSelector[Debt]):
    """Read-only invariant audit over the whole ledger."""

    def _paid_amount_drift(self) -> tuple[int, list[Violation]]:
        linked = (
            select(
                Transaction.debt_id.label("debt_id"),
                func.sum(Transaction.amount).label("linked_total"),
            )
            .where(Transaction.debt_id.is_not(None))
            .group_by(Transaction.debt_id)
            .subquery()
        )
        stmt = (
            select(
                Debt.id,
                Debt.paid_amount,
                Debt.opening_paid_amount,
                linked.c.linked_total,
            )
            .outerjoin(linked, linked.c.debt_id == Debt.id)
            .order_by(Debt.id)
        )

        checked = 0
        violations: list[Violation] = []
        for debt_id, paid, opening, linked_total in self.session.execute(stmt):
            checked += 1
            expected = opening + (Decimal(str(linked_total)) if linked_total is not None else Decimal("0"))
            if paid != expected:
                violations.append(
                    Violation(
                        invariant=LedgerInvariant.PAID_AMOUNT_MATCHES_TRANSACTIONS,
                        entity_type="debt",
                        entity_id=str(debt_id),
                        detail="paid_amount differs from opening balance plus linked transactions",
                        expected=str(expected),
                        actual=str(paid),
                    )
                )
        return checked, violations

    def _cost_linkage(self) -> tuple[int, list[Violation]]:
        stmt = (
            select(Cost, Debt)
            .outerjoin(Debt, Debt.source_cost_id == Cost.id)
            .order_by(Cost.id)
        )
        checked = 0
        violations: list[Violation] = []

        def add(entity_type: str, entity_id, detail: str, expected=None, actual=None) -> None:
            violations.append(
                Violation(
                    invariant=LedgerInvariant.COST_DEBT_LINKAGE,
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    detail=detail,
                    expected=None if expected is None else str(expected),
                    actual=None if actual is None else str(actual),
                )
            )

        for cost, debt in self.session.execute(stmt):
            checked += 1
            if cost.supplier_id is None:
                if debt is not None:
                    add("debt", debt.id, "derived debt exists for a cost without supplier")
                continue
            if debt is None:
                add("cost", cost.id, "cost with supplier has no derived debt")
                continue
            if debt.partner_id != cost.supplier_id:
                add("debt", debt.id, "debt partner is not the cost supplier",
                    cost.supplier_id, debt.partner_id)
            if debt.total_amount != cost.amount:
                add("debt", debt.id, "debt total is not the cost amount",
                    cost.amount, debt.total_amount)
            if DebtType(debt.debt_type) != DebtType.PAYABLE:
                add("debt", debt.id, "derived debt is not PAYABLE",
                    DebtType.PAYABLE.value, debt.debt_type)
        return checked, violations

    def audit(self) -> ReconciliationReport:
        """Check every debt and cost; never raises on a violation."""
        debts_checked, drift = self._paid_amount_drift()
        costs_checked, linkage = self._cost_linkage()
        report = ReconciliationReport(
            debts_checked=debts_checked,
            costs_checked=costs_checked,
            violations=tuple(drift + linkage),
        )
        log = logger.info if report.is_clean else logger.warning
        log(
            "reconciliation_audit_completed",
            extra={
                "debts_checked": debts_checked,
                "costs_checked": costs_checked,
                "violation_count": len(report.violations),
            },
        )
        return report
