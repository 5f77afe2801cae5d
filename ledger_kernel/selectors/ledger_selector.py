"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only ledger queries: single records and filtered lists
    of costs, debts and transactions, and the derived figures (debt
    progress, cost summaries, profitability, outstanding balances,
    collection progress, cash flow, net revenue) recomputed from current
    store state on every call.
Architecture position: Kernel > Selectors.  Reads models/, delegates all
    arithmetic to ledger_engines.aggregation, reads contract values through
    a ParentRegistry.  MUST NOT import from services/.

Invariants enforced:
    - No stored aggregates.  Every figure is derived at query time, so it
      always reflects the latest committed (or flushed) writes.

Failure modes:
    - CostNotFoundError / DebtNotFoundError / TransactionNotFoundError on
      single-record lookups.
    - ParentNotFoundError when a contract referenced by a figure is missing.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_engines.aggregation import (
    CashFlow,
    CollectionProgress,
    CostSummary,
    DebtBookTotals,
    DebtProgress,
    OutstandingTotals,
    Profitability,
    cash_flow,
    collection_progress,
    contract_profitability,
    cost_summary,
    debt_book_totals,
    debt_progress,
    net_revenue,
    outstanding_by_type,
)
from ledger_kernel.domain.dtos import (
    CostInfo,
    DebtInfo,
    ParentRef,
    TransactionInfo,
    to_cost_info,
    to_debt_info,
    to_transaction_info,
)
from ledger_kernel.domain.registry import ParentRegistry
from ledger_kernel.exceptions import (
    CostNotFoundError,
    DebtNotFoundError,
    TransactionNotFoundError,
)
from ledger_kernel.models.cost import Cost, ParentKind
from ledger_kernel.models.debt import Debt, DebtType
from ledger_kernel.models.transaction import Transaction, TransactionType
from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.parent_registry import ParentRegistrySelector


class LedgerSelector(BaseSelector[Debt]):
    """
    Read-only access to ledger records and figures.

    Contract:
        Returns DTOs and engine result objects, never ORM instances.
    """

    def __init__(self, session: Session, registry: ParentRegistry | None = None):
        super().__init__(session)
        self.registry = registry if registry is not None else ParentRegistrySelector(session)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def get_cost(self, cost_id: UUID) -> CostInfo:
        cost = self.session.get(Cost, cost_id)
        if cost is None:
            raise CostNotFoundError(str(cost_id))
        return to_cost_info(cost)

    def get_debt(self, debt_id: UUID) -> DebtInfo:
        debt = self.session.get(Debt, debt_id)
        if debt is None:
            raise DebtNotFoundError(str(debt_id))
        return to_debt_info(debt)

    def get_transaction(self, transaction_id: UUID) -> TransactionInfo:
        txn = self.session.get(Transaction, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(str(transaction_id))
        return to_transaction_info(txn)

    def derived_debt_for(self, cost_id: UUID) -> DebtInfo | None:
        """The debt derived from a cost, or None."""
        debt = self.session.execute(
            select(Debt).where(Debt.source_cost_id == cost_id)
        ).scalar_one_or_none()
        return to_debt_info(debt) if debt is not None else None

    def list_costs(self, parent: ParentRef) -> list[CostInfo]:
        column = Cost.contract_id if parent.kind == ParentKind.CONTRACT else Cost.project_id
        stmt = (
            select(Cost)
            .where(Cost.parent_kind == parent.kind.value, column == parent.id)
            .order_by(Cost.created_at, Cost.id)
        )
        return [to_cost_info(c) for c in self.session.execute(stmt).scalars()]

    def list_debts(
        self,
        debt_type: DebtType | None = None,
        partner_id: UUID | None = None,
        contract_id: UUID | None = None,
    ) -> list[DebtInfo]:
        stmt = select(Debt)
        if debt_type is not None:
            stmt = stmt.where(Debt.debt_type == DebtType(debt_type).value)
        if partner_id is not None:
            stmt = stmt.where(Debt.partner_id == partner_id)
        if contract_id is not None:
            stmt = stmt.where(Debt.contract_id == contract_id)
        stmt = stmt.order_by(Debt.created_at, Debt.id)
        return [to_debt_info(d) for d in self.session.execute(stmt).scalars()]

    def list_transactions(
        self,
        debt_id: UUID | None = None,
        contract_id: UUID | None = None,
        transaction_type: TransactionType | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[TransactionInfo]:
        """Transactions matching every given filter; dates are inclusive."""
        stmt = select(Transaction)
        if debt_id is not None:
            stmt = stmt.where(Transaction.debt_id == debt_id)
        if contract_id is not None:
            stmt = stmt.where(Transaction.contract_id == contract_id)
        if transaction_type is not None:
            stmt = stmt.where(
                Transaction.transaction_type == TransactionType(transaction_type).value
            )
        if start is not None:
            stmt = stmt.where(Transaction.transaction_date >= start)
        if end is not None:
            stmt = stmt.where(Transaction.transaction_date <= end)
        stmt = stmt.order_by(Transaction.transaction_date, Transaction.created_at, Transaction.id)
        return [to_transaction_info(t) for t in self.session.execute(stmt).scalars()]

    # ------------------------------------------------------------------
    # Figures
    # ------------------------------------------------------------------

    def debt_progress(self, debt_id: UUID) -> DebtProgress:
        return debt_progress(self.get_debt(debt_id))

    def cost_summary_for(self, parent: ParentRef) -> CostSummary:
        return cost_summary(self.list_costs(parent))

    def contract_profitability(self, contract_id: UUID) -> Profitability:
        """Profit of a contract after the costs recorded directly on it."""
        total_value = self.registry.get_total_value(contract_id)
        return contract_profitability(
            total_value, self.list_costs(ParentRef.contract(contract_id))
        )

    def outstanding_totals(self) -> OutstandingTotals:
        return outstanding_by_type(self.list_debts())

    def debt_book_totals(
        self,
        debt_type: DebtType | None = None,
        partner_id: UUID | None = None,
    ) -> DebtBookTotals:
        return debt_book_totals(self.list_debts(debt_type=debt_type, partner_id=partner_id))

    def collection_progress(self, contract_id: UUID) -> CollectionProgress:
        """Receipts recorded against a contract versus its total value."""
        total_value = self.registry.get_total_value(contract_id)
        receipts = self.list_transactions(
            contract_id=contract_id, transaction_type=TransactionType.RECEIPT
        )
        return collection_progress(total_value, [t.amount for t in receipts])

    def cash_flow(self, start: date | None = None, end: date | None = None) -> CashFlow:
        return cash_flow(self.list_transactions(start=start, end=end))

    def net_revenue(self, contract_id: UUID) -> Decimal:
        """Contract value excluding VAT."""
        return net_revenue(
            self.registry.get_total_value(contract_id),
            self.registry.get_vat_rate(contract_id),
        )
