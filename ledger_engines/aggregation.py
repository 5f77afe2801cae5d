"""
Module: ledger_engines.aggregation
Responsibility:
    Derived, read-only figures over costs, debts and transactions: debt
    progress, cost summaries, contract profitability, outstanding balances,
    collection progress, cash flow and VAT-exclusive revenue.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Inputs are any objects
    exposing the attributes named below (ORM rows or kernel DTOs); the
    selectors feed them current store state.

Invariants enforced:
    - Purity: no clock access, no I/O.
    - Decimal-only arithmetic; results are not rounded.
    - No division by zero: ratios over a zero base are 0 (percent paid) or
      None (cost ratio, collection percent), never an exception.

Failure modes:
    - ValueError from net_revenue on a negative VAT rate.
    - AttributeError when an input lacks a required attribute.

Usage:
    from ledger_engines.aggregation import debt_progress, contract_profitability

    progress = debt_progress(debt)          # DebtProgress(remaining, percent_paid)
    figures = contract_profitability(Decimal("0"), costs)
    assert figures.cost_ratio is None
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from ledger_engines.tracer import traced_engine

ZERO = Decimal("0")
HUNDRED = Decimal("100")

RECEIVABLE = "RECEIVABLE"
PAYABLE = "PAYABLE"
RECEIPT = "RECEIPT"
PAYMENT = "PAYMENT"


@dataclass(frozen=True)
class DebtProgress:
    """
    Settlement progress of one debt.

    remaining is negative when the debt is overpaid.
    """

    remaining: Decimal
    percent_paid: Decimal


@dataclass(frozen=True)
class CostSummary:
    total: Decimal
    count: int
    by_category: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class Profitability:
    """
    Contract profit figures.

    Guarantees:
        - cost_ratio is total_cost / total_value as a fraction, or None when
          total_value is zero ("no ratio").
    """

    total_cost: Decimal
    profit: Decimal
    cost_ratio: Decimal | None

    @property
    def has_ratio(self) -> bool:
        return self.cost_ratio is not None


@dataclass(frozen=True)
class OutstandingTotals:
    receivable: Decimal
    payable: Decimal

    @property
    def net(self) -> Decimal:
        """Receivable minus payable."""
        return self.receivable - self.payable


@dataclass(frozen=True)
class DebtBookTotals:
    total: Decimal
    paid: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class CollectionProgress:
    collected: Decimal
    remaining: Decimal
    percent: Decimal | None


@dataclass(frozen=True)
class CashFlow:
    receipts: Decimal
    payments: Decimal
    net: Decimal


@traced_engine("aggregation.debt_progress", "1.0")
def debt_progress(debt) -> DebtProgress:
    """
    Remaining balance and percent paid of a debt.

    percent_paid is paid / total * 100, or 0 when total_amount is 0.  It is
    not capped at 100.
    """
    total = debt.total_amount
    paid = debt.paid_amount
    percent = paid / total * HUNDRED if total > ZERO else ZERO
    return DebtProgress(remaining=total - paid, percent_paid=percent)


@traced_engine("aggregation.cost_summary", "1.0")
def cost_summary(costs: Iterable) -> CostSummary:
    """Total, count and per-category totals of a set of costs."""
    total = ZERO
    count = 0
    by_category: dict[str, Decimal] = {}
    for cost in costs:
        total += cost.amount
        count += 1
        by_category[cost.category] = by_category.get(cost.category, ZERO) + cost.amount
    return CostSummary(total=total, count=count, by_category=by_category)


@traced_engine("aggregation.contract_profitability", "1.0", fingerprint_fields=("total_value",))
def contract_profitability(total_value: Decimal, costs: Iterable) -> Profitability:
    """
    Profit of a contract after its costs.

    Args:
        total_value: Contract value from the registry.
        costs: Costs recorded against the contract.
    """
    total_cost = sum((c.amount for c in costs), ZERO)
    ratio = total_cost / total_value if total_value != ZERO else None
    return Profitability(
        total_cost=total_cost,
        profit=total_value - total_cost,
        cost_ratio=ratio,
    )


@traced_engine("aggregation.outstanding_by_type", "1.0")
def outstanding_by_type(debts: Iterable) -> OutstandingTotals:
    """Sum of (total - paid) per debt type."""
    receivable = ZERO
    payable = ZERO
    for debt in debts:
        remaining = debt.total_amount - debt.paid_amount
        if debt.debt_type == RECEIVABLE:
            receivable += remaining
        elif debt.debt_type == PAYABLE:
            payable += remaining
    return OutstandingTotals(receivable=receivable, payable=payable)


@traced_engine("aggregation.debt_book_totals", "1.0")
def debt_book_totals(debts: Iterable) -> DebtBookTotals:
    total = ZERO
    paid = ZERO
    for debt in debts:
        total += debt.total_amount
        paid += debt.paid_amount
    return DebtBookTotals(total=total, paid=paid, remaining=total - paid)


@traced_engine("aggregation.collection_progress", "1.0", fingerprint_fields=("total_value",))
def collection_progress(total_value: Decimal, received: Iterable[Decimal]) -> CollectionProgress:
    """
    How much of a contract's value has been collected.

    remaining never goes below zero; percent is None when total_value is 0
    and is not capped (display capping is the caller's concern).
    """
    collected = sum(received, ZERO)
    remaining = max(ZERO, total_value - collected)
    percent = collected / total_value * HUNDRED if total_value != ZERO else None
    return CollectionProgress(collected=collected, remaining=remaining, percent=percent)


@traced_engine("aggregation.cash_flow", "1.0")
def cash_flow(transactions: Iterable) -> CashFlow:
    receipts = ZERO
    payments = ZERO
    for txn in transactions:
        if txn.transaction_type == RECEIPT:
            receipts += txn.amount
        elif txn.transaction_type == PAYMENT:
            payments += txn.amount
    return CashFlow(receipts=receipts, payments=payments, net=receipts - payments)


@traced_engine("aggregation.net_revenue", "1.0", fingerprint_fields=("total_value", "vat_rate"))
def net_revenue(total_value: Decimal, vat_rate: Decimal) -> Decimal:
    """
    Contract value with VAT stripped: total_value / (1 + vat_rate / 100).

    Raises:
        ValueError: If vat_rate is negative.
    """
    if vat_rate < ZERO:
        raise ValueError(f"vat_rate cannot be negative: {vat_rate}")
    if vat_rate == ZERO:
        return total_value
    return total_value / (1 + vat_rate / HUNDRED)
