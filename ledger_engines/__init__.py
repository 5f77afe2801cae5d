"""
Module: ledger_engines
Responsibility:
    Package entrypoint re-exporting the pure aggregation functions and their
    result types.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  MUST NOT import
    ledger_config or any kernel service/selector.
"""

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

__all__ = [
    "CashFlow",
    "CollectionProgress",
    "CostSummary",
    "DebtBookTotals",
    "DebtProgress",
    "OutstandingTotals",
    "Profitability",
    "cash_flow",
    "collection_progress",
    "contract_profitability",
    "cost_summary",
    "debt_book_totals",
    "debt_progress",
    "net_revenue",
    "outstanding_by_type",
]
