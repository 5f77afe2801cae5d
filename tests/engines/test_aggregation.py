"""
Tests for the pure aggregation engine (ledger_engines/aggregation.py).

Inputs are plain stand-ins with the attributes the engine reads; no
database is involved.
"""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from ledger_engines.aggregation import (
    cash_flow,
    collection_progress,
    contract_profitability,
    cost_summary,
    debt_book_totals,
    debt_progress,
    net_revenue,
    outstanding_by_type,
)
from ledger_engines.tracer import compute_input_fingerprint
from ledger_kernel.models.debt import DebtType
from ledger_kernel.models.transaction import TransactionType


@dataclass(frozen=True)
class _Debt:
    total_amount: Decimal
    paid_amount: Decimal
    debt_type: DebtType = DebtType.PAYABLE


@dataclass(frozen=True)
class _Cost:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class _Txn:
    transaction_type: TransactionType
    amount: Decimal


class TestDebtProgress:
    def test_partial_payment(self):
        progress = debt_progress(_Debt(Decimal("1000"), Decimal("250")))
        assert progress.remaining == Decimal("750")
        assert progress.percent_paid == Decimal("25")

    def test_zero_total_reports_zero_percent(self):
        progress = debt_progress(_Debt(Decimal("0"), Decimal("0")))
        assert progress.percent_paid == Decimal("0")
        assert progress.remaining == Decimal("0")

    def test_overpayment_is_not_capped(self):
        progress = debt_progress(_Debt(Decimal("100"), Decimal("150")))
        assert progress.remaining == Decimal("-50")
        assert progress.percent_paid == Decimal("150")


class TestCostSummary:
    def test_totals_by_category(self):
        summary = cost_summary([
            _Cost("VAT_TU", Decimal("100")),
            _Cost("NHAN_CONG", Decimal("40")),
            _Cost("VAT_TU", Decimal("60")),
        ])
        assert summary.total == Decimal("200")
        assert summary.count == 3
        assert summary.by_category == {"VAT_TU": Decimal("160"), "NHAN_CONG": Decimal("40")}

    def test_empty(self):
        summary = cost_summary([])
        assert summary.total == Decimal("0")
        assert summary.count == 0
        assert summary.by_category == {}


class TestContractProfitability:
    def test_profit_and_ratio(self):
        figures = contract_profitability(
            Decimal("1000"), [_Cost("VAT_TU", Decimal("300")), _Cost("KHAC", Decimal("100"))]
        )
        assert figures.total_cost == Decimal("400")
        assert figures.profit == Decimal("600")
        assert figures.cost_ratio == Decimal("0.4")
        assert figures.has_ratio

    def test_zero_value_has_no_ratio(self):
        figures = contract_profitability(Decimal("0"), [_Cost("VAT_TU", Decimal("50"))])
        assert figures.cost_ratio is None
        assert not figures.has_ratio
        assert figures.profit == Decimal("-50")


class TestDebtTotals:
    def test_outstanding_by_type(self):
        totals = outstanding_by_type([
            _Debt(Decimal("500"), Decimal("100"), DebtType.RECEIVABLE),
            _Debt(Decimal("300"), Decimal("300"), DebtType.PAYABLE),
            _Debt(Decimal("200"), Decimal("50"), DebtType.PAYABLE),
        ])
        assert totals.receivable == Decimal("400")
        assert totals.payable == Decimal("150")
        assert totals.net == Decimal("250")

    def test_debt_book_totals(self):
        totals = debt_book_totals([
            _Debt(Decimal("500"), Decimal("100")),
            _Debt(Decimal("200"), Decimal("250")),
        ])
        assert totals.total == Decimal("700")
        assert totals.paid == Decimal("350")
        assert totals.remaining == Decimal("350")


class TestCollectionProgress:
    def test_partial_collection(self):
        progress = collection_progress(Decimal("1000"), [Decimal("200"), Decimal("300")])
        assert progress.collected == Decimal("500")
        assert progress.remaining == Decimal("500")
        assert progress.percent == Decimal("50")

    def test_over_collection_floors_remaining(self):
        progress = collection_progress(Decimal("100"), [Decimal("150")])
        assert progress.remaining == Decimal("0")
        assert progress.percent == Decimal("150")

    def test_zero_value(self):
        progress = collection_progress(Decimal("0"), [])
        assert progress.percent is None


class TestCashFlow:
    def test_receipts_minus_payments(self):
        flow = cash_flow([
            _Txn(TransactionType.RECEIPT, Decimal("900")),
            _Txn(TransactionType.PAYMENT, Decimal("250")),
            _Txn(TransactionType.PAYMENT, Decimal("50")),
        ])
        assert flow.receipts == Decimal("900")
        assert flow.payments == Decimal("300")
        assert flow.net == Decimal("600")


class TestNetRevenue:
    def test_strips_vat(self):
        assert net_revenue(Decimal("1100"), Decimal("10")) == Decimal("1000")

    def test_zero_rate(self):
        assert net_revenue(Decimal("1100"), Decimal("0")) == Decimal("1100")

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            net_revenue(Decimal("1100"), Decimal("-1"))


class TestEngineTrace:
    def test_trace_emitted_at_debug(self, captured_logs):
        contract_profitability(Decimal("1000"), [])
        traces = [r for r in captured_logs() if r["message"] == "LEDGER_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "aggregation.contract_profitability"
        assert len(traces[-1]["input_fingerprint"]) == 16

    def test_fingerprint_is_deterministic(self):
        a = compute_input_fingerprint(("total_value",), {"total_value": Decimal("5")})
        b = compute_input_fingerprint(("total_value",), {"total_value": Decimal("5")})
        c = compute_input_fingerprint(("total_value",), {"total_value": Decimal("6")})
        assert a == b
        assert a != c
