"""
Tests for LedgerSelector: records, filtered lists and derived figures.

Figures are recomputed on every call, so each test checks them right after
the write that should move them.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.exceptions import (
    CostNotFoundError,
    DebtNotFoundError,
    ParentNotFoundError,
    TransactionNotFoundError,
)
from ledger_kernel.models.debt import DebtType
from ledger_kernel.models.transaction import TransactionType


class TestRecords:
    def test_missing_records_raise(self, selector):
        with pytest.raises(CostNotFoundError):
            selector.get_cost(uuid4())
        with pytest.raises(DebtNotFoundError):
            selector.get_debt(uuid4())
        with pytest.raises(TransactionNotFoundError):
            selector.get_transaction(uuid4())

    def test_list_costs_by_parent(self, ledger, selector, contract_ref, project_ref, test_actor_id):
        ledger.create_cost(contract_ref, "VAT_TU", 100, test_actor_id)
        ledger.create_cost(project_ref, "NHAN_CONG", 50, test_actor_id)

        on_contract = selector.list_costs(contract_ref)
        on_project = selector.list_costs(project_ref)
        assert [c.category for c in on_contract] == ["VAT_TU"]
        assert [c.category for c in on_project] == ["NHAN_CONG"]

    def test_list_debts_filters(self, ledger, selector, client, supplier, test_actor_id):
        ledger.create_debt(client.id, "RECEIVABLE", 100, test_actor_id)
        ledger.create_debt(supplier.id, "PAYABLE", 200, test_actor_id)

        assert len(selector.list_debts()) == 2
        payables = selector.list_debts(debt_type=DebtType.PAYABLE)
        assert [d.partner_id for d in payables] == [supplier.id]
        assert selector.list_debts(partner_id=client.id)[0].total_amount == Decimal("100")

    def test_list_transactions_date_range_inclusive(self, ledger, selector, supplier, test_actor_id):
        for day in (1, 15, 31):
            ledger.post_transaction("PAYMENT", supplier.id, day, date(2024, 1, day), test_actor_id)

        found = selector.list_transactions(start=date(2024, 1, 1), end=date(2024, 1, 15))
        assert [t.amount for t in found] == [Decimal("1"), Decimal("15")]


class TestFigures:
    def test_debt_progress(self, ledger, selector, client, test_actor_id):
        debt = ledger.create_debt(client.id, "RECEIVABLE", 400, test_actor_id).value
        ledger.post_transaction("RECEIPT", client.id, 100, date(2024, 2, 1), test_actor_id, debt_id=debt.id)

        progress = selector.debt_progress(debt.id)
        assert progress.remaining == Decimal("300")
        assert progress.percent_paid == Decimal("25")

    def test_cost_summary_follows_updates(self, ledger, selector, contract_ref, test_actor_id):
        cost = ledger.create_cost(contract_ref, "VAT_TU", 100, test_actor_id).value
        ledger.create_cost(contract_ref, "NHAN_CONG", 30, test_actor_id)
        assert selector.cost_summary_for(contract_ref).total == Decimal("130")

        ledger.update_cost(cost.id, "VAT_TU", 170, test_actor_id)

        summary = selector.cost_summary_for(contract_ref)
        assert summary.total == Decimal("200")
        assert summary.by_category["VAT_TU"] == Decimal("170")

    def test_contract_profitability_uses_direct_costs(
        self, ledger, selector, contract, contract_ref, project_ref, test_actor_id
    ):
        ledger.create_cost(contract_ref, "VAT_TU", 250000, test_actor_id)
        ledger.create_cost(project_ref, "NHAN_CONG", 999, test_actor_id)

        figures = selector.contract_profitability(contract.id)
        assert figures.total_cost == Decimal("250000")
        assert figures.profit == Decimal("750000")
        assert figures.cost_ratio == Decimal("0.25")

    def test_profitability_unknown_contract(self, selector):
        with pytest.raises(ParentNotFoundError):
            selector.contract_profitability(uuid4())

    def test_outstanding_totals(self, ledger, selector, client, supplier, test_actor_id):
        ledger.create_debt(client.id, "RECEIVABLE", 500, test_actor_id, paid_amount=100)
        ledger.create_debt(supplier.id, "PAYABLE", 300, test_actor_id)

        totals = selector.outstanding_totals()
        assert totals.receivable == Decimal("400")
        assert totals.payable == Decimal("300")
        assert totals.net == Decimal("100")

    def test_debt_book_totals(self, ledger, selector, client, test_actor_id):
        ledger.create_debt(client.id, "RECEIVABLE", 500, test_actor_id, paid_amount=100)
        ledger.create_debt(client.id, "RECEIVABLE", 200, test_actor_id)

        totals = selector.debt_book_totals(debt_type=DebtType.RECEIVABLE, partner_id=client.id)
        assert totals.total == Decimal("700")
        assert totals.paid == Decimal("100")
        assert totals.remaining == Decimal("600")

    def test_collection_progress(self, ledger, selector, client, contract, test_actor_id):
        ledger.post_transaction(
            TransactionType.RECEIPT, client.id, 400000, date(2024, 3, 1), test_actor_id,
            contract_id=contract.id,
        )
        progress = selector.collection_progress(contract.id)
        assert progress.collected == Decimal("400000")
        assert progress.remaining == Decimal("600000")
        assert progress.percent == Decimal("40")

    def test_cash_flow(self, ledger, selector, client, supplier, test_actor_id):
        ledger.post_transaction("RECEIPT", client.id, 900, date(2024, 3, 1), test_actor_id)
        ledger.post_transaction("PAYMENT", supplier.id, 200, date(2024, 3, 2), test_actor_id)
        ledger.post_transaction("PAYMENT", supplier.id, 50, date(2024, 4, 1), test_actor_id)

        march = selector.cash_flow(start=date(2024, 3, 1), end=date(2024, 3, 31))
        assert march.receipts == Decimal("900")
        assert march.payments == Decimal("200")
        assert march.net == Decimal("700")

    def test_net_revenue(self, selector, contract):
        revenue = selector.net_revenue(contract.id)
        assert revenue.quantize(Decimal("0.01")) == Decimal("909090.91")
