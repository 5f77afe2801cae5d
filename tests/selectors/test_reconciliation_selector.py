"""
Tests for ReconciliationSelector: the ledger invariant audit.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import update

from ledger_kernel.invariants import LedgerInvariant
from ledger_kernel.models.cost import Cost
from ledger_kernel.models.debt import Debt
from ledger_kernel.selectors.reconciliation_selector import ReconciliationSelector


def _audit(session):
    return ReconciliationSelector(session).audit()


class TestCleanLedger:
    def test_ledger_written_through_services_is_clean(
        self, session, ledger, selector, contract_ref, supplier, client, test_actor_id
    ):
        cost = ledger.create_cost(
            contract_ref, "VAT_TU", 1000, test_actor_id, supplier_id=supplier.id
        ).value
        debt = selector.derived_debt_for(cost.id)
        ledger.post_transaction("PAYMENT", supplier.id, 400, date(2024, 1, 5), test_actor_id, debt_id=debt.id)
        manual = ledger.create_debt(client.id, "RECEIVABLE", 800, test_actor_id, paid_amount=100).value
        ledger.post_transaction("RECEIPT", client.id, 50, date(2024, 1, 6), test_actor_id, debt_id=manual.id)
        ledger.create_cost(contract_ref, "KHAC", 10, test_actor_id)

        report = _audit(session)

        assert report.is_clean
        assert report.debts_checked == 2
        assert report.costs_checked == 2


class TestViolations:
    def test_paid_amount_drift(self, session, ledger, client, test_actor_id):
        debt = ledger.create_debt(client.id, "RECEIVABLE", 800, test_actor_id).value
        ledger.store.adjust_paid_amount(debt.id, Decimal("25"))

        report = _audit(session)

        drift = report.for_invariant(LedgerInvariant.PAID_AMOUNT_MATCHES_TRANSACTIONS)
        assert len(drift) == 1
        assert drift[0].entity_id == str(debt.id)
        assert Decimal(drift[0].expected) == Decimal("0")
        assert Decimal(drift[0].actual) == Decimal("25")

    def test_supplier_cost_without_debt(self, session, ledger, contract_ref, supplier, test_actor_id):
        cost = ledger.create_cost(
            contract_ref, "VAT_TU", 100, test_actor_id, supplier_id=supplier.id
        ).value
        session.execute(Debt.__table__.delete().where(Debt.source_cost_id == cost.id))

        report = _audit(session)

        linkage = report.for_invariant(LedgerInvariant.COST_DEBT_LINKAGE)
        assert [(v.entity_type, v.entity_id) for v in linkage] == [("cost", str(cost.id))]

    def test_debt_out_of_step_with_cost(
        self, session, ledger, contract_ref, supplier, other_supplier, test_actor_id
    ):
        cost = ledger.create_cost(
            contract_ref, "VAT_TU", 100, test_actor_id, supplier_id=supplier.id
        ).value
        session.execute(
            update(Cost)
            .where(Cost.id == cost.id)
            .values(amount=Decimal("150"), supplier_id=other_supplier.id)
        )
        session.expire_all()

        details = {v.detail for v in _audit(session).violations}

        assert "debt partner is not the cost supplier" in details
        assert "debt total is not the cost amount" in details

    def test_debt_left_after_supplier_cleared(self, session, ledger, contract_ref, supplier, test_actor_id):
        cost = ledger.create_cost(
            contract_ref, "VAT_TU", 100, test_actor_id, supplier_id=supplier.id
        ).value
        session.execute(update(Cost).where(Cost.id == cost.id).values(supplier_id=None))
        session.expire_all()

        report = _audit(session)

        assert not report.is_clean
        assert report.violations[0].detail == "derived debt exists for a cost without supplier"

    def test_violation_serializes(self, session, ledger, client, test_actor_id):
        debt = ledger.create_debt(client.id, "PAYABLE", 10, test_actor_id).value
        ledger.store.adjust_paid_amount(debt.id, Decimal("1"))

        row = _audit(session).violations[0].as_dict()

        assert row["invariant"] == "paid_amount_matches_transactions"
        assert row["entity_type"] == "debt"
