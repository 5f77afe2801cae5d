"""
Tests for PartnerService.
"""

from uuid import uuid4

from ledger_kernel.domain.results import LedgerStatus
from ledger_kernel.models.partner import PartnerType
from ledger_kernel.services.partner_service import PartnerService


class TestPartnerService:
    def test_create_partner(self, ledger, test_actor_id):
        result = ledger.create_partner(
            "  An Phu Cement ", PartnerType.SUPPLIER, test_actor_id, tax_code="0301234567"
        )
        assert result.status == LedgerStatus.SUCCESS
        assert result.value.name == "An Phu Cement"
        assert result.value.partner_type == PartnerType.SUPPLIER
        assert result.value.tax_code == "0301234567"

    def test_name_required(self, ledger, test_actor_id):
        result = ledger.create_partner("   ", "Client", test_actor_id)
        assert result.status == LedgerStatus.INVALID

    def test_unknown_type(self, ledger, test_actor_id):
        assert ledger.create_partner("X", "Employee", test_actor_id).error_code == "VALIDATION_ERROR"

    def test_update_partner(self, ledger, supplier, test_actor_id):
        result = ledger.update_partner(supplier.id, test_actor_id, phone="0909 000 111")
        assert result.value.phone == "0909 000 111"
        assert result.value.name == "Hoa Phat Steel"

    def test_none_clears_optional_field(self, ledger, supplier, test_actor_id):
        ledger.update_partner(supplier.id, test_actor_id, phone="0909 000 111", tax_code="0101234567")

        result = ledger.update_partner(supplier.id, test_actor_id, phone=None)

        assert result.value.phone is None
        assert result.value.tax_code == "0101234567"

    def test_update_unknown(self, ledger, test_actor_id):
        assert ledger.update_partner(uuid4(), test_actor_id, name="Y").error_code == "PARTNER_NOT_FOUND"

    def test_list_by_type(self, session, supplier, other_supplier, client):
        names = [p.name for p in PartnerService(session).list_by_type("Supplier")]
        assert names == ["Dong Tam Bricks", "Hoa Phat Steel"]
