"""
Tests for cost category resolution (ledger_kernel/domain/categories.py).
"""

import pytest

from ledger_kernel.domain.categories import CostCategory, category_label, resolve_category
from ledger_kernel.exceptions import InvalidCategoryError


class TestResolveCategory:
    @pytest.mark.parametrize("code", [c.value for c in CostCategory])
    def test_builtin_codes_accepted(self, code):
        assert resolve_category(code) == code

    def test_normalizes_case_and_whitespace(self):
        assert resolve_category("  vat_tu ") == "VAT_TU"

    def test_unknown_code_rejected(self):
        with pytest.raises(InvalidCategoryError) as exc_info:
            resolve_category("FUEL")
        assert exc_info.value.category == "FUEL"
        assert exc_info.value.code == "INVALID_CATEGORY"

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_empty_code_rejected(self, code):
        with pytest.raises(InvalidCategoryError):
            resolve_category(code)

    def test_extra_codes_from_configuration(self):
        assert resolve_category("fuel", extra=("FUEL",)) == "FUEL"
        assert resolve_category("FUEL", extra=(" fuel ",)) == "FUEL"


class TestCategoryLabel:
    def test_builtin_labels(self):
        assert category_label("VAT_TU") == "Materials"
        assert category_label("NHAN_CONG") == "Labour"
        assert CostCategory.KHAC.label == "Other"

    def test_configured_code_labels_itself(self):
        assert category_label("FUEL") == "FUEL"
