"""
Tests for LedgerResult and the error-to-status mapping.
"""

from uuid import uuid4

import pytest

from ledger_kernel.domain.dtos import ParentRef, parent_ref
from ledger_kernel.domain.results import LedgerResult, LedgerStatus, status_for
from ledger_kernel.exceptions import (
    AuthorizationError,
    CostNotFoundError,
    InvalidAmountError,
    OrphanedChildError,
    ParentNotFoundError,
    ParentScopeError,
    PartialFailureError,
    StoreError,
)
from ledger_kernel.models.cost import ParentKind


class TestStatusFor:
    @pytest.mark.parametrize(
        "exc, status",
        [
            (InvalidAmountError("amount", "-1", "must not be negative"), LedgerStatus.INVALID),
            (CostNotFoundError("c1"), LedgerStatus.NOT_FOUND),
            (ParentNotFoundError("CONTRACT", "k1"), LedgerStatus.NOT_FOUND),
            (OrphanedChildError("d1", 2), LedgerStatus.CONFLICT),
            (AuthorizationError("Employee", ("Admin",)), LedgerStatus.FORBIDDEN),
            (StoreError("insert", "debts", "disk full"), LedgerStatus.STORE_FAILED),
        ],
    )
    def test_maps_error_types(self, exc, status):
        assert status_for(exc) == status

    def test_from_error_carries_code_and_message(self):
        result = LedgerResult.from_error(OrphanedChildError("d1", 2))
        assert result.status == LedgerStatus.CONFLICT
        assert result.error_code == "ORPHANED_CHILD"
        assert "d1" in result.message
        assert not result.is_success


class TestPartialResult:
    def test_partial_keeps_primary_value(self):
        exc = PartialFailureError(
            "cost_debt_linkage", "cost", "c1", "disk full", result="kept"
        )
        result = LedgerResult.partial(exc)
        assert result.status == LedgerStatus.PARTIAL_SUCCESS
        assert result.value == "kept"
        assert result.is_success
        assert result.error_code == "PARTIAL_FAILURE"
        assert len(result.warnings) == 1
        assert "cost_debt_linkage" in result.warnings[0]


class TestParentRef:
    def test_exactly_one_parent(self):
        cid = uuid4()
        assert parent_ref(contract_id=cid) == ParentRef(ParentKind.CONTRACT, cid)
        assert parent_ref(project_id=cid).kind == ParentKind.PROJECT

    def test_both_parents_rejected(self):
        with pytest.raises(ParentScopeError):
            parent_ref(contract_id=uuid4(), project_id=uuid4())

    def test_no_parent_rejected(self):
        with pytest.raises(ParentScopeError) as exc_info:
            parent_ref()
        assert exc_info.value.code == "PARENT_SCOPE"
