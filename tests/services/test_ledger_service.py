"""
Tests for the LedgerService facade: transaction boundary, result mapping,
logging and role checks.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from ledger_kernel.domain.results import LedgerStatus
from ledger_kernel.domain.roles import LEDGER_ROLES, StaticRoleProvider, UserRole
from ledger_kernel.exceptions import AuthorizationError
from ledger_kernel.services.ledger_service import LedgerService


class TestOperationLogging:
    def test_success_logs_start_and_completion(
        self, ledger, contract_ref, test_actor_id, captured_logs
    ):
        ledger.create_cost(contract_ref, "KHAC", 10, test_actor_id)

        logs = captured_logs()
        started = [r for r in logs if r["message"] == "ledger_operation_started"]
        completed = [r for r in logs if r["message"] == "ledger_operation_completed"]
        assert started[0]["operation"] == "create_cost"
        assert completed[0]["status"] == "success"
        assert started[0]["correlation_id"] == completed[0]["correlation_id"]
        assert "duration_ms" in completed[0]

    def test_failure_logs_error_code(self, ledger, contract_ref, test_actor_id, captured_logs):
        ledger.create_cost(contract_ref, "NOPE", 10, test_actor_id)

        failed = [r for r in captured_logs() if r["message"] == "ledger_operation_failed"]
        assert failed
        assert failed[0]["error_code"] == "INVALID_CATEGORY"
        assert failed[0]["level"] == "WARNING"

    def test_each_operation_gets_new_correlation_id(
        self, ledger, contract_ref, test_actor_id, captured_logs
    ):
        ledger.create_cost(contract_ref, "KHAC", 10, test_actor_id)
        ledger.create_cost(contract_ref, "KHAC", 20, test_actor_id)

        ids = {
            r["correlation_id"]
            for r in captured_logs()
            if r["message"] == "ledger_operation_started"
        }
        assert len(ids) == 2


class TestTransactionBoundary:
    def test_unexpected_error_rolls_back_and_propagates(
        self, session, ledger, contract_ref, test_actor_id, monkeypatch, captured_logs
    ):
        def explode(*args, **kwargs):
            raise RuntimeError("bug")

        monkeypatch.setattr(ledger.linkage, "create_cost", explode)

        with pytest.raises(RuntimeError):
            ledger.create_cost(contract_ref, "KHAC", 10, test_actor_id)
        assert any(r["message"] == "ledger_operation_crashed" for r in captured_logs())

    def test_commit_failure_reported_as_store_error(
        self, session, ledger, contract_ref, test_actor_id, monkeypatch
    ):
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(session, "commit", failing_commit)

        result = ledger.create_cost(contract_ref, "KHAC", 10, test_actor_id)

        assert result.status == LedgerStatus.STORE_FAILED
        assert result.error_code == "STORE_ERROR"

    def test_auto_commit_disabled_leaves_boundary_to_caller(
        self, session, contract_ref, test_actor_id, monkeypatch
    ):
        calls = []
        monkeypatch.setattr(session, "commit", lambda: calls.append("commit"))
        monkeypatch.setattr(session, "rollback", lambda: calls.append("rollback"))
        service = LedgerService(session, auto_commit=False)

        assert service.create_cost(contract_ref, "KHAC", 10, test_actor_id).is_success
        assert not service.create_cost(contract_ref, "NOPE", 10, test_actor_id).is_success
        assert calls == []

    def test_value_is_dto_not_orm(self, ledger, contract_ref, test_actor_id):
        from ledger_kernel.domain.dtos import CostInfo

        result = ledger.create_cost(contract_ref, "KHAC", Decimal("10"), test_actor_id)
        assert isinstance(result.value, CostInfo)


class TestRequireRole:
    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.ACCOUNTANT])
    def test_ledger_roles_allowed(self, session, role):
        service = LedgerService(session, role_provider=StaticRoleProvider(role))
        assert service.require_role(*LEDGER_ROLES) == role

    def test_employee_rejected(self, session, captured_logs):
        service = LedgerService(session, role_provider=StaticRoleProvider(UserRole.EMPLOYEE))
        with pytest.raises(AuthorizationError) as exc_info:
            service.require_role(*LEDGER_ROLES)
        assert exc_info.value.code == "ROLE_REQUIRED"
        assert exc_info.value.role == "Employee"
        assert any(r["message"] == "role_rejected" for r in captured_logs())

    def test_no_provider_rejected(self, ledger):
        with pytest.raises(AuthorizationError):
            ledger.require_role(UserRole.ADMIN)
