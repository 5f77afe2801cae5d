"""
Service layer for manually entered debts.

Debts derived from supplier costs belong to the Debt Linkage Manager and are
rejected here (DerivedDebtError).  A manual debt may be created with an
opening paid amount; posted transactions add to it.

Returns DebtInfo DTOs instead of ORM entities.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import func, select

from ledger_kernel.db.types import AmountInput, parse_amount
from ledger_kernel.domain.dtos import UNSET, DebtInfo, to_debt_info
from ledger_kernel.exceptions import (
    DebtNotFoundError,
    DerivedDebtError,
    LedgerValidationError,
    ParentNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.cost import ParentKind
from ledger_kernel.models.debt import Debt, DebtType
from ledger_kernel.models.parent import Contract
from ledger_kernel.models.transaction import Transaction
from ledger_kernel.services._ledger_helpers import dispose_debt, require_partner
from ledger_kernel.services.base import BaseService

logger = get_logger("services.debt_service")


def _resolve_debt_type(debt_type: DebtType | str) -> DebtType:
    try:
        return DebtType(debt_type)
    except ValueError:
        raise LedgerValidationError("debt_type", f"unknown debt type '{debt_type}'") from None


class DebtService(BaseService[Debt]):
    """
    Service for manual receivables and payables.

    Handles create/update/delete of debts entered by hand, plus the
    paid-amount resync used by reconciliation repair.
    """

    def _get_by_id(self, debt_id: UUID) -> Debt:
        debt = self.store.find_by_id(Debt, debt_id)
        if debt is None:
            raise DebtNotFoundError(str(debt_id))
        return debt

    def _get_manual(self, debt_id: UUID) -> Debt:
        debt = self._get_by_id(debt_id)
        if debt.source_cost_id is not None:
            raise DerivedDebtError(str(debt.id), str(debt.source_cost_id))
        return debt

    def _require_contract(self, contract_id: UUID) -> None:
        if self.store.find_by_id(Contract, contract_id) is None:
            raise ParentNotFoundError(ParentKind.CONTRACT.value, str(contract_id))

    def get_by_id(self, debt_id: UUID) -> DebtInfo:
        """
        Get debt by ID.

        Raises:
            DebtNotFoundError: If debt doesn't exist.
        """
        return to_debt_info(self._get_by_id(debt_id))

    def create_debt(
        self,
        partner_id: UUID,
        debt_type: DebtType | str,
        total_amount: AmountInput,
        actor_id: UUID,
        paid_amount: AmountInput = Decimal("0"),
        due_date: date | None = None,
        notes: str | None = None,
        contract_id: UUID | None = None,
    ) -> DebtInfo:
        """
        Create a manual debt.

        Args:
            partner_id: Client (receivable) or supplier (payable).
            debt_type: RECEIVABLE or PAYABLE.
            total_amount: Amount owed, >= 0.
            actor_id: Who enters the debt.
            paid_amount: Amount already settled before entry (opening
                balance); later transactions add to it.
            due_date: Optional due date.
            notes: Optional free text.
            contract_id: Optional contract the debt relates to.

        Returns:
            Created DebtInfo DTO.
        """
        resolved_type = _resolve_debt_type(debt_type)
        total = parse_amount(total_amount, "total_amount")
        opening = parse_amount(paid_amount, "paid_amount")
        require_partner(self.store, partner_id)
        if contract_id is not None:
            self._require_contract(contract_id)

        debt = Debt(
            id=uuid4(),
            partner_id=partner_id,
            debt_type=resolved_type.value,
            total_amount=total,
            paid_amount=opening,
            opening_paid_amount=opening,
            due_date=due_date,
            notes=notes,
            contract_id=contract_id,
            created_by_id=actor_id,
        )
        self.store.insert(debt)

        with LogContext.bind(debt_id=str(debt.id)):
            logger.info(
                "debt_created",
                extra={
                    "debt_type": resolved_type.value,
                    "partner_id": str(partner_id),
                    "total_amount": str(total),
                    "opening_paid_amount": str(opening),
                },
            )
        return to_debt_info(debt)

    def update_debt(
        self,
        debt_id: UUID,
        actor_id: UUID,
        partner_id: UUID | None = None,
        total_amount: AmountInput | None = None,
        due_date: date | None = UNSET,
        notes: str | None = UNSET,
    ) -> DebtInfo:
        """
        Update a manual debt.

        Note: debt_type and paid_amount cannot be changed here; paid_amount
        follows the posted transactions.  Only provided fields change;
        passing None for due_date or notes clears it.

        Changing partner_id re-points the debt only.  Transactions already
        linked to it keep the partner they were posted with.

        Raises:
            DebtNotFoundError: If the debt doesn't exist.
            DerivedDebtError: If the debt was derived from a cost.
        """
        debt = self._get_manual(debt_id)

        patch: dict = {"updated_by_id": actor_id}
        if partner_id is not None:
            require_partner(self.store, partner_id)
            patch["partner_id"] = partner_id
        if total_amount is not None:
            patch["total_amount"] = parse_amount(total_amount, "total_amount")
        if due_date is not UNSET:
            patch["due_date"] = due_date
        if notes is not UNSET:
            patch["notes"] = notes

        self.store.update(Debt, debt.id, patch)
        with LogContext.bind(debt_id=str(debt.id)):
            logger.info(
                "debt_updated",
                extra={"fields": sorted(k for k in patch if k != "updated_by_id")},
            )
        return to_debt_info(debt)

    def delete_debt(self, debt_id: UUID) -> DebtInfo:
        """
        Delete a manual debt under the orphan policy.

        Raises:
            DerivedDebtError: If the debt was derived from a cost (delete or
                edit the cost instead).
            OrphanedChildError: If transactions reference it and the policy
                is REJECT.
        """
        debt = self._get_manual(debt_id)
        info = to_debt_info(debt)
        with LogContext.bind(debt_id=str(debt.id)):
            dispose_debt(self.store, self.policy, debt)
        return info

    def resync_paid_amount(self, debt_id: UUID) -> DebtInfo:
        """
        Bring paid_amount back to opening_paid_amount + sum of transactions.

        Used to repair drift reported by the reconciliation audit.  The
        correction goes through the same atomic adjustment as posting.
        """
        debt = self._get_by_id(debt_id)
        linked_total = self.session.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0)).where(
                Transaction.debt_id == debt.id
            )
        ).scalar_one()
        expected = debt.opening_paid_amount + Decimal(str(linked_total))
        delta = expected - debt.paid_amount
        if delta != 0:
            self.store.adjust_paid_amount(debt.id, delta)
            with LogContext.bind(debt_id=str(debt.id)):
                logger.warning(
                    "paid_amount_resynced",
                    extra={"delta": str(delta), "paid_amount": str(debt.paid_amount)},
                )
        return to_debt_info(debt)
