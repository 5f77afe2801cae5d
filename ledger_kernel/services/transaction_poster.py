"""
Module: ledger_kernel.services.transaction_poster
Responsibility: Post and delete cash transactions, moving the linked debt's
    paid_amount by the transaction amount.
Architecture position: Kernel > Services.  Writes through LedgerStore.

Invariants enforced:
    - PAID_AMOUNT_MATCHES_TRANSACTIONS: posting a linked transaction adds
      its amount to the debt's paid_amount (never clamped to total_amount).
    - REVERSAL_RESTORES_PAID_AMOUNT: deleting a linked transaction subtracts
      its amount, floored at zero.
    - paid_amount moves only through LedgerStore.adjust_paid_amount.
    - A RECEIPT settles only RECEIVABLE debts and a PAYMENT only PAYABLE
      debts, of the transaction's own partner.

Failure modes:
    - InvalidAmountError (amount must be > 0), LedgerValidationError on an
      unknown transaction type or missing date, DebtTypeMismatchError.
    - PartnerNotFoundError, DebtNotFoundError, ParentNotFoundError (contract),
      TransactionNotFoundError.
    - StoreError; PartialFailureError when atomic linkage is disabled.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from ledger_kernel.db.types import AmountInput, parse_amount
from ledger_kernel.domain.dtos import TransactionInfo, to_transaction_info
from ledger_kernel.exceptions import (
    DebtNotFoundError,
    DebtTypeMismatchError,
    LedgerValidationError,
    ParentNotFoundError,
    PartialFailureError,
    StoreError,
    TransactionNotFoundError,
)
from ledger_kernel.invariants import LedgerInvariant
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.cost import ParentKind
from ledger_kernel.models.debt import Debt, DebtType
from ledger_kernel.models.parent import Contract
from ledger_kernel.models.transaction import Transaction, TransactionType
from ledger_kernel.services._ledger_helpers import require_partner, write_pair
from ledger_kernel.services.base import BaseService

logger = get_logger("services.transaction_poster")

# Which debt type each transaction type may settle
SETTLES: dict[TransactionType, DebtType] = {
    TransactionType.RECEIPT: DebtType.RECEIVABLE,
    TransactionType.PAYMENT: DebtType.PAYABLE,
}


def _resolve_type(transaction_type: TransactionType | str) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise LedgerValidationError(
            "transaction_type", f"unknown transaction type '{transaction_type}'"
        ) from None


def _resolve_date(transaction_date: date | None) -> date:
    if transaction_date is None:
        raise LedgerValidationError("transaction_date", "transaction date is required")
    if isinstance(transaction_date, datetime):
        return transaction_date.date()
    if not isinstance(transaction_date, date):
        raise LedgerValidationError("transaction_date", "must be a date")
    return transaction_date


class TransactionPoster(BaseService[Transaction]):
    """
    Posts receipts and payments and keeps debt paid amounts in step.

    Non-goals:
        - Transactions are immutable once posted.  amend_transaction is a
          delete followed by a repost, never an in-place edit.
    """

    def _get_transaction(self, transaction_id: UUID) -> Transaction:
        txn = self.store.find_by_id(Transaction, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(str(transaction_id))
        return txn

    def _check_settles(
        self,
        transaction_type: TransactionType,
        partner_id: UUID,
        debt_id: UUID,
        check_partner: bool = True,
    ) -> Debt:
        debt = self.store.find_by_id(Debt, debt_id)
        if debt is None:
            raise DebtNotFoundError(str(debt_id))
        expected = SETTLES[transaction_type]
        if DebtType(debt.debt_type) != expected:
            raise DebtTypeMismatchError(
                str(debt_id),
                f"{transaction_type.value} can only settle a {expected.value} debt, "
                f"not {DebtType(debt.debt_type).value}",
            )
        if check_partner and debt.partner_id != partner_id:
            raise DebtTypeMismatchError(
                str(debt_id),
                f"debt belongs to partner {debt.partner_id}, not {partner_id}",
            )
        return debt

    def post_transaction(
        self,
        transaction_type: TransactionType | str,
        partner_id: UUID,
        amount: AmountInput,
        transaction_date: date,
        actor_id: UUID,
        debt_id: UUID | None = None,
        description: str | None = None,
        contract_id: UUID | None = None,
    ) -> TransactionInfo:
        """
        Record a receipt or payment.

        When ``debt_id`` is given the debt's paid_amount grows by ``amount``
        in the same unit of work.  Overpayment is allowed.

        Returns:
            TransactionInfo DTO of the posted transaction.
        """
        return self._post(
            uuid4(),
            transaction_type,
            partner_id,
            amount,
            transaction_date,
            actor_id,
            debt_id=debt_id,
            description=description,
            contract_id=contract_id,
        )

    def _post(
        self,
        transaction_id: UUID,
        transaction_type: TransactionType | str,
        partner_id: UUID,
        amount: AmountInput,
        transaction_date: date,
        actor_id: UUID,
        debt_id: UUID | None,
        description: str | None,
        contract_id: UUID | None,
        check_partner: bool = True,
    ) -> TransactionInfo:
        parsed = parse_amount(amount, allow_zero=False)
        txn_type = _resolve_type(transaction_type)
        txn_date = _resolve_date(transaction_date)
        require_partner(self.store, partner_id)
        if debt_id is not None:
            self._check_settles(txn_type, partner_id, debt_id, check_partner)
        if contract_id is not None and self.store.find_by_id(Contract, contract_id) is None:
            raise ParentNotFoundError(ParentKind.CONTRACT.value, str(contract_id))

        txn = Transaction(
            id=transaction_id,
            transaction_type=txn_type.value,
            partner_id=partner_id,
            amount=parsed,
            transaction_date=txn_date,
            description=description,
            debt_id=debt_id,
            contract_id=contract_id,
            created_by_id=actor_id,
        )

        def settle() -> None:
            if debt_id is not None:
                self.store.adjust_paid_amount(debt_id, parsed)

        with LogContext.bind(transaction_id=str(txn.id), debt_id=debt_id):
            info = write_pair(
                self.store,
                self.policy,
                lambda: to_transaction_info(self.store.insert(txn)),
                settle,
                invariant=LedgerInvariant.PAID_AMOUNT_MATCHES_TRANSACTIONS,
                entity_type="transaction",
                entity_id=txn.id,
                compensate=lambda: self.store.delete(txn),
            )
            logger.info(
                "transaction_posted",
                extra={
                    "transaction_type": txn_type.value,
                    "amount": str(parsed),
                    "partner_id": str(partner_id),
                    "linked": debt_id is not None,
                },
            )
        return info

    def delete_transaction(self, transaction_id: UUID) -> TransactionInfo:
        """
        Delete a transaction, first reversing its effect on the linked debt.

        The debt's paid_amount becomes max(0, paid_amount - amount).

        Returns:
            TransactionInfo DTO of the deleted transaction.
        """
        txn = self._get_transaction(transaction_id)
        info = to_transaction_info(txn)

        def reverse() -> None:
            if info.debt_id is not None:
                self.store.adjust_paid_amount(info.debt_id, -info.amount, floor_at_zero=True)

        with LogContext.bind(transaction_id=str(info.id), debt_id=info.debt_id):
            write_pair(
                self.store,
                self.policy,
                reverse,
                lambda: self.store.delete(txn),
                invariant=LedgerInvariant.REVERSAL_RESTORES_PAID_AMOUNT,
                entity_type="transaction",
                entity_id=info.id,
            )
            logger.info(
                "transaction_deleted",
                extra={
                    "amount": str(info.amount),
                    "linked": info.debt_id is not None,
                },
            )
        return info

    def amend_transaction(
        self,
        transaction_id: UUID,
        transaction_type: TransactionType | str,
        partner_id: UUID,
        amount: AmountInput,
        transaction_date: date,
        actor_id: UUID,
        debt_id: UUID | None = None,
        description: str | None = None,
        contract_id: UUID | None = None,
    ) -> TransactionInfo:
        """
        Replace a transaction by deleting it and posting the new values.

        Both steps share one unit of work and the transaction keeps its id.
        The old debt is reverted (floored at zero) before the new amount is
        applied, so the old and new debt may differ.

        A debt can be re-pointed to another partner after transactions were
        linked to it; those transactions keep their original partner.  An
        amend that leaves both the partner and the debt unchanged therefore
        skips the partner match, while the settles-type check still applies.
        """
        old = self._get_transaction(transaction_id)
        old_amount: Decimal = old.amount
        keeps_link = old.partner_id == partner_id and old.debt_id == debt_id
        # Reject malformed input before the delete.
        parse_amount(amount, allow_zero=False)
        _resolve_type(transaction_type)
        _resolve_date(transaction_date)

        try:
            with self.store.atomic():
                self.delete_transaction(transaction_id)
                info = self._post(
                    transaction_id,
                    transaction_type,
                    partner_id,
                    amount,
                    transaction_date,
                    actor_id,
                    debt_id=debt_id,
                    description=description,
                    contract_id=contract_id,
                    check_partner=not keeps_link,
                )
        except PartialFailureError as exc:
            if not self.store.supports_savepoints:
                raise
            # The savepoint undid the delete as well; nothing was kept.
            raise StoreError("amend", "transactions", exc.reason) from exc
        logger.info(
            "transaction_amended",
            extra={
                "transaction_id": str(transaction_id),
                "old_amount": str(old_amount),
                "new_amount": str(info.amount),
            },
        )
        return info
