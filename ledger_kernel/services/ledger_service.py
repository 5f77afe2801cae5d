"""
Module: ledger_kernel.services.ledger_service
Responsibility: Single entry point for ledger writes.  Owns the transaction
    boundary, binds the log context, and turns every typed ledger error into
    a LedgerResult so that no core operation aborts its caller.
Architecture position: Kernel > Services.  Composes DebtLinkageManager,
    TransactionPoster, DebtService and PartnerService over one session and
    one LedgerStore.

Invariants enforced:
    - Commit on success (and on PARTIAL_SUCCESS, where the primary write is
      deliberately kept); rollback on every other failure, so an abandoned
      or failed operation leaves no half-applied write.
    - Nothing is retried.

Failure modes:
    - LedgerError subclasses never escape; they become a LedgerResult with
      the error's code.
    - Unexpected (non-ledger) exceptions are logged, rolled back and
      re-raised.
"""

import time
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_kernel.db.store import LedgerStore
from ledger_kernel.db.types import AmountInput
from ledger_kernel.domain.dtos import UNSET, ParentRef
from ledger_kernel.domain.policy import DEFAULT_POLICY, LedgerPolicy
from ledger_kernel.domain.registry import ParentRegistry
from ledger_kernel.domain.results import LedgerResult
from ledger_kernel.domain.roles import RoleProvider, UserRole
from ledger_kernel.exceptions import (
    AuthorizationError,
    LedgerError,
    PartialFailureError,
    StoreError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.debt import DebtType
from ledger_kernel.models.partner import PartnerType
from ledger_kernel.models.transaction import TransactionType
from ledger_kernel.selectors.parent_registry import ParentRegistrySelector
from ledger_kernel.services.debt_linkage import DebtLinkageManager
from ledger_kernel.services.debt_service import DebtService
from ledger_kernel.services.partner_service import PartnerService
from ledger_kernel.services.transaction_poster import TransactionPoster

logger = get_logger("services.ledger_service")


class LedgerService:
    """
    Facade over the ledger services with commit/rollback ownership.

    Contract:
        Every write method returns a LedgerResult.  ``value`` holds the DTO
        produced by the underlying service.

    Guarantees:
        - auto_commit=True: the session is committed on success and rolled
          back on failure.  auto_commit=False leaves both to the caller.
    """

    def __init__(
        self,
        session: Session,
        registry: ParentRegistry | None = None,
        policy: LedgerPolicy | None = None,
        role_provider: RoleProvider | None = None,
        supports_savepoints: bool = True,
        auto_commit: bool = True,
    ):
        self._session = session
        self._policy = policy if policy is not None else DEFAULT_POLICY
        self._registry = registry if registry is not None else ParentRegistrySelector(session)
        self._role_provider = role_provider
        self._auto_commit = auto_commit

        self.store = LedgerStore(session, supports_savepoints=supports_savepoints)
        self.linkage = DebtLinkageManager(session, self._registry, self.store, self._policy)
        self.poster = TransactionPoster(session, self.store, self._policy)
        self.debts = DebtService(session, self.store, self._policy)
        self.partners = PartnerService(session, self.store, self._policy)

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def require_role(self, *allowed: UserRole) -> UserRole:
        """
        Check the caller's role before an elevated operation.

        The core operations never call this; callers gating destructive
        operations do.

        Raises:
            AuthorizationError: If no role provider is configured or the
                current role is not in ``allowed``.
        """
        allowed_values = tuple(r.value for r in allowed)
        if self._role_provider is None:
            raise AuthorizationError("unknown", allowed_values)
        role = UserRole(self._role_provider.current_user_role())
        if role not in allowed:
            logger.warning(
                "role_rejected",
                extra={"role": role.value, "allowed": list(allowed_values)},
            )
            raise AuthorizationError(role.value, allowed_values)
        return role

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        if not self._auto_commit:
            return
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            raise StoreError("commit", "session", str(exc)) from exc

    def _rollback(self) -> None:
        if self._auto_commit:
            self._session.rollback()

    def _run(
        self,
        operation: str,
        fn: Callable[[], Any],
        actor_id: UUID | None = None,
        **context_ids: Any,
    ) -> LedgerResult:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=actor_id,
            **context_ids,
        ):
            logger.info("ledger_operation_started", extra={"operation": operation})
            t0 = time.monotonic()
            try:
                try:
                    result = LedgerResult.ok(fn())
                except PartialFailureError as exc:
                    result = LedgerResult.partial(exc)
                self._commit()
            except LedgerError as exc:
                self._rollback()
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.warning(
                    "ledger_operation_failed",
                    extra={
                        "operation": operation,
                        "error_code": exc.code,
                        "error": str(exc),
                        "duration_ms": duration_ms,
                    },
                )
                return LedgerResult.from_error(exc)
            except Exception:
                self._rollback()
                logger.error(
                    "ledger_operation_crashed",
                    extra={"operation": operation},
                    exc_info=True,
                )
                raise

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info(
                "ledger_operation_completed",
                extra={
                    "operation": operation,
                    "status": result.status.value,
                    "duration_ms": duration_ms,
                },
            )
            return result

    # ------------------------------------------------------------------
    # Costs
    # ------------------------------------------------------------------

    def create_cost(
        self,
        parent: ParentRef,
        category: str,
        amount: AmountInput,
        actor_id: UUID,
        supplier_id: UUID | None = None,
        description: str | None = None,
    ) -> LedgerResult:
        return self._run(
            "create_cost",
            lambda: self.linkage.create_cost(
                parent, category, amount, actor_id,
                supplier_id=supplier_id, description=description,
            ),
            actor_id=actor_id,
        )

    def update_cost(
        self,
        cost_id: UUID,
        category: str,
        amount: AmountInput,
        actor_id: UUID,
        supplier_id: UUID | None = None,
        description: str | None = None,
    ) -> LedgerResult:
        return self._run(
            "update_cost",
            lambda: self.linkage.update_cost(
                cost_id, category, amount, actor_id,
                supplier_id=supplier_id, description=description,
            ),
            actor_id=actor_id,
            cost_id=cost_id,
        )

    def delete_cost(self, cost_id: UUID, actor_id: UUID | None = None) -> LedgerResult:
        return self._run(
            "delete_cost",
            lambda: self.linkage.delete_cost(cost_id),
            actor_id=actor_id,
            cost_id=cost_id,
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

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
    ) -> LedgerResult:
        return self._run(
            "post_transaction",
            lambda: self.poster.post_transaction(
                transaction_type, partner_id, amount, transaction_date, actor_id,
                debt_id=debt_id, description=description, contract_id=contract_id,
            ),
            actor_id=actor_id,
            debt_id=debt_id,
        )

    def delete_transaction(
        self,
        transaction_id: UUID,
        actor_id: UUID | None = None,
    ) -> LedgerResult:
        return self._run(
            "delete_transaction",
            lambda: self.poster.delete_transaction(transaction_id),
            actor_id=actor_id,
            transaction_id=transaction_id,
        )

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
    ) -> LedgerResult:
        return self._run(
            "amend_transaction",
            lambda: self.poster.amend_transaction(
                transaction_id, transaction_type, partner_id, amount,
                transaction_date, actor_id,
                debt_id=debt_id, description=description, contract_id=contract_id,
            ),
            actor_id=actor_id,
            transaction_id=transaction_id,
        )

    # ------------------------------------------------------------------
    # Manual debts
    # ------------------------------------------------------------------

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
    ) -> LedgerResult:
        return self._run(
            "create_debt",
            lambda: self.debts.create_debt(
                partner_id, debt_type, total_amount, actor_id,
                paid_amount=paid_amount, due_date=due_date,
                notes=notes, contract_id=contract_id,
            ),
            actor_id=actor_id,
        )

    def update_debt(
        self,
        debt_id: UUID,
        actor_id: UUID,
        partner_id: UUID | None = None,
        total_amount: AmountInput | None = None,
        due_date: date | None = UNSET,
        notes: str | None = UNSET,
    ) -> LedgerResult:
        return self._run(
            "update_debt",
            lambda: self.debts.update_debt(
                debt_id, actor_id,
                partner_id=partner_id, total_amount=total_amount,
                due_date=due_date, notes=notes,
            ),
            actor_id=actor_id,
            debt_id=debt_id,
        )

    def delete_debt(self, debt_id: UUID, actor_id: UUID | None = None) -> LedgerResult:
        return self._run(
            "delete_debt",
            lambda: self.debts.delete_debt(debt_id),
            actor_id=actor_id,
            debt_id=debt_id,
        )

    def resync_paid_amount(self, debt_id: UUID, actor_id: UUID | None = None) -> LedgerResult:
        return self._run(
            "resync_paid_amount",
            lambda: self.debts.resync_paid_amount(debt_id),
            actor_id=actor_id,
            debt_id=debt_id,
        )

    # ------------------------------------------------------------------
    # Partners
    # ------------------------------------------------------------------

    def create_partner(
        self,
        name: str,
        partner_type: PartnerType | str,
        actor_id: UUID,
        phone: str | None = None,
        address: str | None = None,
        tax_code: str | None = None,
    ) -> LedgerResult:
        return self._run(
            "create_partner",
            lambda: self.partners.create_partner(
                name, partner_type, actor_id,
                phone=phone, address=address, tax_code=tax_code,
            ),
            actor_id=actor_id,
        )

    def update_partner(
        self,
        partner_id: UUID,
        actor_id: UUID,
        name: str | None = None,
        phone: str | None = UNSET,
        address: str | None = UNSET,
        tax_code: str | None = UNSET,
    ) -> LedgerResult:
        return self._run(
            "update_partner",
            lambda: self.partners.update_partner(
                partner_id, actor_id,
                name=name, phone=phone, address=address, tax_code=tax_code,
            ),
            actor_id=actor_id,
        )
