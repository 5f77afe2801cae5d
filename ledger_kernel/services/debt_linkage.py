"""
Module: ledger_kernel.services.debt_linkage
Responsibility: Create, update and delete costs while keeping the PAYABLE
    debt derived from each supplier cost in step with it.
Architecture position: Kernel > Services.  Writes through LedgerStore;
    resolves parents through a ParentRegistry.

Invariants enforced:
    - COST_DEBT_LINKAGE: a cost with a supplier has exactly one debt whose
      source_cost_id is the cost id; a cost without a supplier has none.
    - COST_DELETE_DISPOSES_DEBT: delete_cost removes the derived debt itself
      before removing the cost.  No store-level cascade is relied on.
    - A newly derived debt always starts with paid_amount = 0.

Failure modes:
    - InvalidAmountError / InvalidCategoryError / ParentScopeError on bad
      input, before any write.
    - CostNotFoundError, ParentNotFoundError, PartnerNotFoundError.
    - OrphanedChildError when the derived debt must go but transactions still
      reference it (REJECT orphan policy), before any write.
    - StoreError on persistence failure; PartialFailureError when atomic
      linkage is disabled and the debt write fails after the cost write.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from ledger_kernel.db.store import LedgerStore
from ledger_kernel.db.types import ZERO, AmountInput, parse_amount
from ledger_kernel.domain.categories import category_label, resolve_category
from ledger_kernel.domain.dtos import CostInfo, ParentInfo, ParentRef, to_cost_info
from ledger_kernel.domain.policy import LedgerPolicy
from ledger_kernel.domain.registry import ParentRegistry
from ledger_kernel.exceptions import CostNotFoundError, ParentScopeError
from ledger_kernel.invariants import LedgerInvariant
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.cost import Cost, ParentKind
from ledger_kernel.models.debt import Debt, DebtType
from ledger_kernel.services._ledger_helpers import (
    check_disposable,
    dispose_debt,
    require_partner,
    write_pair,
)
from ledger_kernel.services.base import BaseService

logger = get_logger("services.debt_linkage")


def derived_debt_notes(parent: ParentInfo, category: str, description: str | None) -> str:
    """Notes written on a cost-derived debt."""
    kind = ParentKind(parent.ref.kind).value.lower()
    return f"Cost on {kind} {parent.name}: {description or category_label(category)}"


class DebtLinkageManager(BaseService[Cost]):
    """
    Maintains costs and their derived PAYABLE debts.

    Contract:
        Every public method validates all input before writing anything and
        returns a CostInfo DTO (or None for deletion).

    Non-goals:
        - Does NOT touch paid_amount of an existing derived debt; only the
          Transaction Poster moves it.
        - Does NOT commit.  LedgerService owns the transaction.
    """

    def __init__(
        self,
        session: Session,
        registry: ParentRegistry,
        store: LedgerStore | None = None,
        policy: LedgerPolicy | None = None,
    ):
        super().__init__(session, store, policy)
        self.registry = registry

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_cost(self, cost_id: UUID) -> Cost:
        cost = self.store.find_by_id(Cost, cost_id)
        if cost is None:
            raise CostNotFoundError(str(cost_id))
        return cost

    def _derived_debt(self, cost_id: UUID) -> Debt | None:
        debts = self.store.find_by_foreign_key(Debt, "source_cost_id", cost_id)
        return debts[0] if debts else None

    def _validate(
        self,
        category: str,
        amount: AmountInput,
        supplier_id: UUID | None,
    ) -> tuple[str, Decimal]:
        parsed = parse_amount(amount)
        code = resolve_category(category, self.policy.extra_cost_categories)
        if supplier_id is not None:
            require_partner(self.store, supplier_id)
        return code, parsed

    # ------------------------------------------------------------------
    # Derived debt writes
    # ------------------------------------------------------------------

    def _insert_debt(self, cost: Cost, parent: ParentInfo, actor_id: UUID) -> Debt:
        debt = Debt(
            id=uuid4(),
            partner_id=cost.supplier_id,
            debt_type=DebtType.PAYABLE.value,
            total_amount=cost.amount,
            paid_amount=ZERO,
            opening_paid_amount=ZERO,
            notes=derived_debt_notes(parent, cost.category, cost.description),
            source_cost_id=cost.id,
            contract_id=parent.contract_id,
            created_by_id=actor_id,
        )
        self.store.insert(debt)
        logger.info(
            "debt_derived",
            extra={
                "debt_id": str(debt.id),
                "source_cost_id": str(cost.id),
                "partner_id": str(cost.supplier_id),
                "total_amount": str(cost.amount),
            },
        )
        return debt

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_cost(
        self,
        parent: ParentRef,
        category: str,
        amount: AmountInput,
        actor_id: UUID,
        supplier_id: UUID | None = None,
        description: str | None = None,
    ) -> CostInfo:
        """
        Record a cost and, when it names a supplier, its PAYABLE debt.

        Args:
            parent: Owning contract or project.
            category: CostCategory code (or a configured extra code).
            amount: Non-negative amount; zero is allowed.
            actor_id: Who records the cost.
            supplier_id: Supplier owed the amount, if any.
            description: Free text; also used in the debt notes.

        Returns:
            CostInfo DTO of the new cost.
        """
        if not isinstance(parent, ParentRef):
            raise ParentScopeError("a contract or project reference is required")
        code, parsed = self._validate(category, amount, supplier_id)
        parent_info = self.registry.get_parent(parent)

        cost = Cost(
            id=uuid4(),
            parent_kind=parent.kind.value,
            contract_id=parent.id if parent.kind == ParentKind.CONTRACT else None,
            project_id=parent.id if parent.kind == ParentKind.PROJECT else None,
            category=code,
            supplier_id=supplier_id,
            amount=parsed,
            description=description,
            created_by_id=actor_id,
        )

        def derive() -> None:
            if supplier_id is not None:
                self._insert_debt(cost, parent_info, actor_id)

        with LogContext.bind(cost_id=str(cost.id)):
            info = write_pair(
                self.store,
                self.policy,
                lambda: to_cost_info(self.store.insert(cost)),
                derive,
                invariant=LedgerInvariant.COST_DEBT_LINKAGE,
                entity_type="cost",
                entity_id=cost.id,
                compensate=lambda: self.store.delete(cost),
            )
            logger.info(
                "cost_created",
                extra={
                    "parent_kind": parent.kind.value,
                    "parent_id": str(parent.id),
                    "category": code,
                    "amount": str(parsed),
                    "has_supplier": supplier_id is not None,
                },
            )
        return info

    def update_cost(
        self,
        cost_id: UUID,
        category: str,
        amount: AmountInput,
        actor_id: UUID,
        supplier_id: UUID | None = None,
        description: str | None = None,
    ) -> CostInfo:
        """
        Replace a cost's editable fields and re-establish its debt linkage.

        The existing derived debt is looked up first; then exactly one of:
            - debt exists, supplier set: debt partner, total and notes follow
              the cost (paid_amount untouched);
              payments already linked keep the supplier they were posted with;
            - debt exists, supplier cleared: debt is deleted (orphan policy);
            - no debt, supplier set: a debt is derived with paid_amount 0;
            - no debt, no supplier: nothing.

        Calling this twice with the same arguments leaves the same state as
        calling it once.
        """
        cost = self._get_cost(cost_id)
        code, parsed = self._validate(category, amount, supplier_id)
        parent_info = self.registry.get_parent(ParentRef(ParentKind(cost.parent_kind), cost.parent_id))
        debt = self._derived_debt(cost.id)
        if debt is not None and supplier_id is None:
            check_disposable(self.store, self.policy, debt)

        def apply_cost() -> CostInfo:
            self.store.update(
                Cost,
                cost.id,
                {
                    "category": code,
                    "amount": parsed,
                    "supplier_id": supplier_id,
                    "description": description,
                    "updated_by_id": actor_id,
                },
            )
            return to_cost_info(cost)

        def sync_debt() -> None:
            if debt is not None and supplier_id is not None:
                self.store.update(
                    Debt,
                    debt.id,
                    {
                        "partner_id": supplier_id,
                        "total_amount": parsed,
                        "notes": derived_debt_notes(parent_info, code, description),
                        "updated_by_id": actor_id,
                    },
                )
                logger.info(
                    "debt_resynced",
                    extra={
                        "debt_id": str(debt.id),
                        "partner_id": str(supplier_id),
                        "total_amount": str(parsed),
                    },
                )
            elif debt is not None:
                dispose_debt(self.store, self.policy, debt)
            elif supplier_id is not None:
                self._insert_debt(cost, parent_info, actor_id)

        with LogContext.bind(cost_id=str(cost.id)):
            info = write_pair(
                self.store,
                self.policy,
                apply_cost,
                sync_debt,
                invariant=LedgerInvariant.COST_DEBT_LINKAGE,
                entity_type="cost",
                entity_id=cost.id,
            )
            logger.info(
                "cost_updated",
                extra={
                    "category": code,
                    "amount": str(parsed),
                    "has_supplier": supplier_id is not None,
                    "had_debt": debt is not None,
                },
            )
        return info

    def delete_cost(self, cost_id: UUID) -> None:
        """
        Delete a cost and, first, its derived debt.

        Raises:
            CostNotFoundError: If the cost does not exist.
            OrphanedChildError: If the derived debt still has transactions
                and the orphan policy is REJECT.
        """
        cost = self._get_cost(cost_id)
        debt = self._derived_debt(cost.id)
        if debt is not None:
            check_disposable(self.store, self.policy, debt)

        def remove_debt() -> None:
            if debt is not None:
                dispose_debt(self.store, self.policy, debt)

        with LogContext.bind(cost_id=str(cost.id)):
            write_pair(
                self.store,
                self.policy,
                remove_debt,
                lambda: self.store.delete(cost),
                invariant=LedgerInvariant.COST_DELETE_DISPOSES_DEBT,
                entity_type="cost",
                entity_id=cost.id,
            )
            logger.info("cost_deleted", extra={"had_debt": debt is not None})

    def get_cost(self, cost_id: UUID) -> CostInfo:
        return to_cost_info(self._get_cost(cost_id))
