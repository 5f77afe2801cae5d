"""
Module: ledger_kernel.models.cost
Responsibility: ORM persistence for costs recorded against a contract or a
    project.  A cost that names a supplier is the source of exactly one
    system-derived PAYABLE debt.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Exactly one parent: contract_id XOR project_id, matching parent_kind
      (ck_cost_single_parent).
    - amount >= 0 (ck_cost_amount_nonneg).  Zero-amount costs are valid.

Failure modes:
    - IntegrityError (as StoreError) on a parent-scope or amount violation
      that slipped past service validation.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class ParentKind(str, Enum):
    """Which registry entity owns a cost."""

    CONTRACT = "CONTRACT"
    PROJECT = "PROJECT"


class Cost(TrackedBase):
    """
    Expense incurred on a contract or project.

    Contract:
        The derived debt (if any) is located by Debt.source_cost_id, never
        by a pointer on the cost itself.

    Non-goals:
        - No ON DELETE CASCADE.  The Debt Linkage Manager removes the derived
          debt before removing the cost.
    """

    __tablename__ = "costs"

    __table_args__ = (
        CheckConstraint(
            "(parent_kind = 'CONTRACT' AND contract_id IS NOT NULL AND project_id IS NULL)"
            " OR (parent_kind = 'PROJECT' AND project_id IS NOT NULL AND contract_id IS NULL)",
            name="ck_cost_single_parent",
        ),
        CheckConstraint("amount >= 0", name="ck_cost_amount_nonneg"),
        Index("idx_cost_contract", "contract_id"),
        Index("idx_cost_project", "project_id"),
        Index("idx_cost_supplier", "supplier_id"),
    )

    parent_kind: Mapped[ParentKind] = mapped_column(
        String(20),
        nullable=False,
    )

    contract_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=True,
    )

    project_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=True,
    )

    # CostCategory code (or a configured extra code)
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    supplier_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("partners.id"),
        nullable=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    @property
    def parent_id(self) -> UUID:
        """Id of the owning contract or project."""
        if self.parent_kind == ParentKind.CONTRACT:
            return self.contract_id
        return self.project_id

    def __repr__(self) -> str:
        return f"<Cost {self.category}: {self.amount}>"
