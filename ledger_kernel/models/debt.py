"""
Module: ledger_kernel.models.debt
Responsibility: ORM persistence for receivables and payables.  A debt is
    either entered manually or derived from a supplier cost (source_cost_id
    set).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - source_cost_id is unique: one cost derives at most one debt
      (uq_debt_source_cost).
    - total_amount >= 0.
    - paid_amount is NOT clamped to total_amount; overpayment is allowed.

Failure modes:
    - IntegrityError (as StoreError) on a second debt for the same cost.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class DebtType(str, Enum):
    """Direction of a debt.

    Contract: RECEIVABLE is owed to us by a client; PAYABLE is owed by us to
    a supplier.
    """

    RECEIVABLE = "RECEIVABLE"
    PAYABLE = "PAYABLE"


class Debt(TrackedBase):
    """
    Amount owed between the company and a partner.

    Contract:
        paid_amount == opening_paid_amount + sum of linked transaction
        amounts.  Only LedgerStore.adjust_paid_amount changes paid_amount
        after creation.
    """

    __tablename__ = "debts"

    __table_args__ = (
        UniqueConstraint("source_cost_id", name="uq_debt_source_cost"),
        CheckConstraint("total_amount >= 0", name="ck_debt_total_nonneg"),
        CheckConstraint("opening_paid_amount >= 0", name="ck_debt_opening_nonneg"),
        Index("idx_debt_partner", "partner_id"),
        Index("idx_debt_type", "debt_type"),
        Index("idx_debt_contract", "contract_id"),
    )

    partner_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("partners.id"),
        nullable=False,
    )

    debt_type: Mapped[DebtType] = mapped_column(
        String(20),
        nullable=False,
    )

    total_amount: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    paid_amount: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    # Amount already settled when a manual debt was entered
    opening_paid_amount: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    due_date: Mapped[date | None] = mapped_column(
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    # Set only for system-derived debts
    source_cost_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("costs.id"),
        nullable=True,
    )

    contract_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=True,
    )

    @property
    def is_derived(self) -> bool:
        return self.source_cost_id is not None

    def __repr__(self) -> str:
        return f"<Debt {self.debt_type} {self.paid_amount}/{self.total_amount}>"
