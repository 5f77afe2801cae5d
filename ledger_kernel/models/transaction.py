"""
Module: ledger_kernel.models.transaction
Responsibility: ORM persistence for money received from clients and paid to
    suppliers.  A transaction linked to a debt contributes its amount to the
    debt's paid_amount.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount > 0 (ck_transaction_amount_positive).
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class TransactionType(str, Enum):
    """Direction of a cash movement."""

    RECEIPT = "RECEIPT"
    PAYMENT = "PAYMENT"


class Transaction(TrackedBase):
    """Cash receipt or payment, optionally settling a debt."""

    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        Index("idx_transaction_debt", "debt_id"),
        Index("idx_transaction_partner", "partner_id"),
        Index("idx_transaction_contract", "contract_id"),
        Index("idx_transaction_date", "transaction_date"),
    )

    transaction_type: Mapped[TransactionType] = mapped_column(
        String(20),
        nullable=False,
    )

    partner_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("partners.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    transaction_date: Mapped[date] = mapped_column(
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    debt_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("debts.id"),
        nullable=True,
    )

    contract_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.transaction_type} {self.amount} on {self.transaction_date}>"
