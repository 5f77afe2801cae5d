"""
Module: ledger_kernel.models.partner
Responsibility: ORM persistence for the clients and suppliers the company
    deals with.  Partners are the counterparty of every debt and transaction
    and the supplier of a cost.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Failure modes:
    - IntegrityError (as StoreError) when a referenced partner row is
      deleted while costs, debts or transactions still point at it.
"""

from enum import Enum

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class PartnerType(str, Enum):
    """Classification of partners.

    Contract: A CLIENT is billed (receivables); a SUPPLIER is paid (payables).
    """

    CLIENT = "Client"
    SUPPLIER = "Supplier"


class Partner(TrackedBase):
    """
    Client or supplier referenced by costs, debts and transactions.

    Non-goals:
        - Partner deletion is not handled by the ledger kernel.
    """

    __tablename__ = "partners"

    __table_args__ = (
        Index("idx_partner_type", "partner_type"),
        Index("idx_partner_name", "name"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    partner_type: Mapped[PartnerType] = mapped_column(
        String(20),
        nullable=False,
    )

    phone: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    address: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    # Tax identification
    tax_code: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Partner {self.name} ({self.partner_type})>"
