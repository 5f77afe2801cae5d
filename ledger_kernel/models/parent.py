"""
Module: ledger_kernel.models.parent
Responsibility: ORM persistence for the registry entities that own costs:
    contracts (signed with a client, carrying a total value and VAT rate) and
    projects (delivery work under a contract).
Architecture position: Kernel > Models.  May import from db/base.py only.

The ledger only reads these rows: contract total value for profitability and
collection progress, and parent names for derived debt notes.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class Contract(TrackedBase):
    """Signed agreement with a client."""

    __tablename__ = "contracts"

    __table_args__ = (
        CheckConstraint("total_value >= 0", name="ck_contract_total_value_nonneg"),
        CheckConstraint("vat_rate >= 0", name="ck_contract_vat_rate_nonneg"),
        Index("idx_contract_client", "client_id"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("partners.id"),
        nullable=False,
    )

    # Contract value including VAT
    total_value: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    # Percent, e.g. 10 for 10%
    vat_rate: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    signed_date: Mapped[date | None] = mapped_column(
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Contract {self.name}: {self.total_value}>"


class Project(TrackedBase):
    """Delivery work carried out under a contract."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_contract", "contract_id"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    contract_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Project {self.name}>"
