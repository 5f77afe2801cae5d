"""
Immutable data transfer objects returned by ledger services and selectors.

Callers never receive ORM instances; every public read or write returns one
of these frozen dataclasses.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from ledger_kernel.exceptions import ParentScopeError
from ledger_kernel.models.cost import ParentKind
from ledger_kernel.models.debt import DebtType
from ledger_kernel.models.partner import PartnerType
from ledger_kernel.models.transaction import TransactionType


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"


# Default for optional update arguments: UNSET leaves the field alone, None clears it.
UNSET: Any = _Unset()


@dataclass(frozen=True)
class ParentRef:
    """Reference to the contract or project that owns a cost."""

    kind: ParentKind
    id: UUID

    @classmethod
    def contract(cls, contract_id: UUID) -> "ParentRef":
        return cls(ParentKind.CONTRACT, contract_id)

    @classmethod
    def project(cls, project_id: UUID) -> "ParentRef":
        return cls(ParentKind.PROJECT, project_id)


def parent_ref(contract_id: UUID | None = None, project_id: UUID | None = None) -> ParentRef:
    """Build a ParentRef from exactly one of a contract id or a project id."""
    if (contract_id is None) == (project_id is None):
        raise ParentScopeError("exactly one of contract_id or project_id is required")
    if contract_id is not None:
        return ParentRef.contract(contract_id)
    return ParentRef.project(project_id)


@dataclass(frozen=True)
class ParentInfo:
    """Registry view of a contract or project."""

    ref: ParentRef
    name: str
    contract_id: UUID | None = None


@dataclass(frozen=True)
class PartnerInfo:
    id: UUID
    name: str
    partner_type: PartnerType
    phone: str | None
    address: str | None
    tax_code: str | None


@dataclass(frozen=True)
class CostInfo:
    id: UUID
    parent: ParentRef
    category: str
    amount: Decimal
    supplier_id: UUID | None
    description: str | None

    @property
    def has_supplier(self) -> bool:
        return self.supplier_id is not None


@dataclass(frozen=True)
class DebtInfo:
    """
    Immutable view of a debt.

    paid_amount may exceed total_amount; remaining is then negative.
    """

    id: UUID
    partner_id: UUID
    debt_type: DebtType
    total_amount: Decimal
    paid_amount: Decimal
    opening_paid_amount: Decimal
    due_date: date | None
    notes: str | None
    source_cost_id: UUID | None
    contract_id: UUID | None

    @property
    def is_derived(self) -> bool:
        """True for debts generated from a supplier cost."""
        return self.source_cost_id is not None

    @property
    def remaining(self) -> Decimal:
        return self.total_amount - self.paid_amount


@dataclass(frozen=True)
class TransactionInfo:
    id: UUID
    transaction_type: TransactionType
    partner_id: UUID
    amount: Decimal
    transaction_date: date
    description: str | None
    debt_id: UUID | None
    contract_id: UUID | None
    created_by_id: UUID


# ---------------------------------------------------------------------------
# Row -> DTO conversion (accepts ORM instances or any attribute-bearing row)
# ---------------------------------------------------------------------------


def to_partner_info(row) -> PartnerInfo:
    return PartnerInfo(
        id=row.id,
        name=row.name,
        partner_type=PartnerType(row.partner_type),
        phone=row.phone,
        address=row.address,
        tax_code=row.tax_code,
    )


def to_cost_info(row) -> CostInfo:
    kind = ParentKind(row.parent_kind)
    parent_id = row.contract_id if kind == ParentKind.CONTRACT else row.project_id
    return CostInfo(
        id=row.id,
        parent=ParentRef(kind, parent_id),
        category=row.category,
        amount=row.amount,
        supplier_id=row.supplier_id,
        description=row.description,
    )


def to_debt_info(row) -> DebtInfo:
    return DebtInfo(
        id=row.id,
        partner_id=row.partner_id,
        debt_type=DebtType(row.debt_type),
        total_amount=row.total_amount,
        paid_amount=row.paid_amount,
        opening_paid_amount=row.opening_paid_amount,
        due_date=row.due_date,
        notes=row.notes,
        source_cost_id=row.source_cost_id,
        contract_id=row.contract_id,
    )


def to_transaction_info(row) -> TransactionInfo:
    return TransactionInfo(
        id=row.id,
        transaction_type=TransactionType(row.transaction_type),
        partner_id=row.partner_id,
        amount=row.amount,
        transaction_date=row.transaction_date,
        description=row.description,
        debt_id=row.debt_id,
        contract_id=row.contract_id,
        created_by_id=row.created_by_id,
    )
