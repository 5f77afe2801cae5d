"""Domain models for the ledger kernel."""

from ledger_kernel.models.cost import Cost, ParentKind
from ledger_kernel.models.debt import Debt, DebtType
from ledger_kernel.models.parent import Contract, Project
from ledger_kernel.models.partner import Partner, PartnerType
from ledger_kernel.models.transaction import Transaction, TransactionType

__all__ = [
    "Contract",
    "Cost",
    "Debt",
    "DebtType",
    "ParentKind",
    "Partner",
    "PartnerType",
    "Project",
    "Transaction",
    "TransactionType",
]
