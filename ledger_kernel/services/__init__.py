"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.debt_linkage import DebtLinkageManager
from ledger_kernel.services.debt_service import DebtService
from ledger_kernel.services.ledger_service import LedgerService
from ledger_kernel.services.partner_service import PartnerService
from ledger_kernel.services.transaction_poster import TransactionPoster

__all__ = [
    "DebtLinkageManager",
    "DebtService",
    "LedgerService",
    "PartnerService",
    "TransactionPoster",
]
