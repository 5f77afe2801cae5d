"""
Contract/Project registry interface.

Contracts and projects are owned outside the ledger.  The ledger only needs
a contract's total value and a parent's display name, and reads both
through this protocol.
"""

from decimal import Decimal
from typing import Protocol
from uuid import UUID

from ledger_kernel.domain.dtos import ParentInfo, ParentRef


class ParentRegistry(Protocol):
    def get_total_value(self, contract_id: UUID) -> Decimal:
        """Contract value including VAT.  Raises ParentNotFoundError."""
        ...

    def get_vat_rate(self, contract_id: UUID) -> Decimal:
        """VAT percent of a contract.  Raises ParentNotFoundError."""
        ...

    def get_parent(self, parent: ParentRef) -> ParentInfo:
        """Resolve a cost parent.  Raises ParentNotFoundError."""
        ...
