"""SQL-backed ParentRegistry reading the contracts and projects tables."""

from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.dtos import ParentInfo, ParentRef
from ledger_kernel.exceptions import ParentNotFoundError
from ledger_kernel.models.cost import ParentKind
from ledger_kernel.models.parent import Contract, Project
from ledger_kernel.selectors.base import BaseSelector


class ParentRegistrySelector(BaseSelector[Contract]):
    """ParentRegistry over the local contracts/projects tables."""

    def _contract(self, contract_id: UUID) -> Contract:
        contract = self.session.get(Contract, contract_id)
        if contract is None:
            raise ParentNotFoundError(ParentKind.CONTRACT.value, str(contract_id))
        return contract

    def get_total_value(self, contract_id: UUID) -> Decimal:
        return self._contract(contract_id).total_value

    def get_vat_rate(self, contract_id: UUID) -> Decimal:
        return self._contract(contract_id).vat_rate

    def get_parent(self, parent: ParentRef) -> ParentInfo:
        if parent.kind == ParentKind.CONTRACT:
            contract = self._contract(parent.id)
            return ParentInfo(ref=parent, name=contract.name, contract_id=contract.id)

        project = self.session.get(Project, parent.id)
        if project is None:
            raise ParentNotFoundError(ParentKind.PROJECT.value, str(parent.id))
        return ParentInfo(ref=parent, name=project.name, contract_id=project.contract_id)
