"""
Service layer for Partner operations.

Manages the clients and suppliers referenced by costs, debts and
transactions.  Returns PartnerInfo DTOs instead of ORM entities.
"""

from uuid import UUID, uuid4

from sqlalchemy import select

from ledger_kernel.domain.dtos import UNSET, PartnerInfo, to_partner_info
from ledger_kernel.exceptions import LedgerValidationError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.partner import Partner, PartnerType
from ledger_kernel.services._ledger_helpers import require_partner
from ledger_kernel.services.base import BaseService

logger = get_logger("services.partner_service")


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise LedgerValidationError("name", "partner name is required")
    return cleaned


def _resolve_partner_type(partner_type: PartnerType | str) -> PartnerType:
    try:
        return PartnerType(partner_type)
    except ValueError:
        raise LedgerValidationError(
            "partner_type", f"unknown partner type '{partner_type}'"
        ) from None


class PartnerService(BaseService[Partner]):
    """
    Service for managing partners.

    Non-goals:
        - Partner deletion; debts and transactions keep their partner.
    """

    def get_by_id(self, partner_id: UUID) -> PartnerInfo:
        """
        Get partner by ID.

        Raises:
            PartnerNotFoundError: If partner doesn't exist.
        """
        return to_partner_info(require_partner(self.store, partner_id))

    def list_by_type(self, partner_type: PartnerType | str) -> list[PartnerInfo]:
        """List partners of one type, ordered by name."""
        resolved = _resolve_partner_type(partner_type)
        stmt = (
            select(Partner)
            .where(Partner.partner_type == resolved.value)
            .order_by(Partner.name)
        )
        partners = self.session.execute(stmt).scalars().all()
        return [to_partner_info(p) for p in partners]

    def create_partner(
        self,
        name: str,
        partner_type: PartnerType | str,
        actor_id: UUID,
        phone: str | None = None,
        address: str | None = None,
        tax_code: str | None = None,
    ) -> PartnerInfo:
        """
        Create a new partner.

        Args:
            name: Display name (required, surrounding whitespace dropped).
            partner_type: Client or Supplier.
            actor_id: Who creates the partner.
            phone: Optional phone number.
            address: Optional address.
            tax_code: Optional tax identification number.

        Returns:
            Created PartnerInfo DTO.
        """
        partner = Partner(
            id=uuid4(),
            name=_clean_name(name),
            partner_type=_resolve_partner_type(partner_type).value,
            phone=phone,
            address=address,
            tax_code=tax_code,
            created_by_id=actor_id,
        )
        self.store.insert(partner)
        logger.info(
            "partner_created",
            extra={"partner_id": str(partner.id), "partner_type": partner.partner_type},
        )
        return to_partner_info(partner)

    def update_partner(
        self,
        partner_id: UUID,
        actor_id: UUID,
        name: str | None = None,
        phone: str | None = UNSET,
        address: str | None = UNSET,
        tax_code: str | None = UNSET,
    ) -> PartnerInfo:
        """
        Update partner details.

        Note: partner_type cannot be changed.  Only provided fields change;
        None clears phone, address or tax_code.
        """
        partner = require_partner(self.store, partner_id)

        patch: dict = {"updated_by_id": actor_id}
        if name is not None:
            patch["name"] = _clean_name(name)
        if phone is not UNSET:
            patch["phone"] = phone
        if address is not UNSET:
            patch["address"] = address
        if tax_code is not UNSET:
            patch["tax_code"] = tax_code

        self.store.update(Partner, partner.id, patch)
        logger.info("partner_updated", extra={"partner_id": str(partner.id)})
        return to_partner_info(partner)
