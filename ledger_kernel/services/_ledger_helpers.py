"""
Shared helpers for ledger write flows.

Used by the Debt Linkage Manager, Transaction Poster and Debt Service for
the pieces they have in common: running a primary write together with its
derived ledger write, disposing of a debt under the orphan policy, and
looking up referenced partners.

Architecture: Kernel > Services.  Imports only from db/, models/, domain/.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from ledger_kernel.db.store import LedgerStore
from ledger_kernel.domain.policy import LedgerPolicy, OrphanPolicy
from ledger_kernel.exceptions import (
    OrphanedChildError,
    PartialFailureError,
    PartnerNotFoundError,
    StoreError,
)
from ledger_kernel.invariants import LedgerInvariant
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.debt import Debt
from ledger_kernel.models.partner import Partner
from ledger_kernel.models.transaction import Transaction

logger = get_logger("services.linkage")

T = TypeVar("T")


def write_pair(
    store: LedgerStore,
    policy: LedgerPolicy,
    first: Callable[[], T],
    second: Callable[[], Any],
    *,
    invariant: LedgerInvariant,
    entity_type: str,
    entity_id: UUID,
    compensate: Callable[[], Any] | None = None,
) -> T:
    """Run two dependent writes under the configured linkage policy.

    ``first`` is the write the caller asked for; ``second`` keeps the
    ledger consistent with it.

    - atomic_linkage with savepoints: both run inside one SAVEPOINT.
    - atomic_linkage without savepoints: on StoreError from ``second`` the
      optional ``compensate`` undoes ``first`` and the error propagates.
    - atomic_linkage off: ``first`` is kept and PartialFailureError (carrying
      the result of ``first``) names the violated invariant.

    Without savepoints a failed flush in ``second`` rolls back the whole
    transaction, ``first`` included.  Nothing is left to compensate or keep
    in that case, so the original StoreError propagates under either policy.

    Returns the result of ``first``.
    """
    if policy.atomic_linkage and store.supports_savepoints:
        with store.atomic():
            result = first()
            second()
        return result

    result = first()
    try:
        with store.atomic():
            second()
    except StoreError as exc:
        log_extra = {
            "invariant": invariant.value,
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "reason": exc.reason,
        }
        if store.rolled_back:
            logger.warning("paired_write_rolled_back", extra=log_extra)
            raise
        if policy.atomic_linkage:
            if compensate is not None:
                _compensate(compensate, log_extra)
            raise

        logger.warning("partial_failure", extra=log_extra)
        raise PartialFailureError(
            invariant.value,
            entity_type,
            str(entity_id),
            exc.reason,
            result=result,
        ) from exc
    return result


def _compensate(compensate: Callable[[], Any], log_extra: dict[str, Any]) -> None:
    """Undo the primary write; a failed undo is logged and the caller re-raises the original error."""
    try:
        compensate()
    except StoreError as undo_exc:
        logger.error(
            "paired_write_compensation_failed",
            extra={**log_extra, "compensation_reason": undo_exc.reason},
        )
        return
    logger.warning("paired_write_compensated", extra=log_extra)


def dispose_debt(store: LedgerStore, policy: LedgerPolicy, debt: Debt) -> int:
    """
    Delete a debt, honouring the orphan policy for its transactions.

    Returns:
        Number of transactions removed along with the debt (CASCADE only).

    Raises:
        OrphanedChildError: Under REJECT when transactions reference the debt.
    """
    linked = store.find_by_foreign_key(Transaction, "debt_id", debt.id)
    if linked and policy.orphan_policy == OrphanPolicy.REJECT:
        raise OrphanedChildError(str(debt.id), len(linked))

    for txn in linked:
        store.delete(txn)
    store.delete(debt)

    logger.info(
        "debt_deleted",
        extra={
            "debt_id": str(debt.id),
            "source_cost_id": str(debt.source_cost_id) if debt.source_cost_id else None,
            "cascaded_transactions": len(linked),
        },
    )
    return len(linked)


def check_disposable(store: LedgerStore, policy: LedgerPolicy, debt: Debt) -> None:
    """Raise OrphanedChildError before any write if ``debt`` cannot be deleted."""
    if policy.orphan_policy != OrphanPolicy.REJECT:
        return
    count = store.count_by_foreign_key(Transaction, "debt_id", debt.id)
    if count:
        raise OrphanedChildError(str(debt.id), count)


def require_partner(store: LedgerStore, partner_id: UUID) -> Partner:
    partner = store.find_by_id(Partner, partner_id)
    if partner is None:
        raise PartnerNotFoundError(str(partner_id))
    return partner
