"""
Module: ledger_kernel.db.store
Responsibility: Thin persistence gateway used by the ledger services.  Every
    write the Debt Linkage Manager, Transaction Poster and Debt Service make
    goes through LedgerStore so that persistence failures surface as a single
    typed error and paired writes share one unit of work.
Architecture position: Kernel > DB.  May import from db/base.py, models/ and
    exceptions.  MUST NOT import from services/, selectors/ or domain/.

Invariants enforced:
    - paid_amount is only changed by adjust_paid_amount(), a single
      UPDATE ... SET paid_amount = paid_amount + :delta statement, so two
      close-together writers never lose an update.
    - Decrements can be floored at zero inside the same statement.
    - The store flushes and never commits.  The caller owns the transaction.

Failure modes:
    - StoreError wrapping any SQLAlchemyError (constraint violation,
      connectivity, serialization failure).
    - DebtNotFoundError from adjust_paid_amount when the debt row is gone.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from ledger_kernel.db.base import Base
from ledger_kernel.db.types import ZERO
from ledger_kernel.exceptions import DebtNotFoundError, StoreError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.debt import Debt

logger = get_logger("db.store")

ModelType = TypeVar("ModelType", bound=Base)


def _entity_name(model: type[Base] | Base) -> str:
    cls = model if isinstance(model, type) else type(model)
    return cls.__tablename__


class LedgerStore:
    """
    Record-level persistence for partners, costs, debts and transactions.

    Contract:
        Wraps a caller-owned Session.  Writes are flushed immediately so that
        constraint violations are reported at the call site, not at commit.

    Guarantees:
        - Every SQLAlchemyError is re-raised as StoreError.
        - atomic() gives all-or-nothing semantics for paired writes when
          supports_savepoints is True.

    Non-goals:
        - Does NOT commit or roll back the outer transaction.
        - Does NOT validate business rules; that is the services' job.
    """

    def __init__(self, session: Session, supports_savepoints: bool = True):
        self.session = session
        self.supports_savepoints = supports_savepoints

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Run the enclosed writes as one unit.

        Uses a SAVEPOINT when the backend supports nesting.  Otherwise the
        block runs in the surrounding transaction and callers are expected
        to compensate on failure (see supports_savepoints).
        """
        if not self.supports_savepoints:
            yield
            return
        try:
            nested = self.session.begin_nested()
        except SQLAlchemyError as exc:
            raise StoreError("begin", "savepoint", str(exc)) from exc
        with nested:
            yield

    @property
    def rolled_back(self) -> bool:
        """True after a failed flush has rolled back the surrounding transaction."""
        return not self.session.is_active

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    def insert(self, entity: ModelType) -> ModelType:
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError("insert", _entity_name(entity), str(exc)) from exc
        return entity

    def update(
        self,
        model: type[ModelType],
        entity_id: UUID,
        patch: Mapping[str, Any],
    ) -> ModelType | None:
        """
        Apply ``patch`` to the row with ``entity_id``.

        Returns:
            The updated entity, or None when no such row exists.
        """
        entity = self.find_by_id(model, entity_id)
        if entity is None:
            return None
        try:
            for key, value in patch.items():
                setattr(entity, key, value)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError("update", _entity_name(model), str(exc)) from exc
        return entity

    def delete(self, entity: Base) -> None:
        try:
            self.session.delete(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError("delete", _entity_name(entity), str(exc)) from exc

    def find_by_id(self, model: type[ModelType], entity_id: UUID) -> ModelType | None:
        try:
            return self.session.get(model, entity_id)
        except SQLAlchemyError as exc:
            raise StoreError("find", _entity_name(model), str(exc)) from exc

    def find_by_foreign_key(
        self,
        model: type[ModelType],
        column: str,
        value: Any,
    ) -> list[ModelType]:
        """Return every row of ``model`` whose ``column`` equals ``value``."""
        stmt = select(model).where(getattr(model, column) == value)
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError("find", _entity_name(model), str(exc)) from exc

    def count_by_foreign_key(self, model: type[Base], column: str, value: Any) -> int:
        stmt = select(func.count()).select_from(model).where(
            getattr(model, column) == value
        )
        try:
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as exc:
            raise StoreError("count", _entity_name(model), str(exc)) from exc

    # ------------------------------------------------------------------
    # Paid amount
    # ------------------------------------------------------------------

    def adjust_paid_amount(
        self,
        debt_id: UUID,
        delta: Decimal,
        floor_at_zero: bool = False,
    ) -> Decimal:
        """
        Atomically add ``delta`` to a debt's paid_amount.

        Increments are never clamped to total_amount.  With
        ``floor_at_zero`` the result is max(0, paid_amount + delta).

        Returns:
            The paid_amount after the update.

        Raises:
            DebtNotFoundError: If no debt has ``debt_id``.
            StoreError: On persistence failure.
        """
        new_value = Debt.paid_amount + delta
        if floor_at_zero:
            new_value = case((new_value < ZERO, ZERO), else_=new_value)

        stmt = (
            update(Debt)
            .where(Debt.id == debt_id)
            .values(paid_amount=new_value)
            .execution_options(synchronize_session=False)
        )
        try:
            self.session.flush()
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                raise DebtNotFoundError(str(debt_id))

            # The UPDATE bypassed the ORM; drop any stale cached value.
            cached = self.session.identity_map.get(identity_key(Debt, debt_id))
            if cached is not None:
                self.session.expire(cached, ["paid_amount"])

            paid = self.session.execute(
                select(Debt.paid_amount).where(Debt.id == debt_id)
            ).scalar_one()
        except SQLAlchemyError as exc:
            raise StoreError("adjust_paid_amount", "debts", str(exc)) from exc

        logger.info(
            "paid_amount_adjusted",
            extra={
                "debt_id": str(debt_id),
                "delta": str(delta),
                "floor_at_zero": floor_at_zero,
                "paid_amount": str(paid),
            },
        )
        return paid
