"""
BaseService -- abstract base for all ledger services.

Responsibility:
    Provides the common constructor for every write-side service: the
    caller's SQLAlchemy ``Session``, the LedgerStore wrapping it, and the
    LedgerPolicy in force.

Architecture position:
    Kernel > Services.  Every service in ``ledger_kernel/services/`` that
    performs write operations extends this class.

Invariants enforced:
    Services flush within the caller's transaction and never commit or
    roll back themselves.  LedgerService (the facade) or the test harness
    owns commit/rollback.

Failure modes:
    - If a subclass calls ``session.commit()``, paired writes are no longer
      atomic with the rest of the caller's unit of work.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base
from ledger_kernel.db.store import LedgerStore
from ledger_kernel.domain.policy import DEFAULT_POLICY, LedgerPolicy

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all ledger services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller.  Writes go through
        ``self.store`` which flushes but never commits.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide reporting reads -- those belong in
          ``ledger_kernel/selectors/``.
    """

    def __init__(
        self,
        session: Session,
        store: LedgerStore | None = None,
        policy: LedgerPolicy | None = None,
    ):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
            store: Store to write through (defaults to one over ``session``).
            policy: Ledger policy (defaults to DEFAULT_POLICY).
        """
        self.session = session
        self.store = store if store is not None else LedgerStore(session)
        self.policy = policy if policy is not None else DEFAULT_POLICY
