"""
Pytest fixtures for the ledger kernel test suite.

Provides:
- Database sessions (SQLite in memory by default, PostgreSQL via DATABASE_URL)
- Partner, contract and project fixtures
- A LedgerService wired to the test session
- Structured log capture

Environment Variables:
- DATABASE_URL: Database URL.  Defaults to an in-memory SQLite database.
"""

import json
import logging
import os
from collections.abc import Generator
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.dtos import ParentRef
from ledger_kernel.domain.policy import LedgerPolicy, OrphanPolicy
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models.parent import Contract, Project
from ledger_kernel.models.partner import Partner, PartnerType
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.ledger_service import LedgerService

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

DEFAULT_DATABASE_URL = "sqlite://"


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.create_cost(...)
            logs = captured_logs()
            assert any(r["message"] == "cost_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Session-scoped DB infrastructure (create engine + tables ONCE per suite)
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session."""
    create_tables()
    yield
    drop_tables()


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    The session joins an outer transaction on a dedicated connection:
    ``session.commit()`` inside the test releases a savepoint and
    ``session.rollback()`` rolls back to it.  At teardown the outer
    transaction is rolled back, undoing ALL data changes made during the
    test.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


@pytest.fixture
def test_actor_id():
    """Actor ID for test operations."""
    return TEST_ACTOR_ID


# =============================================================================
# Registry data
# =============================================================================
#
# Fixtures commit (release their savepoint) so that a rollback issued by
# LedgerService after a failed operation does not discard them.


def _make_partner(session, name: str, partner_type: PartnerType) -> Partner:
    partner = Partner(
        name=name,
        partner_type=partner_type.value,
        created_by_id=TEST_ACTOR_ID,
    )
    session.add(partner)
    session.commit()
    return partner


@pytest.fixture
def supplier(session) -> Partner:
    return _make_partner(session, "Hoa Phat Steel", PartnerType.SUPPLIER)


@pytest.fixture
def other_supplier(session) -> Partner:
    return _make_partner(session, "Dong Tam Bricks", PartnerType.SUPPLIER)


@pytest.fixture
def client(session) -> Partner:
    return _make_partner(session, "Sunrise Residences", PartnerType.CLIENT)


@pytest.fixture
def contract(session, client) -> Contract:
    contract = Contract(
        name="HD-2024-01",
        client_id=client.id,
        total_value=Decimal("1000000"),
        vat_rate=Decimal("10"),
        created_by_id=TEST_ACTOR_ID,
    )
    session.add(contract)
    session.commit()
    return contract


@pytest.fixture
def project(session, contract) -> Project:
    project = Project(
        name="Tower A",
        contract_id=contract.id,
        created_by_id=TEST_ACTOR_ID,
    )
    session.add(project)
    session.commit()
    return project


@pytest.fixture
def contract_ref(contract) -> ParentRef:
    return ParentRef.contract(contract.id)


@pytest.fixture
def project_ref(project) -> ParentRef:
    return ParentRef.project(project.id)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def ledger(session) -> LedgerService:
    """LedgerService with the default policy (REJECT orphans, atomic linkage)."""
    return LedgerService(session)


@pytest.fixture
def cascade_ledger(session) -> LedgerService:
    return LedgerService(session, policy=LedgerPolicy(orphan_policy=OrphanPolicy.CASCADE))


@pytest.fixture
def selector(session) -> LedgerSelector:
    return LedgerSelector(session)
