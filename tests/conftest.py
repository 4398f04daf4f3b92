"""
Pytest fixtures for the yield kernel test suite.

Provides:
- A fresh in-memory SQLite database per test (or DATABASE_URL, if set)
- Kernel services bound to a test session
- A YieldDistributor facade with a deterministic clock
- Captured structured logs

Environment Variables:
- DATABASE_URL: optional PostgreSQL URL.  Tables are dropped after each
  test when it is set.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from yield_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from yield_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from yield_kernel.domain.clock import DeterministicClock
from yield_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from yield_kernel.services.accrual_store import InvestorAccrualStore
from yield_kernel.services.checkpoint_engine import CheckpointEngine
from yield_kernel.services.farm_ledger import FarmLedgerService
from yield_kernel.services.oracle_authority import OracleAuthorityService
from yield_kernel.services.revenue_ingestion import RevenueIngestionService
from yield_kernel.services.sequence_service import SequenceService
from yield_kernel.services.settlement import PaymentOutbox
from yield_kernel.services.yield_distributor import YieldDistributor

ORACLE = "ST1ORACLE"
INVESTOR = "ST1INVESTOR"
HACKER = "ST1HACKER"

DEFAULT_TEST_URL = "sqlite:///:memory:"


# --- logging ---------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _debug_logging():
    """Route kernel logs, DEBUG and up, to a throwaway stream."""
    reset_logging()
    configure_logging(level="DEBUG", stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture yield_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, distributor):
            distributor.register_farm(1, 1000)
            logs = captured_logs()
            assert any(r["message"] == "farm_registered" for r in logs)
    """
    buffer = StringIO()
    capture = logging.StreamHandler(buffer)
    capture.setFormatter(StructuredFormatter())
    kernel_logger = logging.getLogger("yield_kernel")
    kernel_logger.addHandler(capture)

    def records() -> list[dict]:
        return [json.loads(line) for line in buffer.getvalue().splitlines() if line]

    yield records

    kernel_logger.removeHandler(capture)


# --- database fixtures -------------------------------------------------------


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_TEST_URL)


@pytest.fixture
def engine():
    """Fresh schema per test, with immutability listeners on."""
    url = get_database_url()
    eng = init_engine_from_url(url)
    create_tables(eng)
    register_immutability_listeners()
    with session_scope(get_session_factory()) as session:
        SequenceService(session).initialize_sequences()
    yield eng
    if url != DEFAULT_TEST_URL:
        unregister_immutability_listeners()
        drop_tables(eng)
        register_immutability_listeners()
    reset_engine()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return get_session_factory()


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """A session the test owns; rolled back at teardown."""
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


# --- service fixtures (flush-only, bound to ``session``) ---------------------


@pytest.fixture
def farm_ledger(session) -> FarmLedgerService:
    return FarmLedgerService(session)


@pytest.fixture
def accrual_store(session) -> InvestorAccrualStore:
    return InvestorAccrualStore(session)


@pytest.fixture
def sequence_service(session) -> SequenceService:
    return SequenceService(session)


@pytest.fixture
def oracle_authority(session, deterministic_clock) -> OracleAuthorityService:
    service = OracleAuthorityService(session, deterministic_clock)
    service.initialize(ORACLE)
    return service


@pytest.fixture
def outbox(session, deterministic_clock) -> PaymentOutbox:
    return PaymentOutbox(session, deterministic_clock)


@pytest.fixture
def revenue_ingestion(
    session, farm_ledger, oracle_authority, sequence_service, deterministic_clock
) -> RevenueIngestionService:
    return RevenueIngestionService(
        session, farm_ledger, oracle_authority, sequence_service, deterministic_clock
    )


@pytest.fixture
def checkpoint_engine(session, farm_ledger, accrual_store, outbox) -> CheckpointEngine:
    return CheckpointEngine(session, farm_ledger, accrual_store, outbox)


# --- facade fixtures (each call is its own transaction) ----------------------


class RecordingSettlement:
    """PaymentSettlement double that remembers every instruction."""

    def __init__(self):
        self.settled = []

    def settle(self, instruction) -> None:
        self.settled.append(instruction)


@pytest.fixture
def settlement() -> RecordingSettlement:
    return RecordingSettlement()


@pytest.fixture
def distributor(session_factory, deterministic_clock, settlement) -> YieldDistributor:
    """Facade with ST1ORACLE as the current oracle."""
    facade = YieldDistributor(
        session_factory, clock=deterministic_clock, settlement=settlement
    )
    assert facade.initialize_oracle(ORACLE).ok
    return facade
