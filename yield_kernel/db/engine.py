"""
Module: yield_kernel.db.engine
Responsibility: Owns the process-wide engine and session factory, and the
    commit-or-rollback scope every facade operation runs in.
Architecture position: Kernel > DB.  MUST NOT import from services/,
    selectors/ or domain/ at module level; create_tables/drop_tables
    import the mapped classes lazily to populate Base.metadata.

Invariants enforced:
    - On PostgreSQL, connections run at READ COMMITTED and farm rows are
      locked with FOR UPDATE, so writers to one farm queue behind each
      other.
    - On SQLite, an in-memory URL is served by one shared connection
      (StaticPool); otherwise each session would get an empty database.

Failure modes:
    - RuntimeError from any accessor used before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from yield_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _engine_options(url: URL, pool_options: dict[str, Any]) -> dict[str, Any]:
    if url.get_backend_name() != "sqlite":
        return {
            "poolclass": QueuePool,
            "isolation_level": "READ COMMITTED",
            **pool_options,
        }
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the kernel engine and bind a fresh session factory to it.

    Pool arguments only apply to server backends.  Calling this again
    replaces the current engine without disposing it; call reset_engine()
    first when that matters.
    """
    global _engine, _SessionFactory

    url = make_url(database_url)
    pool_options = {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": pool_pre_ping,
        "pool_timeout": pool_timeout,
        "pool_recycle": pool_recycle,
    }
    _engine = create_engine(url, echo=echo, **_engine_options(url, pool_options))
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": url.get_backend_name(), "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    One transaction: commit if the block completes, roll back if it raises.

    The exception is re-raised after rollback.  The session is always
    closed on exit.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.debug("transaction_rolled_back")
        raise
    finally:
        session.close()


def _metadata():
    from yield_kernel.db.base import Base
    import yield_kernel.models  # noqa: F401
    import yield_kernel.services.sequence_service  # noqa: F401

    return Base.metadata


def create_tables(engine: Engine | None = None) -> None:
    """Create every kernel table that does not exist yet."""
    _metadata().create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """Drop every kernel table.  Tests only."""
    _metadata().drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
