"""Database layer - engine, base classes, column types, immutability listeners."""

from yield_kernel.db.base import Base, TimestampedBase
from yield_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from yield_kernel.db.types import UIntString, UTCDateTime, UUIDString

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TimestampedBase",
    "UUIDString",
    "UIntString",
    "UTCDateTime",
]
