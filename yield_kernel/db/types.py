"""
Module: yield_kernel.db.types
Responsibility: Portable column types: UUIDs as strings, unbounded
    non-negative integers as decimal strings, and UTC timestamps.
Architecture position: Kernel > DB.  Imported by db/base.py and models/.
    MUST NOT import from any other kernel layer.

Invariants enforced:
    - No floats and no fixed-width integers for amounts.  Revenue, share
      counts, and the scaled yield index are arbitrary-precision Python
      ints persisted as decimal strings.
    - Negative values and non-int values are rejected on bind.

Failure modes:
    - TypeError on bind of a non-int (bool included).
    - ValueError on bind of a negative int.
"""

from datetime import timezone
from uuid import UUID

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator

# Wide enough for 2**256 with room to spare
UINT_STRING_LENGTH = 80


class UUIDString(TypeDecorator):
    """UUID stored as its 36-character string form."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return UUID(value) if value is not None else None


class UIntString(TypeDecorator):
    """
    Non-negative arbitrary-precision integer stored as a decimal string.

    Guarantees:
        - process_bind_param: int -> str (validated non-negative).
        - process_result_value: str -> int.
        - Round-trips exactly on every backend, including SQLite, whose
          NUMERIC affinity would otherwise degrade large values to REAL.
    """

    impl = String(UINT_STRING_LENGTH)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"UIntString requires int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"UIntString cannot store negative value {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always reads back in UTC.

    SQLite stores DateTime(timezone=True) without an offset and returns
    naive values.  Aware values are converted to UTC on bind; naive
    values are taken to be UTC already, on bind and on read.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
