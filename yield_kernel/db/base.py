"""
Module: yield_kernel.db.base
Responsibility: Declarative base for every yield kernel table, and the
    abstract timestamped base most models extend.
Architecture position: Kernel > DB.  Lowest-level import target in the
    kernel; MUST NOT import from models/, services/, selectors/ or domain/.

Invariants enforced:
    - Surrogate keys: every row has a uuid4 ``id``.  Natural keys (farm
      id, farm + investor, nonce) are UNIQUE constraints on the models.
    - ``int`` annotations map to BigInteger and are reserved for
      identifiers and counters.  Amounts, share counts and the yield
      index are declared explicitly as ``UIntString`` (db/types.py).
    - Every timestamp column reads back timezone-aware in UTC (UTCDateTime).
    - Row timestamps are storage metadata filled by the database; the
      logical time of a revenue event or payout comes from the Clock.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from yield_kernel.db.types import UTCDateTime, UUIDString


class Base(DeclarativeBase):
    """Declarative base: uuid4 primary key plus the shared type map."""

    type_annotation_map: ClassVar[dict] = {
        datetime: UTCDateTime(),
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TimestampedBase(Base):
    """Adds database-maintained created_at / updated_at columns."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
