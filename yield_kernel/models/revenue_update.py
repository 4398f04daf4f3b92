"""
Module: yield_kernel.models.revenue_update
Responsibility: Append-only log of accepted revenue submissions.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - nonce is unique and allocated by SequenceService inside the same
      transaction as the row, so nonces are gap-free and never reused.
    - Rows are immutable once flushed (db/immutability.py).
"""

from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yield_kernel.db.base import TimestampedBase
from yield_kernel.db.types import UIntString, UTCDateTime


class RevenueUpdate(TimestampedBase):
    """One accepted production reading and the revenue it credited."""

    __tablename__ = "revenue_updates"

    __table_args__ = (
        UniqueConstraint("nonce", name="uq_revenue_update_nonce"),
        Index("idx_revenue_update_farm", "farm_id"),
    )

    nonce: Mapped[int] = mapped_column(BigInteger, nullable=False)

    farm_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("farms.farm_id"),
        nullable=False,
    )

    kwh_produced: Mapped[int] = mapped_column(UIntString(), nullable=False)

    price_per_kwh: Mapped[int] = mapped_column(UIntString(), nullable=False)

    # kwh_produced * price_per_kwh
    revenue: Mapped[int] = mapped_column(UIntString(), nullable=False)

    recorded_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<RevenueUpdate #{self.nonce} farm={self.farm_id} revenue={self.revenue}>"
