"""
Module: yield_kernel.models.farm
Responsibility: ORM persistence for per-farm aggregate state: outstanding
    shares, cumulative revenue, and the accumulated-yield-per-share index.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - farm_id is unique (uq_farm_id); a farm is created once and never
      deleted (db/immutability.py blocks DELETE).
    - accumulated_yield_per_share and total_revenue_accrued are
      non-decreasing.  Only RevenueIngestionService writes them.
    - total_shares is non-negative (UIntString rejects negatives on bind).
"""

from datetime import datetime

from sqlalchemy import BigInteger, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yield_kernel.db.base import TimestampedBase
from yield_kernel.db.types import UIntString, UTCDateTime


class Farm(TimestampedBase):
    """
    A revenue-producing facility whose future revenue is split into shares.

    ``total_shares`` mirrors the share ledger's supply and is kept current
    through FarmLedgerService.set_total_shares() after every reconciled
    balance change.
    """

    __tablename__ = "farms"

    __table_args__ = (
        UniqueConstraint("farm_id", name="uq_farm_id"),
    )

    farm_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    total_shares: Mapped[int] = mapped_column(UIntString(), nullable=False)

    total_revenue_accrued: Mapped[int] = mapped_column(
        UIntString(),
        nullable=False,
        default=0,
    )

    # Scaled by yield_kernel.domain.fixed_point.SCALE
    accumulated_yield_per_share: Mapped[int] = mapped_column(
        UIntString(),
        nullable=False,
        default=0,
    )

    # Logical time of the most recent accepted revenue event
    last_distributed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Farm {self.farm_id}: shares={self.total_shares} "
            f"index={self.accumulated_yield_per_share}>"
        )
