"""
Module: yield_kernel.models.investor_accrual
Responsibility: ORM persistence for the per-(farm, investor) checkpoint.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - One row per (farm_id, investor) (uq_accrual_farm_investor).
    - claimed_index <= farm.accumulated_yield_per_share (checked on every
      reconcile by CheckpointEngine).
    - Rows are created lazily on first reconcile and never deleted; an
      investor that claimed everything keeps a row with pending_yield = 0.
"""

from sqlalchemy import BigInteger, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yield_kernel.db.base import TimestampedBase
from yield_kernel.db.types import UIntString


class InvestorAccrual(TimestampedBase):
    """Checkpoint of one investor's position in one farm's yield index."""

    __tablename__ = "investor_accruals"

    __table_args__ = (
        UniqueConstraint("farm_id", "investor", name="uq_accrual_farm_investor"),
    )

    farm_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("farms.farm_id"),
        nullable=False,
    )

    investor: Mapped[str] = mapped_column(String(128), nullable=False)

    # Farm index as of this investor's last reconcile
    claimed_index: Mapped[int] = mapped_column(
        UIntString(),
        nullable=False,
        default=0,
    )

    pending_yield: Mapped[int] = mapped_column(
        UIntString(),
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return (
            f"<InvestorAccrual farm={self.farm_id} investor={self.investor} "
            f"pending={self.pending_yield}>"
        )
