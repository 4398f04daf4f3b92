"""
Module: yield_kernel.models.oracle_authority
Responsibility: The single trusted identity allowed to submit revenue.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Exactly one row per deployment (slot is unique and always
      ``OracleAuthority.DEFAULT_SLOT``).
    - Only the current oracle may rotate the row (OracleAuthorityService).
"""

from datetime import datetime

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yield_kernel.db.base import TimestampedBase
from yield_kernel.db.types import UTCDateTime


class OracleAuthority(TimestampedBase):
    """Current oracle identity."""

    __tablename__ = "oracle_authority"

    __table_args__ = (
        UniqueConstraint("slot", name="uq_oracle_slot"),
    )

    DEFAULT_SLOT = "default"

    slot: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_SLOT)

    oracle: Mapped[str] = mapped_column(String(128), nullable=False)

    rotated_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<OracleAuthority {self.oracle}>"
