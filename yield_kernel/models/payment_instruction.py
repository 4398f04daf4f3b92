"""
Module: yield_kernel.models.payment_instruction
Responsibility: Settlement outbox.  Every successful claim writes exactly
    one instruction {amount, recipient} in the claim's own transaction.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - amount > 0 (a claim of zero is rejected before an instruction exists).
    - Rows are immutable once flushed (db/immutability.py).

Non-goals:
    - Delivery status.  Settlement is assumed synchronous and non-failing
      from the kernel's point of view; a downstream failure is not
      recorded here and never restores pending yield.
"""

from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from yield_kernel.db.base import TimestampedBase
from yield_kernel.db.types import UIntString, UTCDateTime


class PaymentInstruction(TimestampedBase):
    """A payout of claimed yield to one investor."""

    __tablename__ = "payment_instructions"

    __table_args__ = (
        Index("idx_payment_recipient", "recipient"),
        Index("idx_payment_farm", "farm_id"),
    )

    farm_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("farms.farm_id"),
        nullable=False,
    )

    recipient: Mapped[str] = mapped_column(String(128), nullable=False)

    amount: Mapped[int] = mapped_column(UIntString(), nullable=False)

    issued_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PaymentInstruction {self.amount} -> {self.recipient}>"
