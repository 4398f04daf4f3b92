"""
Settlement -- payment instructions for claimed yield.

Responsibility:
    ``PaymentOutbox`` writes the {amount, recipient} instruction of a
    successful claim into the payment_instructions table, inside the
    claim's transaction.  ``PaymentSettlement`` is the interface of the
    external transfer primitive that YieldDistributor hands each
    committed instruction to.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - Exactly one instruction per successful claim, amount > 0.
    - Instructions are immutable once flushed (db/immutability.py).

Non-goals:
    - Settlement failure handling.  The transfer primitive is assumed
      synchronous and non-failing; if it does raise, the claim stays
      committed and pending yield is not restored.  The error reaches
      the caller of claim_yield unchanged.
"""

from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session

from yield_kernel.domain.clock import Clock, SystemClock
from yield_kernel.domain.dtos import PaymentInstructionInfo
from yield_kernel.logging_config import get_logger
from yield_kernel.models.payment_instruction import PaymentInstruction
from yield_kernel.services.base import BaseService

logger = get_logger("services.settlement")


@runtime_checkable
class PaymentSettlement(Protocol):
    """External value-transfer primitive."""

    def settle(self, instruction: PaymentInstructionInfo) -> None:
        """Transfer ``instruction.amount`` to ``instruction.recipient``."""
        ...


class PaymentOutbox(BaseService[PaymentInstruction]):
    """Persists payment instructions alongside the claim that caused them."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def issue(self, farm_id: int, recipient: str, amount: int) -> PaymentInstructionInfo:
        if amount <= 0:
            raise ValueError(f"Payment amount must be positive, got {amount}")

        instruction = PaymentInstruction(
            farm_id=farm_id,
            recipient=recipient,
            amount=amount,
            issued_at=self._clock.now(),
        )
        self.session.add(instruction)
        self.session.flush()

        logger.info(
            "payment_instruction_issued",
            extra={
                "farm_id": farm_id,
                "recipient": recipient,
                "amount": amount,
                "instruction_id": str(instruction.id),
            },
        )
        return PaymentInstructionInfo.from_model(instruction)
