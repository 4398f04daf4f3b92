"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable views of farms, checkpoints, revenue updates and payment
    instructions, plus the OperationResult envelope returned by the
    public facade.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters invoked only
    from services and selectors, never from domain logic.

Invariants enforced:
    - Services and selectors return DTOs, never ORM entities, so callers
      cannot mutate stored state outside a service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from yield_kernel.exceptions import ErrorKind, YieldKernelError

if TYPE_CHECKING:
    from yield_kernel.models.farm import Farm as FarmModel
    from yield_kernel.models.investor_accrual import (
        InvestorAccrual as InvestorAccrualModel,
    )
    from yield_kernel.models.payment_instruction import (
        PaymentInstruction as PaymentInstructionModel,
    )
    from yield_kernel.models.revenue_update import (
        RevenueUpdate as RevenueUpdateModel,
    )


@dataclass(frozen=True)
class FarmInfo:
    """Snapshot of a farm's aggregate state."""

    farm_id: int
    total_shares: int
    total_revenue_accrued: int
    accumulated_yield_per_share: int
    last_distributed_at: datetime | None = None

    @classmethod
    def from_model(cls, model: FarmModel) -> FarmInfo:
        return cls(
            farm_id=model.farm_id,
            total_shares=model.total_shares,
            total_revenue_accrued=model.total_revenue_accrued,
            accumulated_yield_per_share=model.accumulated_yield_per_share,
            last_distributed_at=model.last_distributed_at,
        )


@dataclass(frozen=True)
class AccrualCheckpoint:
    """The two numbers that make up an investor's position in a farm's index."""

    claimed_index: int = 0
    pending_yield: int = 0

    @classmethod
    def zero(cls) -> AccrualCheckpoint:
        """Checkpoint of an investor that was never reconciled."""
        return cls(claimed_index=0, pending_yield=0)


@dataclass(frozen=True)
class InvestorAccrualInfo:
    """Stored checkpoint for one (farm, investor) pair."""

    farm_id: int
    investor: str
    claimed_index: int
    pending_yield: int

    @property
    def checkpoint(self) -> AccrualCheckpoint:
        return AccrualCheckpoint(
            claimed_index=self.claimed_index,
            pending_yield=self.pending_yield,
        )

    @classmethod
    def default(cls, farm_id: int, investor: str) -> InvestorAccrualInfo:
        """View of an absent record: logically {claimed_index: 0, pending_yield: 0}."""
        return cls(farm_id=farm_id, investor=investor, claimed_index=0, pending_yield=0)

    @classmethod
    def from_model(cls, model: InvestorAccrualModel) -> InvestorAccrualInfo:
        return cls(
            farm_id=model.farm_id,
            investor=model.investor,
            claimed_index=model.claimed_index,
            pending_yield=model.pending_yield,
        )


@dataclass(frozen=True)
class RevenueUpdateInfo:
    """One entry of the append-only revenue log."""

    nonce: int
    farm_id: int
    kwh_produced: int
    price_per_kwh: int
    revenue: int
    recorded_at: datetime

    @classmethod
    def from_model(cls, model: RevenueUpdateModel) -> RevenueUpdateInfo:
        return cls(
            nonce=model.nonce,
            farm_id=model.farm_id,
            kwh_produced=model.kwh_produced,
            price_per_kwh=model.price_per_kwh,
            revenue=model.revenue,
            recorded_at=model.recorded_at,
        )


@dataclass(frozen=True)
class PaymentInstructionInfo:
    """Instruction to transfer ``amount`` to ``recipient``."""

    instruction_id: UUID
    farm_id: int
    recipient: str
    amount: int
    issued_at: datetime

    @classmethod
    def from_model(cls, model: PaymentInstructionModel) -> PaymentInstructionInfo:
        return cls(
            instruction_id=model.id,
            farm_id=model.farm_id,
            recipient=model.recipient,
            amount=model.amount,
            issued_at=model.issued_at,
        )


@dataclass(frozen=True)
class OperationResult:
    """
    Success/failure envelope returned by every YieldDistributor operation
    except ``set_oracle``.

    On success ``value`` carries the operation's return value (revenue
    ingested, amount paid, ...).  On failure ``error_kind`` and
    ``error_code`` identify the rejected business rule and no state was
    changed.
    """

    ok: bool
    value: Any = None
    error_kind: ErrorKind | None = None
    error_code: str | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: Any = True) -> OperationResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: YieldKernelError) -> OperationResult:
        return cls(
            ok=False,
            error_kind=error.kind,
            error_code=error.code,
            message=str(error),
        )

    @property
    def is_success(self) -> bool:
        return self.ok
