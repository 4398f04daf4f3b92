"""
Kernel Invariants Contract.

These invariants are structural law.  They are hardcoded in the services
and ORM listeners; no configuration may override them.  This module
declares them and provides ``audit_farm()``, which re-derives the two
that can be checked from stored state alone.
"""

from dataclasses import dataclass
from enum import Enum, unique

from sqlalchemy import select
from sqlalchemy.orm import Session

from yield_kernel.domain.validation import require_farm_id
from yield_kernel.exceptions import FarmNotFoundError
from yield_kernel.logging_config import get_logger
from yield_kernel.models.farm import Farm
from yield_kernel.models.investor_accrual import InvestorAccrual
from yield_kernel.models.payment_instruction import PaymentInstruction

logger = get_logger("invariants")


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    INDEX_MONOTONICITY = "index_monotonicity"
    """accumulated_yield_per_share never decreases.  Enforced by
    RevenueIngestionService, the only writer of the index."""

    CHECKPOINT_BOUND = "checkpoint_bound"
    """Every claimed_index is <= its farm's index.  Enforced by
    CheckpointEngine.reconcile()."""

    CONSERVATION = "conservation"
    """Pending plus paid-out yield never exceeds revenue ingested.
    Follows from truncating division in domain/fixed_point.py."""

    NONCE_MONOTONICITY = "nonce_monotonicity"
    """Revenue-update nonces are gap-free and never reused.  Enforced by
    SequenceService and the uq_revenue_update_nonce constraint."""

    APPEND_ONLY_LOGS = "append_only_logs"
    """Revenue updates and payment instructions are never modified or
    deleted.  Enforced by db/immutability.py."""

    ATOMIC_OPERATIONS = "atomic_operations"
    """Every public operation commits fully or not at all.  Enforced by
    YieldDistributor owning the transaction boundary."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)


@dataclass(frozen=True)
class FarmAuditReport:
    """Result of re-deriving a farm's checkable invariants."""

    farm_id: int
    total_revenue_accrued: int
    total_pending: int
    total_paid: int
    investors_ahead_of_index: tuple[str, ...] = ()

    @property
    def total_credited(self) -> int:
        return self.total_pending + self.total_paid

    @property
    def undistributed(self) -> int:
        """Revenue not yet credited to anyone: truncation dust plus yield
        accrued since investors last reconciled."""
        return self.total_revenue_accrued - self.total_credited

    @property
    def is_conserved(self) -> bool:
        return self.total_credited <= self.total_revenue_accrued

    @property
    def is_valid(self) -> bool:
        return self.is_conserved and not self.investors_ahead_of_index


def audit_farm(session: Session, farm_id: int) -> FarmAuditReport:
    """
    Recompute conservation and checkpoint bounds for one farm.

    Read-only.  Sums are done in Python because amounts are stored as
    arbitrary-precision decimal strings.

    Raises:
        InvalidFarmIdError: If farm_id is not a storable unsigned int.
        FarmNotFoundError: If the farm is not registered.
    """
    require_farm_id(farm_id)
    farm = session.execute(
        select(Farm).where(Farm.farm_id == farm_id)
    ).scalar_one_or_none()
    if farm is None:
        raise FarmNotFoundError(farm_id)

    accruals = session.execute(
        select(InvestorAccrual).where(InvestorAccrual.farm_id == farm_id)
    ).scalars().all()
    paid = session.execute(
        select(PaymentInstruction.amount).where(PaymentInstruction.farm_id == farm_id)
    ).scalars().all()

    report = FarmAuditReport(
        farm_id=farm_id,
        total_revenue_accrued=farm.total_revenue_accrued,
        total_pending=sum(a.pending_yield for a in accruals),
        total_paid=sum(paid),
        investors_ahead_of_index=tuple(
            sorted(
                a.investor
                for a in accruals
                if a.claimed_index > farm.accumulated_yield_per_share
            )
        ),
    )

    if not report.is_valid:
        logger.error(
            "farm_audit_failed",
            extra={
                "farm_id": farm_id,
                "total_revenue_accrued": report.total_revenue_accrued,
                "total_credited": report.total_credited,
                "investors_ahead_of_index": list(report.investors_ahead_of_index),
            },
        )
    return report
