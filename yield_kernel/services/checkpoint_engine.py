"""
CheckpointEngine -- reconcile and claim.

Responsibility:
    Credits an investor for the yield accrued on the balance they held
    since their last checkpoint, and flushes already-credited yield to
    the settlement outbox on claim.

Architecture position:
    Kernel > Services -- imperative shell around the pure rule in
    ``domain/accrual.py``.  Called by YieldDistributor.

Caller contract (share ledger):
    Before any mint, burn, or transfer touching (farm, investor):
        1. reconcile(farm, investor, balance_before_change)
        2. apply the balance change in the share ledger
        3. set_total_shares(farm, new_total)
    A balance change applied without step 1 under- or over-credits that
    investor permanently.  The engine cannot detect it afterwards.

Invariants enforced:
    - reconcile() accrues on the balance BEFORE the change and moves the
      checkpoint to the farm's current index.  It never changes
      total_shares.
    - claim_yield() zeroes pending_yield and leaves claimed_index alone.
      It does NOT re-reconcile: yield accrued since the last reconcile
      stays uncredited until the next one.
    - A stored checkpoint above the farm index is refused
      (AccrualIndexRegressionError), never clamped.

Failure modes:
    - FarmNotFoundError: reconcile on an unregistered farm.
    - InvalidShareCountError: negative balance passed to reconcile.
    - InvalidIdentityError: empty investor identity.
    - NoPendingYieldError: claim with nothing pending.
"""

from sqlalchemy.orm import Session

from yield_kernel.domain.accrual import accrue
from yield_kernel.domain.dtos import (
    AccrualCheckpoint,
    InvestorAccrualInfo,
    PaymentInstructionInfo,
)
from yield_kernel.domain.validation import (
    is_uint,
    require_farm_id,
    require_identity,
)
from yield_kernel.exceptions import (
    AccrualIndexRegressionError,
    InvalidShareCountError,
    NoPendingYieldError,
)
from yield_kernel.logging_config import get_logger
from yield_kernel.services.accrual_store import InvestorAccrualStore
from yield_kernel.services.farm_ledger import FarmLedgerService
from yield_kernel.services.settlement import PaymentOutbox

logger = get_logger("services.checkpoint_engine")


class CheckpointEngine:
    """Reconciliation and claim processing for investor checkpoints."""

    def __init__(
        self,
        session: Session,
        farm_ledger: FarmLedgerService,
        accrual_store: InvestorAccrualStore,
        outbox: PaymentOutbox,
    ):
        self._session = session
        self._farms = farm_ledger
        self._accruals = accrual_store
        self._outbox = outbox

    def reconcile(
        self,
        farm_id: int,
        investor: str,
        balance_before_change: int,
    ) -> InvestorAccrualInfo:
        """
        Checkpoint ``investor`` on ``farm_id`` at the farm's current index.

        Args:
            farm_id: Farm whose shares are about to change hands.
            investor: Investor whose balance is about to change.
            balance_before_change: Shares the investor held since the
                previous checkpoint (NOT the post-change balance).

        Returns:
            The updated checkpoint.
        """
        require_farm_id(farm_id)
        require_identity("investor", investor)
        if not is_uint(balance_before_change):
            raise InvalidShareCountError(
                farm_id, balance_before_change, "investor balance cannot be negative"
            )

        farm = self._farms.require_farm_for_update(farm_id)
        farm_index = farm.accumulated_yield_per_share
        current = self._accruals.get_or_default(farm_id, investor, for_update=True)

        if current.claimed_index > farm_index:
            logger.error(
                "accrual_index_regression",
                extra={
                    "farm_id": farm_id,
                    "investor": investor,
                    "claimed_index": current.claimed_index,
                    "farm_index": farm_index,
                },
            )
            raise AccrualIndexRegressionError(
                farm_id, investor, current.claimed_index, farm_index
            )

        step = accrue(current.checkpoint, farm_index, balance_before_change)
        saved = self._accruals.save(farm_id, investor, step.checkpoint)

        logger.info(
            "investor_reconciled",
            extra={
                "farm_id": farm_id,
                "investor": investor,
                "balance_before_change": balance_before_change,
                "owed_index": step.owed_index,
                "newly_owed": step.newly_owed,
                "pending_yield": saved.pending_yield,
            },
        )
        return saved

    def claim_yield(self, farm_id: int, investor: str) -> PaymentInstructionInfo:
        """
        Pay out everything already pending for ``investor`` on ``farm_id``.

        Returns:
            The payment instruction written to the outbox; its ``amount``
            is the paid amount.

        Raises:
            NoPendingYieldError: If nothing is pending (including
                investors that were never reconciled).
        """
        require_farm_id(farm_id)
        require_identity("investor", investor)
        current = self._accruals.get_or_default(farm_id, investor, for_update=True)
        if current.pending_yield <= 0:
            raise NoPendingYieldError(farm_id, investor)

        amount = current.pending_yield
        self._accruals.save(
            farm_id,
            investor,
            AccrualCheckpoint(claimed_index=current.claimed_index, pending_yield=0),
        )
        instruction = self._outbox.issue(farm_id, investor, amount)

        logger.info(
            "yield_claimed",
            extra={"farm_id": farm_id, "investor": investor, "amount": amount},
        )
        return instruction
