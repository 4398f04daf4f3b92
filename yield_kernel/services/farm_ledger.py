"""
FarmLedgerService -- per-farm aggregate state.

Responsibility:
    Registers farms, looks them up, and keeps each farm's mirrored share
    total in step with the share ledger.

Architecture position:
    Kernel > Services -- imperative shell.
    Used by RevenueIngestionService and CheckpointEngine to load farms
    under a row lock, and by YieldDistributor for registration and the
    post-reconcile share update.

Invariants enforced:
    - A farm id is registered once (FarmAlreadyExistsError, plus the
      uq_farm_id constraint as a second line).
    - Initial shares > 0; later totals >= 0.
    - set_total_shares() never touches the yield index.  It is only
      called after the affected investor was reconciled.
    - Mutating paths load the farm with ``SELECT ... FOR UPDATE`` so
      writers to the same farm are serialized.

Failure modes:
    - InvalidFarmIdError: farm id negative, not an int, or above MAX_FARM_ID.
    - InvalidShareCountError: non-positive initial shares, negative total.
    - FarmAlreadyExistsError: duplicate registration.
    - FarmNotFoundError: lookup of an unregistered farm via require_*.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from yield_kernel.domain.dtos import FarmInfo
from yield_kernel.domain.validation import is_uint, require_farm_id
from yield_kernel.exceptions import (
    FarmAlreadyExistsError,
    FarmNotFoundError,
    InvalidShareCountError,
)
from yield_kernel.logging_config import get_logger
from yield_kernel.models.farm import Farm
from yield_kernel.services.base import BaseService

logger = get_logger("services.farm_ledger")


class FarmLedgerService(BaseService[Farm]):
    """
    Service for the Farms table.

    Guarantees:
        - Public read methods return FarmInfo DTOs.
        - Flush-only: the caller owns the transaction.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def register_farm(self, farm_id: int, initial_shares: int) -> FarmInfo:
        """
        Register a farm with ``initial_shares`` outstanding.

        Raises:
            InvalidFarmIdError: If farm_id is not a storable unsigned int.
            InvalidShareCountError: If initial_shares <= 0.
            FarmAlreadyExistsError: If farm_id is already registered.
        """
        require_farm_id(farm_id)
        if not is_uint(initial_shares) or initial_shares == 0:
            raise InvalidShareCountError(
                farm_id, initial_shares, "initial shares must be positive"
            )

        if self._load(farm_id) is not None:
            raise FarmAlreadyExistsError(farm_id)

        farm = Farm(
            farm_id=farm_id,
            total_shares=initial_shares,
            total_revenue_accrued=0,
            accumulated_yield_per_share=0,
            last_distributed_at=None,
        )
        self.session.add(farm)
        self.session.flush()

        logger.info(
            "farm_registered",
            extra={"farm_id": farm_id, "initial_shares": initial_shares},
        )
        return FarmInfo.from_model(farm)

    def get_farm(self, farm_id: int) -> FarmInfo | None:
        """Pure lookup; None if the farm was never registered."""
        farm = self._load(farm_id)
        return FarmInfo.from_model(farm) if farm is not None else None

    def require_farm_for_update(self, farm_id: int) -> Farm:
        """
        Load the farm row under a row lock for a mutating operation.

        Raises:
            FarmNotFoundError: If the farm is not registered.
        """
        farm = self._load(farm_id, for_update=True)
        if farm is None:
            raise FarmNotFoundError(farm_id)
        return farm

    def set_total_shares(self, farm_id: int, new_total: int) -> FarmInfo:
        """
        Replace the mirrored share total after a reconciled balance change.

        Internal to the kernel: invoked by YieldDistributor as the second
        half of the share-ledger contract, never as a standalone shortcut
        around reconcile.

        Raises:
            FarmNotFoundError: If the farm is not registered.
            InvalidShareCountError: If new_total is negative.
        """
        if not is_uint(new_total):
            raise InvalidShareCountError(
                farm_id, new_total, "total shares cannot be negative"
            )

        farm = self.require_farm_for_update(farm_id)
        previous = farm.total_shares
        farm.total_shares = new_total
        self.session.flush()

        logger.info(
            "total_shares_updated",
            extra={
                "farm_id": farm_id,
                "previous_total": previous,
                "new_total": new_total,
            },
        )
        return FarmInfo.from_model(farm)

    def _load(self, farm_id: int, for_update: bool = False) -> Farm | None:
        require_farm_id(farm_id)
        stmt = select(Farm).where(Farm.farm_id == farm_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()
