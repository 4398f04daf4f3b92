"""
RevenueIngestionService -- records one revenue event and moves the index.

Responsibility:
    Validates a production reading forwarded by the oracle gateway,
    converts it into revenue (kwh * price), spreads that revenue over
    the farm's outstanding shares by raising accumulated_yield_per_share,
    and appends an immutable RevenueUpdate under the next nonce.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by YieldDistributor.submit_revenue().

Check order (first failure wins, nothing is written on failure):
    1. caller is the current oracle          -> NotAuthorizedOracleError
    2. kwh and price are non-negative ints,
       kwh * price > 0                        -> InvalidRevenueError
    3. farm is registered                     -> FarmNotFoundError
    4. farm has outstanding shares            -> ZeroSharesError

Invariants enforced:
    - accumulated_yield_per_share and total_revenue_accrued only grow.
    - The nonce is allocated after every check has passed and inside the
      caller's transaction, so rejected submissions never consume one.
    - Zero-share revenue is rejected, not queued; the gateway retries
      once shares exist.

Audit relevance:
    Every accepted event produces a RevenueUpdate row and a
    ``revenue_submitted`` log line carrying nonce, revenue and delta.
"""

from sqlalchemy.orm import Session

from yield_kernel.domain.clock import Clock, SystemClock
from yield_kernel.domain.dtos import RevenueUpdateInfo
from yield_kernel.domain.fixed_point import scale_up
from yield_kernel.domain.validation import is_uint
from yield_kernel.exceptions import InvalidRevenueError, ZeroSharesError
from yield_kernel.logging_config import get_logger
from yield_kernel.models.revenue_update import RevenueUpdate
from yield_kernel.services.base import BaseService
from yield_kernel.services.farm_ledger import FarmLedgerService
from yield_kernel.services.oracle_authority import OracleAuthorityService
from yield_kernel.services.sequence_service import SequenceService

logger = get_logger("services.revenue_ingestion")


class RevenueIngestionService(BaseService[RevenueUpdate]):
    """
    Revenue ingestion.

    Non-goals:
        - Does NOT authenticate upstream data sources; the oracle gateway
          does that before forwarding.  Only ``caller == current oracle``
          is re-checked here.
        - Does NOT call ``session.commit()``.
    """

    def __init__(
        self,
        session: Session,
        farm_ledger: FarmLedgerService,
        oracle_authority: OracleAuthorityService,
        sequence_service: SequenceService,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._farms = farm_ledger
        self._oracle = oracle_authority
        self._sequences = sequence_service
        self._clock = clock or SystemClock()

    def submit_revenue(
        self,
        farm_id: int,
        kwh: int,
        price: int,
        caller: str,
    ) -> RevenueUpdateInfo:
        """
        Ingest one revenue event.

        Returns:
            The RevenueUpdateInfo that was appended; its ``revenue`` is
            the amount ingested.
        """
        self._oracle.require_oracle(caller)

        if not (is_uint(kwh) and is_uint(price)) or kwh * price <= 0:
            raise InvalidRevenueError(farm_id, kwh, price)
        revenue = kwh * price

        farm = self._farms.require_farm_for_update(farm_id)
        if farm.total_shares == 0:
            raise ZeroSharesError(farm_id)

        delta = scale_up(revenue, farm.total_shares)
        recorded_at = self._clock.now()

        farm.accumulated_yield_per_share = farm.accumulated_yield_per_share + delta
        farm.total_revenue_accrued = farm.total_revenue_accrued + revenue
        farm.last_distributed_at = recorded_at

        nonce = self._sequences.next_value(SequenceService.REVENUE_NONCE)
        update = RevenueUpdate(
            nonce=nonce,
            farm_id=farm_id,
            kwh_produced=kwh,
            price_per_kwh=price,
            revenue=revenue,
            recorded_at=recorded_at,
        )
        self.session.add(update)
        self.session.flush()

        logger.info(
            "revenue_submitted",
            extra={
                "farm_id": farm_id,
                "nonce": nonce,
                "kwh": kwh,
                "price": price,
                "revenue": revenue,
                "index_delta": delta,
                "accumulated_yield_per_share": farm.accumulated_yield_per_share,
            },
        )
        return RevenueUpdateInfo.from_model(update)
