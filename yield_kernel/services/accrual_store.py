"""
InvestorAccrualStore -- per-(farm, investor) checkpoints.

Responsibility:
    Reads and writes InvestorAccrual rows.  Absent rows are an explicit
    case: ``get_or_default()`` returns a zero checkpoint instead of None
    so every caller handles the never-reconciled investor the same way.

Architecture position:
    Kernel > Services -- imperative shell.
    Written only by CheckpointEngine.

Invariants enforced:
    - Rows are created lazily on first save and never deleted.
    - The store persists whatever checkpoint it is given; the rules about
      what a valid checkpoint is live in domain/accrual.py and
      CheckpointEngine.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from yield_kernel.domain.dtos import AccrualCheckpoint, InvestorAccrualInfo
from yield_kernel.logging_config import get_logger
from yield_kernel.models.investor_accrual import InvestorAccrual
from yield_kernel.services.base import BaseService

logger = get_logger("services.accrual_store")


class InvestorAccrualStore(BaseService[InvestorAccrual]):
    """Get-or-default accessor and writer for investor checkpoints."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get_or_default(
        self,
        farm_id: int,
        investor: str,
        for_update: bool = False,
    ) -> InvestorAccrualInfo:
        """Stored checkpoint, or the zero checkpoint if none was ever written."""
        row = self._load(farm_id, investor, for_update=for_update)
        if row is None:
            return InvestorAccrualInfo.default(farm_id, investor)
        return InvestorAccrualInfo.from_model(row)

    def save(
        self,
        farm_id: int,
        investor: str,
        checkpoint: AccrualCheckpoint,
    ) -> InvestorAccrualInfo:
        """Insert or overwrite the checkpoint for (farm_id, investor)."""
        row = self._load(farm_id, investor, for_update=True)
        if row is None:
            row = InvestorAccrual(
                farm_id=farm_id,
                investor=investor,
                claimed_index=checkpoint.claimed_index,
                pending_yield=checkpoint.pending_yield,
            )
            self.session.add(row)
            logger.debug(
                "accrual_record_created",
                extra={"farm_id": farm_id, "investor": investor},
            )
        else:
            row.claimed_index = checkpoint.claimed_index
            row.pending_yield = checkpoint.pending_yield

        self.session.flush()
        return InvestorAccrualInfo.from_model(row)

    def _load(
        self,
        farm_id: int,
        investor: str,
        for_update: bool = False,
    ) -> InvestorAccrual | None:
        stmt = select(InvestorAccrual).where(
            InvestorAccrual.farm_id == farm_id,
            InvestorAccrual.investor == investor,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()
