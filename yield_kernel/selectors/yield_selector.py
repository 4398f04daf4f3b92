"""
YieldSelector -- read-only queries over farms, checkpoints and logs.

None of these queries reconcile.  ``get_pending_yield()`` returns the
checkpoint as of the investor's last reconcile; callers that need a
current figure reconcile first.

A farm id no farm could have raises InvalidFarmIdError rather than a
driver error.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from yield_kernel.domain.dtos import (
    FarmInfo,
    InvestorAccrualInfo,
    PaymentInstructionInfo,
    RevenueUpdateInfo,
)
from yield_kernel.domain.validation import fits_bigint, require_farm_id
from yield_kernel.models.farm import Farm
from yield_kernel.models.investor_accrual import InvestorAccrual
from yield_kernel.models.oracle_authority import OracleAuthority
from yield_kernel.models.payment_instruction import PaymentInstruction
from yield_kernel.models.revenue_update import RevenueUpdate
from yield_kernel.selectors.base import BaseSelector


class YieldSelector(BaseSelector[Farm]):
    """Queries backing the facade's read-only operations."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get_farm(self, farm_id: int) -> FarmInfo | None:
        require_farm_id(farm_id)
        farm = self.session.execute(
            select(Farm).where(Farm.farm_id == farm_id)
        ).scalar_one_or_none()
        return FarmInfo.from_model(farm) if farm is not None else None

    def get_pending_yield(self, farm_id: int, investor: str) -> InvestorAccrualInfo:
        """Stored checkpoint, or the zero checkpoint for an unknown investor."""
        require_farm_id(farm_id)
        row = self.session.execute(
            select(InvestorAccrual).where(
                InvestorAccrual.farm_id == farm_id,
                InvestorAccrual.investor == investor,
            )
        ).scalar_one_or_none()
        if row is None:
            return InvestorAccrualInfo.default(farm_id, investor)
        return InvestorAccrualInfo.from_model(row)

    def get_revenue_update(self, nonce: int) -> RevenueUpdateInfo | None:
        if not fits_bigint(nonce):
            return None
        row = self.session.execute(
            select(RevenueUpdate).where(RevenueUpdate.nonce == nonce)
        ).scalar_one_or_none()
        return RevenueUpdateInfo.from_model(row) if row is not None else None

    def list_revenue_updates(self, farm_id: int | None = None) -> list[RevenueUpdateInfo]:
        """Revenue log in nonce order, optionally for one farm."""
        stmt = select(RevenueUpdate).order_by(RevenueUpdate.nonce)
        if farm_id is not None:
            require_farm_id(farm_id)
            stmt = stmt.where(RevenueUpdate.farm_id == farm_id)
        return [RevenueUpdateInfo.from_model(row) for row in self.session.execute(stmt).scalars()]

    def list_payment_instructions(
        self,
        investor: str | None = None,
        farm_id: int | None = None,
    ) -> list[PaymentInstructionInfo]:
        """Settlement outbox in issue order."""
        stmt = select(PaymentInstruction).order_by(
            PaymentInstruction.issued_at, PaymentInstruction.created_at
        )
        if investor is not None:
            stmt = stmt.where(PaymentInstruction.recipient == investor)
        if farm_id is not None:
            require_farm_id(farm_id)
            stmt = stmt.where(PaymentInstruction.farm_id == farm_id)
        return [
            PaymentInstructionInfo.from_model(row)
            for row in self.session.execute(stmt).scalars()
        ]

    def get_oracle(self) -> str | None:
        row = self.session.execute(
            select(OracleAuthority).where(
                OracleAuthority.slot == OracleAuthority.DEFAULT_SLOT
            )
        ).scalar_one_or_none()
        return row.oracle if row is not None else None
