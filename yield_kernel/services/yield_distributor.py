"""
YieldDistributor -- public facade of the yield kernel.

Responsibility:
    The narrow contract the share ledger, the oracle gateway and the
    settlement side call into.  Each operation opens its own transaction,
    wires the flush-only services onto that session, and turns the
    outcome into an ``OperationResult``.

Architecture position:
    Kernel > Services -- the only component that commits.  Everything
    below it flushes; everything above it sees results, not exceptions.

Invariants enforced:
    - Atomicity: one operation == one transaction.  A YieldKernelError
      raised anywhere inside rolls the whole transaction back before a
      failure result is returned, so rejected calls leave no trace
      (no revenue update, no nonce, no checkpoint move).
    - Expected business-rule failures never escape as exceptions.
      Unexpected exceptions still propagate after rollback.
    - set_oracle() is the one operation returning a bare bool.

Share-ledger contract:
    reconcile(farm, investor, balance_before) -> apply own balance
    change -> set_total_shares(farm, new_total); or, in one step,
    apply_balance_change(farm, investor, balance_before, new_total).
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from yield_kernel.db.engine import session_scope
from yield_kernel.domain.clock import Clock, SystemClock
from yield_kernel.domain.dtos import (
    FarmInfo,
    InvestorAccrualInfo,
    OperationResult,
    PaymentInstructionInfo,
    RevenueUpdateInfo,
)
from yield_kernel.exceptions import YieldKernelError
from yield_kernel.invariants import FarmAuditReport, audit_farm
from yield_kernel.logging_config import LogContext, get_logger
from yield_kernel.selectors.yield_selector import YieldSelector
from yield_kernel.services.accrual_store import InvestorAccrualStore
from yield_kernel.services.checkpoint_engine import CheckpointEngine
from yield_kernel.services.farm_ledger import FarmLedgerService
from yield_kernel.services.oracle_authority import OracleAuthorityService
from yield_kernel.services.revenue_ingestion import RevenueIngestionService
from yield_kernel.services.sequence_service import SequenceService
from yield_kernel.services.settlement import PaymentOutbox, PaymentSettlement

logger = get_logger("services.yield_distributor")

T = TypeVar("T")


@dataclass
class _SessionServices:
    """Services bound to one transaction."""

    farms: FarmLedgerService
    oracle: OracleAuthorityService
    sequences: SequenceService
    ingestion: RevenueIngestionService
    checkpoints: CheckpointEngine

    @classmethod
    def build(cls, session: Session, clock: Clock) -> _SessionServices:
        farms = FarmLedgerService(session)
        oracle = OracleAuthorityService(session, clock)
        sequences = SequenceService(session)
        return cls(
            farms=farms,
            oracle=oracle,
            sequences=sequences,
            ingestion=RevenueIngestionService(
                session, farms, oracle, sequences, clock
            ),
            checkpoints=CheckpointEngine(
                session,
                farms,
                InvestorAccrualStore(session),
                PaymentOutbox(session, clock),
            ),
        )


class YieldDistributor:
    """
    Transactional facade over the yield kernel services.

    Args:
        session_factory: Factory for sessions; one session per operation.
        clock: Time source for recorded_at / issued_at / rotated_at.
        settlement: Optional transfer primitive, invoked with each payment
            instruction after the claim has committed.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
        settlement: PaymentSettlement | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._settlement = settlement

    # ------------------------------------------------------------------
    # Transaction plumbing
    # ------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        work: Callable[[_SessionServices], T],
        rejected_event: str | None = None,
        **context: Any,
    ) -> tuple[T | None, OperationResult | None]:
        """
        Run ``work`` in its own transaction.

        Returns (value, None) on commit, or (None, failure) when a
        YieldKernelError rolled the transaction back.
        """
        with LogContext.bind(correlation_id=str(uuid4()), **context):
            t0 = time.monotonic()
            try:
                with session_scope(self._session_factory) as session:
                    value = work(_SessionServices.build(session, self._clock))
            except YieldKernelError as exc:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.warning(
                    rejected_event or "operation_failed",
                    extra={
                        "operation": operation,
                        "error_code": exc.code,
                        "error_kind": exc.kind.value,
                        "duration_ms": duration_ms,
                    },
                )
                return None, OperationResult.failure(exc)

            logger.debug(
                "operation_completed",
                extra={
                    "operation": operation,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return value, None

    def _read(self, work: Callable[[Session], T]) -> T:
        with session_scope(self._session_factory) as session:
            return work(session)

    # ------------------------------------------------------------------
    # Farm ledger
    # ------------------------------------------------------------------

    def register_farm(self, farm_id: int, initial_shares: int) -> OperationResult:
        """Register a farm.  ``value`` is the new FarmInfo."""
        farm, failure = self._execute(
            "register_farm",
            lambda s: s.farms.register_farm(farm_id, initial_shares),
            farm_id=farm_id,
        )
        return failure or OperationResult.success(farm)

    def set_total_shares(self, farm_id: int, new_total: int) -> OperationResult:
        """
        Update the farm's share mirror after a reconciled balance change.

        Only the share ledger calls this, and only after reconcile().
        """
        farm, failure = self._execute(
            "set_total_shares",
            lambda s: s.farms.set_total_shares(farm_id, new_total),
            farm_id=farm_id,
        )
        return failure or OperationResult.success(farm)

    # ------------------------------------------------------------------
    # Revenue ingestion
    # ------------------------------------------------------------------

    def submit_revenue(
        self,
        farm_id: int,
        kwh: int,
        price: int,
        caller: str,
    ) -> OperationResult:
        """Ingest a production reading.  ``value`` is the revenue ingested."""
        update, failure = self._execute(
            "submit_revenue",
            lambda s: s.ingestion.submit_revenue(farm_id, kwh, price, caller),
            rejected_event="revenue_rejected",
            farm_id=farm_id,
            caller=caller,
        )
        if failure is not None:
            return failure
        return OperationResult.success(update.revenue)

    # ------------------------------------------------------------------
    # Checkpoints and claims
    # ------------------------------------------------------------------

    def reconcile(
        self,
        farm_id: int,
        investor: str,
        balance_before_change: int,
    ) -> OperationResult:
        """Checkpoint an investor.  ``value`` is the updated InvestorAccrualInfo."""
        accrual, failure = self._execute(
            "reconcile",
            lambda s: s.checkpoints.reconcile(farm_id, investor, balance_before_change),
            farm_id=farm_id,
            investor=investor,
        )
        return failure or OperationResult.success(accrual)

    def apply_balance_change(
        self,
        farm_id: int,
        investor: str,
        balance_before_change: int,
        new_total_shares: int,
    ) -> OperationResult:
        """
        Reconcile ``investor`` and update the farm's share total in one
        transaction.  ``value`` is the FarmInfo after the update.
        """

        def work(s: _SessionServices) -> FarmInfo:
            s.checkpoints.reconcile(farm_id, investor, balance_before_change)
            return s.farms.set_total_shares(farm_id, new_total_shares)

        farm, failure = self._execute(
            "apply_balance_change",
            work,
            farm_id=farm_id,
            investor=investor,
        )
        return failure or OperationResult.success(farm)

    def claim_yield(self, farm_id: int, investor: str) -> OperationResult:
        """
        Pay out the investor's pending yield.  ``value`` is the amount paid.

        The payment instruction is committed together with the zeroed
        pending yield; the settlement primitive, if any, runs afterwards.
        """
        instruction, failure = self._execute(
            "claim_yield",
            lambda s: s.checkpoints.claim_yield(farm_id, investor),
            rejected_event="claim_rejected",
            farm_id=farm_id,
            investor=investor,
        )
        if failure is not None:
            return failure

        if self._settlement is not None:
            self._settlement.settle(instruction)
        return OperationResult.success(instruction.amount)

    # ------------------------------------------------------------------
    # Oracle authority
    # ------------------------------------------------------------------

    def initialize_oracle(self, oracle: str) -> OperationResult:
        """Seed the oracle once.  ``value`` is the oracle now in place."""
        current, failure = self._execute(
            "initialize_oracle",
            lambda s: s.oracle.initialize(oracle),
        )
        return failure or OperationResult.success(current)

    def set_oracle(self, new_oracle: str, caller: str) -> bool:
        """Rotate the oracle.  Returns False, not a result, on refusal."""
        with LogContext.bind(correlation_id=str(uuid4()), caller=caller):
            with session_scope(self._session_factory) as session:
                return OracleAuthorityService(session, self._clock).set_oracle(
                    new_oracle, caller
                )

    # ------------------------------------------------------------------
    # Read-only queries (never reconcile)
    # ------------------------------------------------------------------

    def get_farm(self, farm_id: int) -> FarmInfo | None:
        return self._read(lambda session: YieldSelector(session).get_farm(farm_id))

    def get_pending_yield(self, farm_id: int, investor: str) -> InvestorAccrualInfo:
        """Stored checkpoint as of the last reconcile."""
        return self._read(
            lambda session: YieldSelector(session).get_pending_yield(farm_id, investor)
        )

    def get_revenue_update(self, nonce: int) -> RevenueUpdateInfo | None:
        return self._read(lambda session: YieldSelector(session).get_revenue_update(nonce))

    def list_revenue_updates(self, farm_id: int | None = None) -> list[RevenueUpdateInfo]:
        return self._read(
            lambda session: YieldSelector(session).list_revenue_updates(farm_id)
        )

    def list_payment_instructions(
        self,
        investor: str | None = None,
        farm_id: int | None = None,
    ) -> list[PaymentInstructionInfo]:
        return self._read(
            lambda session: YieldSelector(session).list_payment_instructions(
                investor=investor, farm_id=farm_id
            )
        )

    def get_oracle(self) -> str | None:
        return self._read(lambda session: YieldSelector(session).get_oracle())

    def get_revenue_nonce(self) -> int:
        """Nonce the next accepted revenue update will receive."""
        return self._read(
            lambda session: SequenceService(session).current_value(
                SequenceService.REVENUE_NONCE
            )
        )

    def audit_farm(self, farm_id: int) -> FarmAuditReport:
        """
        Raises:
            InvalidFarmIdError: If farm_id is not a storable unsigned int.
            FarmNotFoundError: If the farm is not registered.
        """
        return self._read(lambda session: audit_farm(session, farm_id))
