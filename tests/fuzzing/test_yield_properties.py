"""
Property-based tests for the accrual model.

Monotonicity: the farm index never decreases.
Conservation: credited plus paid yield never exceeds revenue ingested,
and once every holder has reconciled the shortfall is truncation dust
only.
"""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from yield_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from yield_kernel.domain.accrual import accrue
from yield_kernel.domain.clock import DeterministicClock
from yield_kernel.domain.dtos import AccrualCheckpoint
from yield_kernel.domain.fixed_point import SCALE, scale_up
from yield_kernel.services.sequence_service import SequenceService
from yield_kernel.services.yield_distributor import YieldDistributor

ORACLE = "ST1ORACLE"

holdings = st.lists(st.integers(min_value=0, max_value=10**6), min_size=1, max_size=6).filter(
    lambda balances: sum(balances) > 0
)
readings = st.lists(
    st.tuples(
        st.integers(min_value=1, max_value=10**9),
        st.integers(min_value=1, max_value=10**6),
    ),
    min_size=1,
    max_size=8,
)


class TestPureAccrualProperties:
    @given(balances=holdings, events=readings)
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_conservation_with_dust_bound(self, balances, events):
        total_shares = sum(balances)
        index = 0
        revenue_total = 0
        for kwh, price in events:
            revenue = kwh * price
            index += scale_up(revenue, total_shares)
            revenue_total += revenue

        credited = sum(
            accrue(AccrualCheckpoint.zero(), index, balance).newly_owed
            for balance in balances
        )

        assert credited <= revenue_total
        # scaled units: under total_shares per event, under SCALE per holder
        dust = (revenue_total - credited) * SCALE
        assert dust <= len(events) * total_shares + len(balances) * SCALE

    @given(balances=holdings, events=readings)
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_reconcile_order_does_not_matter(self, balances, events):
        total_shares = sum(balances)
        index = 0
        stepwise = [AccrualCheckpoint.zero() for _ in balances]
        for kwh, price in events:
            index += scale_up(kwh * price, total_shares)
            stepwise = [
                accrue(cp, index, balance).checkpoint
                for cp, balance in zip(stepwise, balances)
            ]

        once = [accrue(AccrualCheckpoint.zero(), index, b).checkpoint for b in balances]

        for step_cp, once_cp in zip(stepwise, once):
            assert step_cp.claimed_index == once_cp.claimed_index == index
            assert step_cp.pending_yield <= once_cp.pending_yield

    @given(
        revenue=st.integers(min_value=1, max_value=10**30),
        shares=st.integers(min_value=1, max_value=10**12),
    )
    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_scale_up_remainder_below_share_count(self, revenue, shares):
        delta = scale_up(revenue, shares)

        assert 0 <= revenue * SCALE - delta * shares < shares


def _fresh_distributor() -> YieldDistributor:
    reset_engine()
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables(engine)
    factory = get_session_factory()
    with session_scope(factory) as session:
        SequenceService(session).initialize_sequences()
    distributor = YieldDistributor(factory, clock=DeterministicClock())
    distributor.initialize_oracle(ORACLE)
    return distributor


@pytest.mark.slow
class TestPersistedProperties:
    @pytest.fixture(autouse=True)
    def _dispose(self):
        yield
        reset_engine()

    @given(balances=holdings, events=readings, claim_after=st.integers(min_value=0, max_value=8))
    @settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    )
    def test_index_monotonic_and_revenue_conserved(self, balances, events, claim_after):
        distributor = _fresh_distributor()
        investors = [f"ST1INV{i}" for i in range(len(balances))]
        distributor.register_farm(1, sum(balances))

        indexes = [0]
        for n, (kwh, price) in enumerate(events):
            assert distributor.submit_revenue(1, kwh, price, ORACLE).ok
            indexes.append(distributor.get_farm(1).accumulated_yield_per_share)
            if n == claim_after:
                for investor, balance in zip(investors, balances):
                    distributor.reconcile(1, investor, balance)
                    distributor.claim_yield(1, investor)

        for investor, balance in zip(investors, balances):
            assert distributor.reconcile(1, investor, balance).ok

        assert indexes == sorted(indexes)
        report = distributor.audit_farm(1)
        assert report.is_valid
        # each holder is floored once per reconcile
        assert report.undistributed * SCALE <= (
            len(events) * sum(balances) + 2 * len(balances) * SCALE
        )
        assert distributor.get_revenue_nonce() == len(events)
