"""Tests for FarmLedgerService: registration, lookup, share mirror."""

import pytest
from sqlalchemy import func, select

from yield_kernel.domain.dtos import FarmInfo
from yield_kernel.domain.validation import MAX_FARM_ID
from yield_kernel.exceptions import (
    ErrorKind,
    FarmAlreadyExistsError,
    FarmNotFoundError,
    InvalidFarmIdError,
    InvalidShareCountError,
)
from yield_kernel.models.farm import Farm


class TestRegisterFarm:
    def test_register_creates_zeroed_farm(self, farm_ledger):
        info = farm_ledger.register_farm(1, 1000)

        assert info == FarmInfo(
            farm_id=1,
            total_shares=1000,
            total_revenue_accrued=0,
            accumulated_yield_per_share=0,
            last_distributed_at=None,
        )

    @pytest.mark.parametrize("shares", [0, -1, True, 1.5, "100"])
    def test_non_positive_or_non_int_shares_rejected(self, farm_ledger, shares):
        with pytest.raises(InvalidShareCountError) as exc_info:
            farm_ledger.register_farm(1, shares)

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert farm_ledger.get_farm(1) is None

    def test_duplicate_rejected(self, farm_ledger):
        farm_ledger.register_farm(1, 1000)

        with pytest.raises(FarmAlreadyExistsError) as exc_info:
            farm_ledger.register_farm(1, 50)

        assert exc_info.value.farm_id == 1
        assert farm_ledger.get_farm(1).total_shares == 1000

    def test_large_share_counts_round_trip(self, farm_ledger):
        farm_ledger.register_farm(2, 10**30)

        assert farm_ledger.get_farm(2).total_shares == 10**30


class TestFarmIds:
    @pytest.mark.parametrize("farm_id", [-5, "abc", 1.5, True, None, MAX_FARM_ID + 1, 2**64])
    def test_unstorable_id_rejected_before_write(self, session, farm_ledger, farm_id):
        with pytest.raises(InvalidFarmIdError) as exc_info:
            farm_ledger.register_farm(farm_id, 1000)

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert exc_info.value.code == "INVALID_FARM_ID"
        assert session.execute(select(func.count()).select_from(Farm)).scalar_one() == 0

    def test_largest_bigint_id_accepted(self, farm_ledger):
        farm_ledger.register_farm(MAX_FARM_ID, 10)

        assert farm_ledger.get_farm(MAX_FARM_ID).farm_id == MAX_FARM_ID

    @pytest.mark.parametrize("farm_id", [-1, 2**64])
    def test_lookups_reject_unstorable_id(self, farm_ledger, farm_id):
        with pytest.raises(InvalidFarmIdError):
            farm_ledger.get_farm(farm_id)
        with pytest.raises(InvalidFarmIdError):
            farm_ledger.set_total_shares(farm_id, 5)


class TestGetFarm:
    def test_unregistered_is_none(self, farm_ledger):
        assert farm_ledger.get_farm(404) is None

    def test_require_for_update_raises_for_unregistered(self, farm_ledger):
        with pytest.raises(FarmNotFoundError) as exc_info:
            farm_ledger.require_farm_for_update(404)

        assert exc_info.value.kind == ErrorKind.NOT_FOUND


class TestSetTotalShares:
    def test_updates_total_only(self, farm_ledger):
        farm_ledger.register_farm(1, 1000)

        info = farm_ledger.set_total_shares(1, 1200)

        assert info.total_shares == 1200
        assert info.accumulated_yield_per_share == 0
        assert info.total_revenue_accrued == 0

    def test_zero_allowed(self, farm_ledger):
        farm_ledger.register_farm(1, 1000)

        assert farm_ledger.set_total_shares(1, 0).total_shares == 0

    def test_negative_rejected(self, farm_ledger):
        farm_ledger.register_farm(1, 1000)

        with pytest.raises(InvalidShareCountError):
            farm_ledger.set_total_shares(1, -5)

        assert farm_ledger.get_farm(1).total_shares == 1000

    def test_unregistered_farm(self, farm_ledger):
        with pytest.raises(FarmNotFoundError):
            farm_ledger.set_total_shares(404, 10)

    def test_logs_previous_and_new_total(self, farm_ledger, captured_logs):
        farm_ledger.register_farm(1, 1000)
        farm_ledger.set_total_shares(1, 800)

        events = [r for r in captured_logs() if r["message"] == "total_shares_updated"]
        assert len(events) == 1
        assert events[0]["previous_total"] == 1000
        assert events[0]["new_total"] == 800
