"""Tests for the farm audit in yield_kernel.invariants."""

import pytest

from yield_kernel.domain.dtos import AccrualCheckpoint
from yield_kernel.exceptions import FarmNotFoundError
from yield_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FarmAuditReport,
    KernelInvariant,
    audit_farm,
)

ORACLE = "ST1ORACLE"


class TestAuditFarm:
    def test_fresh_farm_is_valid(self, session, farm_ledger):
        farm_ledger.register_farm(1, 1000)

        report = audit_farm(session, 1)

        assert report == FarmAuditReport(
            farm_id=1, total_revenue_accrued=0, total_pending=0, total_paid=0
        )
        assert report.is_valid

    def test_unreconciled_revenue_is_undistributed(
        self, session, farm_ledger, revenue_ingestion
    ):
        farm_ledger.register_farm(1, 1000)
        revenue_ingestion.submit_revenue(1, 1000, 2000, ORACLE)

        report = audit_farm(session, 1)

        assert report.undistributed == 2_000_000
        assert report.is_conserved

    def test_detects_overcredit(self, session, farm_ledger, accrual_store, captured_logs):
        farm_ledger.register_farm(1, 1000)
        accrual_store.save(1, "ST1INVESTOR", AccrualCheckpoint(0, 5))

        report = audit_farm(session, 1)

        assert not report.is_conserved
        assert not report.is_valid
        assert any(r["message"] == "farm_audit_failed" for r in captured_logs())

    def test_detects_checkpoint_ahead_of_index(self, session, farm_ledger, accrual_store):
        farm_ledger.register_farm(1, 1000)
        accrual_store.save(1, "ST1INVESTOR", AccrualCheckpoint(10, 0))

        report = audit_farm(session, 1)

        assert report.investors_ahead_of_index == ("ST1INVESTOR",)
        assert not report.is_valid

    def test_unknown_farm(self, session):
        with pytest.raises(FarmNotFoundError):
            audit_farm(session, 404)


class TestKernelInvariants:
    def test_all_invariants_listed(self):
        assert KernelInvariant.CONSERVATION in ALL_KERNEL_INVARIANTS
        assert len(ALL_KERNEL_INVARIANTS) == len(KernelInvariant)
