"""Pure domain layer: fixed-point math, accrual rule, clock, DTOs, input checks."""

from yield_kernel.domain.accrual import AccrualStep, accrue
from yield_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from yield_kernel.domain.dtos import (
    AccrualCheckpoint,
    FarmInfo,
    InvestorAccrualInfo,
    OperationResult,
    PaymentInstructionInfo,
    RevenueUpdateInfo,
)
from yield_kernel.domain.fixed_point import SCALE, scale_down, scale_up
from yield_kernel.domain.validation import (
    MAX_BIGINT,
    MAX_FARM_ID,
    MAX_IDENTITY_LENGTH,
    fits_bigint,
    is_uint,
    require_farm_id,
    require_identity,
)

__all__ = [
    "SCALE",
    "scale_up",
    "scale_down",
    "accrue",
    "AccrualStep",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "AccrualCheckpoint",
    "FarmInfo",
    "InvestorAccrualInfo",
    "OperationResult",
    "PaymentInstructionInfo",
    "RevenueUpdateInfo",
    "MAX_BIGINT",
    "MAX_FARM_ID",
    "MAX_IDENTITY_LENGTH",
    "fits_bigint",
    "is_uint",
    "require_farm_id",
    "require_identity",
]
