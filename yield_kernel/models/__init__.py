"""ORM models for the yield kernel."""

from yield_kernel.models.farm import Farm
from yield_kernel.models.investor_accrual import InvestorAccrual
from yield_kernel.models.oracle_authority import OracleAuthority
from yield_kernel.models.payment_instruction import PaymentInstruction
from yield_kernel.models.revenue_update import RevenueUpdate

__all__ = [
    "Farm",
    "InvestorAccrual",
    "OracleAuthority",
    "PaymentInstruction",
    "RevenueUpdate",
]
