"""Services for the yield kernel (write side)."""

from yield_kernel.services.accrual_store import InvestorAccrualStore
from yield_kernel.services.checkpoint_engine import CheckpointEngine
from yield_kernel.services.farm_ledger import FarmLedgerService
from yield_kernel.services.oracle_authority import OracleAuthorityService
from yield_kernel.services.revenue_ingestion import RevenueIngestionService
from yield_kernel.services.sequence_service import SequenceService
from yield_kernel.services.settlement import PaymentOutbox, PaymentSettlement
from yield_kernel.services.yield_distributor import YieldDistributor

__all__ = [
    "CheckpointEngine",
    "FarmLedgerService",
    "InvestorAccrualStore",
    "OracleAuthorityService",
    "PaymentOutbox",
    "PaymentSettlement",
    "RevenueIngestionService",
    "SequenceService",
    "YieldDistributor",
]
