"""
Yield Kernel

A persisted, auditable yield-distribution engine for fractionally owned
energy farms:
- Fixed-point accumulated-yield-per-share index per farm
- Checkpoint-before-transfer accrual for every investor
- Oracle-gated, nonce-ordered revenue ingestion
- Append-only revenue log and settlement outbox
- Atomic operations with structured results
"""

__version__ = "0.1.0"
