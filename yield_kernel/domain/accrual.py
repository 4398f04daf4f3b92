"""
Accrual -- the checkpoint rule, as a pure function.

Responsibility:
    Given an investor's stored checkpoint, the farm's current index and
    the balance the investor held since that checkpoint, compute the new
    checkpoint.  CheckpointEngine persists the result; nothing here
    touches the database.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Yield accrues on the balance held DURING the interval, i.e. the
      balance before the change that triggered the reconcile.
    - The new checkpoint's claimed_index equals the farm index, so the
      same interval can never be credited twice.
    - pending_yield never decreases here; only a claim resets it.
"""

from dataclasses import dataclass

from yield_kernel.domain.dtos import AccrualCheckpoint
from yield_kernel.domain.fixed_point import scale_down


@dataclass(frozen=True)
class AccrualStep:
    """Outcome of one reconcile: the new checkpoint and what it added."""

    checkpoint: AccrualCheckpoint
    newly_owed: int
    owed_index: int


def accrue(
    checkpoint: AccrualCheckpoint,
    farm_index: int,
    balance_held: int,
) -> AccrualStep:
    """
    Advance ``checkpoint`` to ``farm_index`` crediting ``balance_held`` shares.

    Preconditions:
        - checkpoint.claimed_index <= farm_index (caller verifies).
        - balance_held >= 0.
    """
    if balance_held < 0:
        raise ValueError(f"balance_held must be non-negative, got {balance_held}")

    owed_index = farm_index - checkpoint.claimed_index
    newly_owed = scale_down(owed_index, balance_held)
    return AccrualStep(
        checkpoint=AccrualCheckpoint(
            claimed_index=farm_index,
            pending_yield=checkpoint.pending_yield + newly_owed,
        ),
        newly_owed=newly_owed,
        owed_index=owed_index,
    )
