"""
Fixed-point accrual math.

Responsibility:
    Integer-only scaling helpers used to spread revenue across shares
    without losing sub-unit precision.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Rounding policy:
    Both directions truncate.  scale_up() floors the per-share delta and
    scale_down() floors each investor's share of it, so the sum of all
    credited yield never exceeds the revenue ingested.  The remainder
    ("dust") stays in the system.  Distribution is at most fair, never
    over-fair.

Failure modes:
    - FixedPointDivisionByZeroError if scale_up() is given zero shares.
      Callers check the share count first and raise ZeroSharesError.
"""

from yield_kernel.exceptions import FixedPointDivisionByZeroError

SCALE = 1_000_000


def scale_up(revenue: int, total_shares: int) -> int:
    """
    Per-share index delta for ``revenue`` spread over ``total_shares``.

    Returns ``(revenue * SCALE) // total_shares``.

    Raises:
        FixedPointDivisionByZeroError: If total_shares is 0.
    """
    if total_shares == 0:
        raise FixedPointDivisionByZeroError(revenue)
    return (revenue * SCALE) // total_shares


def scale_down(delta_index: int, share_count: int) -> int:
    """Yield owed on ``share_count`` shares for an index movement of ``delta_index``."""
    return (delta_index * share_count) // SCALE


def max_dust(total_shares: int) -> int:
    """
    Upper bound, in scaled units, on what scale_up() truncates per event.

    ``revenue * SCALE - delta * total_shares`` is the remainder of the
    floor division and is always strictly below ``total_shares``.
    """
    return max(total_shares - 1, 0)
