"""
Boundary checks shared by the kernel services and selectors.

Inputs arrive from collaborators (share ledger, oracle gateway) as plain
Python values.  These helpers reject values that the unsigned-integer
data model cannot represent before any row is touched.
"""

from yield_kernel.exceptions import InvalidFarmIdError, InvalidIdentityError

# Largest value a BIGINT column (farm_id, nonce) holds
MAX_BIGINT = 2**63 - 1
MAX_FARM_ID = MAX_BIGINT

# Width of the investor, recipient and oracle columns
MAX_IDENTITY_LENGTH = 128


def is_uint(value: object) -> bool:
    """True for non-negative ints (bool excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def fits_bigint(value: object) -> bool:
    """True for unsigned ints that a BIGINT column can store."""
    return is_uint(value) and value <= MAX_BIGINT


def require_farm_id(farm_id: object) -> int:
    """Return ``farm_id`` if it is an int in [0, MAX_FARM_ID], else raise."""
    if not fits_bigint(farm_id):
        raise InvalidFarmIdError(farm_id)
    return farm_id


def require_identity(role: str, identity: object) -> str:
    """Return ``identity`` if it is a non-empty string that fits its column."""
    if (
        not isinstance(identity, str)
        or not identity.strip()
        or len(identity) > MAX_IDENTITY_LENGTH
    ):
        raise InvalidIdentityError(role, identity)
    return identity
