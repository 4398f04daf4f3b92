"""
Typed Exception Hierarchy for the Yield Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Yield accounting must fail precisely. A caller that gets a ValueError
back from ``submit_revenue`` has to parse a message to learn whether the
oracle was wrong, the farm was missing, or the farm had no shares.  Every
failure in this package therefore has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, stable across releases)
  3. A KIND attribute (coarse taxonomy shared with OperationResult)
  4. Structured DATA (farm_id, investor, caller, amounts)

Example:
    try:
        ingestion.submit_revenue(farm_id=7, kwh=0, price=10, caller=oracle)
    except InvalidRevenueError as e:
        api_response(code=e.code, kwh=e.kwh, price=e.price)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    YieldKernelError (base)
    |
    +-- AuthorizationError
    |   +-- NotAuthorizedOracleError
    |
    +-- FarmError
    |   +-- FarmNotFoundError
    |   +-- FarmAlreadyExistsError
    |   +-- InvalidFarmIdError
    |   +-- InvalidShareCountError
    |   +-- ZeroSharesError
    |
    +-- RevenueError
    |   +-- InvalidRevenueError
    |
    +-- ClaimError
    |   +-- NoPendingYieldError
    |
    +-- IdentityError
    |   +-- InvalidIdentityError
    |
    +-- FixedPointError
    |   +-- FixedPointDivisionByZeroError
    |
    +-- IntegrityError
        +-- ImmutabilityViolationError
        +-- AccrualIndexRegressionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind             | Code                       | When Raised
-----------------|----------------------------|------------------------------------
NOT_AUTHORIZED   | ORACLE_NOT_AUTHORIZED      | Caller is not the current oracle
NOT_FOUND        | FARM_NOT_FOUND             | Farm id was never registered
INVALID_INPUT    | FARM_ALREADY_EXISTS        | Duplicate registerFarm
                 | INVALID_SHARE_COUNT        | Non-positive initial / negative total
                 | ZERO_SHARES                | Revenue for a farm with no shares
                 | INVALID_REVENUE            | kwh * price <= 0
                 | INVALID_IDENTITY           | Empty investor / oracle identity
                 | FIXED_POINT_DIVISION_BY_ZERO | scale_up with zero shares
NOTHING_TO_CLAIM | NO_PENDING_YIELD           | Claim with zero pending yield
INTEGRITY        | IMMUTABILITY_VIOLATION     | Update/delete of append-only row
                 | ACCRUAL_INDEX_REGRESSION   | claimed_index above farm index
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Coarse failure taxonomy reported on every OperationResult."""

    NOT_AUTHORIZED = "not_authorized"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    NOTHING_TO_CLAIM = "nothing_to_claim"
    INTEGRITY = "integrity"


class YieldKernelError(Exception):
    """
    Base exception for all yield kernel errors.

    All subclasses must define ``code`` and ``kind`` class attributes.
    """

    code: str = "YIELD_KERNEL_ERROR"
    kind: ErrorKind = ErrorKind.INVALID_INPUT


# Authorization


class AuthorizationError(YieldKernelError):
    """Base exception for caller-role failures."""

    code: str = "AUTHORIZATION_ERROR"
    kind: ErrorKind = ErrorKind.NOT_AUTHORIZED


class NotAuthorizedOracleError(AuthorizationError):
    """Revenue was submitted by someone other than the current oracle."""

    code: str = "ORACLE_NOT_AUTHORIZED"

    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(f"Caller {caller!r} is not the registered oracle")


# Farm-related exceptions


class FarmError(YieldKernelError):
    """Base exception for farm-related errors."""

    code: str = "FARM_ERROR"


class FarmNotFoundError(FarmError):
    """Farm with given id was never registered."""

    code: str = "FARM_NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND

    def __init__(self, farm_id: int):
        self.farm_id = farm_id
        super().__init__(f"Farm not found: {farm_id}")


class FarmAlreadyExistsError(FarmError):
    """Farm id is already registered."""

    code: str = "FARM_ALREADY_EXISTS"

    def __init__(self, farm_id: int):
        self.farm_id = farm_id
        super().__init__(f"Farm already exists: {farm_id}")


class InvalidFarmIdError(FarmError):
    """Farm id is not an unsigned integer the ledger can store."""

    code: str = "INVALID_FARM_ID"

    def __init__(self, farm_id: object):
        self.farm_id = farm_id
        super().__init__(f"Invalid farm id: {farm_id!r}")


class InvalidShareCountError(FarmError):
    """Share count is not acceptable for the requested operation."""

    code: str = "INVALID_SHARE_COUNT"

    def __init__(self, farm_id: int, shares: int, reason: str):
        self.farm_id = farm_id
        self.shares = shares
        self.reason = reason
        super().__init__(f"Invalid share count {shares} for farm {farm_id}: {reason}")


class ZeroSharesError(FarmError):
    """Revenue cannot be distributed across zero outstanding shares."""

    code: str = "ZERO_SHARES"

    def __init__(self, farm_id: int):
        self.farm_id = farm_id
        super().__init__(
            f"Farm {farm_id} has no outstanding shares; revenue rejected"
        )


# Revenue-related exceptions


class RevenueError(YieldKernelError):
    """Base exception for revenue ingestion errors."""

    code: str = "REVENUE_ERROR"


class InvalidRevenueError(RevenueError):
    """kwh * price did not produce a positive revenue."""

    code: str = "INVALID_REVENUE"

    def __init__(self, farm_id: int, kwh: int, price: int):
        self.farm_id = farm_id
        self.kwh = kwh
        self.price = price
        super().__init__(
            f"Revenue for farm {farm_id} must be positive "
            f"(kwh={kwh}, price={price})"
        )


# Claim-related exceptions


class ClaimError(YieldKernelError):
    """Base exception for claim errors."""

    code: str = "CLAIM_ERROR"
    kind: ErrorKind = ErrorKind.NOTHING_TO_CLAIM


class NoPendingYieldError(ClaimError):
    """Investor has nothing pending for this farm."""

    code: str = "NO_PENDING_YIELD"

    def __init__(self, farm_id: int, investor: str):
        self.farm_id = farm_id
        self.investor = investor
        super().__init__(
            f"No pending yield for investor {investor!r} on farm {farm_id}"
        )


# Identity


class IdentityError(YieldKernelError):
    """Base exception for identity validation."""

    code: str = "IDENTITY_ERROR"


class InvalidIdentityError(IdentityError):
    """An investor or oracle identity is empty, too long, or not a string."""

    code: str = "INVALID_IDENTITY"

    def __init__(self, role: str, identity: object):
        self.role = role
        self.identity = identity
        super().__init__(f"Invalid {role} identity: {identity!r}")


# Fixed-point arithmetic


class FixedPointError(YieldKernelError):
    """Base exception for fixed-point arithmetic errors."""

    code: str = "FIXED_POINT_ERROR"


class FixedPointDivisionByZeroError(FixedPointError):
    """scale_up was asked to divide revenue across zero shares."""

    code: str = "FIXED_POINT_DIVISION_BY_ZERO"

    def __init__(self, revenue: int):
        self.revenue = revenue
        super().__init__(f"Cannot scale revenue {revenue} across zero shares")


# Integrity


class IntegrityError(YieldKernelError):
    """Base exception for stored-state integrity violations."""

    code: str = "INTEGRITY_ERROR"
    kind: ErrorKind = ErrorKind.INTEGRITY


class ImmutabilityViolationError(IntegrityError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


class AccrualIndexRegressionError(IntegrityError):
    """
    A stored checkpoint is ahead of the farm's accumulated index.

    The farm index only grows, so this can only happen if storage was
    tampered with.  Reconciling would otherwise credit a negative amount.
    """

    code: str = "ACCRUAL_INDEX_REGRESSION"

    def __init__(self, farm_id: int, investor: str, claimed_index: int, farm_index: int):
        self.farm_id = farm_id
        self.investor = investor
        self.claimed_index = claimed_index
        self.farm_index = farm_index
        super().__init__(
            f"Checkpoint for {investor!r} on farm {farm_id} is ahead of the "
            f"farm index ({claimed_index} > {farm_index})"
        )
