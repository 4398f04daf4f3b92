"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

The revenue-update log and the settlement outbox are the audit trail of
the yield kernel.  A revenue update that could be edited after the fact
would let anyone rewrite what was distributed; a payment instruction that
could be deleted would hide a payout.  Farms, in turn, are never deleted:
their index is the reference point for every investor checkpoint.

SQLAlchemy fires events before UPDATE/DELETE statements reach the
database.  The listeners below intercept those events:

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
         |
         v
    [before_delete] --> _check_*_delete() --------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity              | Rule                         | Why
--------------------|------------------------------|------------------------------
RevenueUpdate       | No UPDATE, no DELETE         | Append-only ingestion log
PaymentInstruction  | No UPDATE, no DELETE         | Settlement outbox is evidence
Farm                | No DELETE                    | Checkpoints reference its index

===============================================================================
USAGE
===============================================================================

    from yield_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event

from yield_kernel.exceptions import ImmutabilityViolationError
from yield_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, target, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_revenue_update_immutability(mapper, connection, target):
    """Prevent any updates to RevenueUpdate records."""
    _block(
        "RevenueUpdate",
        target,
        "UPDATE",
        "Revenue updates are append-only and cannot be modified",
    )


def _check_revenue_update_delete(mapper, connection, target):
    """Prevent deletion of RevenueUpdate records."""
    _block(
        "RevenueUpdate",
        target,
        "DELETE",
        "Revenue updates cannot be deleted",
    )


def _check_payment_instruction_immutability(mapper, connection, target):
    """Prevent any updates to PaymentInstruction records."""
    _block(
        "PaymentInstruction",
        target,
        "UPDATE",
        "Payment instructions are append-only and cannot be modified",
    )


def _check_payment_instruction_delete(mapper, connection, target):
    """Prevent deletion of PaymentInstruction records."""
    _block(
        "PaymentInstruction",
        target,
        "DELETE",
        "Payment instructions cannot be deleted",
    )


def _check_farm_delete(mapper, connection, target):
    """Prevent deletion of Farm records."""
    _block(
        "Farm",
        target,
        "DELETE",
        "Farms are never deleted",
    )


def _listeners():
    from yield_kernel.models.farm import Farm
    from yield_kernel.models.payment_instruction import PaymentInstruction
    from yield_kernel.models.revenue_update import RevenueUpdate

    return (
        (RevenueUpdate, "before_update", _check_revenue_update_immutability),
        (RevenueUpdate, "before_delete", _check_revenue_update_delete),
        (PaymentInstruction, "before_update", _check_payment_instruction_immutability),
        (PaymentInstruction, "before_delete", _check_payment_instruction_delete),
        (Farm, "before_delete", _check_farm_delete),
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Idempotent: listeners already registered are left in place.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
