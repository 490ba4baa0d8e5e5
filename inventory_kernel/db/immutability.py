"""
ORM-Level Immutability Enforcement for the movement log (Layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

The movement log is the audit trail for every unit that entered, left, or
moved between locations.  A movement, once written, is history: corrections
are new movements, never edits.

  Layer 1: THIS FILE (ORM event listeners)
    - Catches modifications through Python/SQLAlchemy code
    - Fires BEFORE the SQL is sent to the database

  Layer 2: db/triggers.py (PostgreSQL triggers)
    - Catches raw SQL, bulk UPDATE statements, direct psql access

===============================================================================
HOW IT WORKS
===============================================================================

    session.flush()
         |
         v
    [before_update event] --> _check_movement_immutability() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _check_movement_delete() --------> ImmutabilityViolationError

If a check fails the flush is aborted and the database is never modified.

===============================================================================
USAGE
===============================================================================

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # idempotent, called by models/__init__

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_movement_immutability(mapper, connection, target):
    """Prevent any update to InventoryMovement rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "InventoryMovement",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="InventoryMovement",
        entity_id=str(target.id),
        reason="Inventory movements are immutable and cannot be modified",
    )


def _check_movement_delete(mapper, connection, target):
    """Prevent deletion of InventoryMovement rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "InventoryMovement",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="InventoryMovement",
        entity_id=str(target.id),
        reason="Inventory movements cannot be deleted",
    )


_LISTENERS = (
    ("before_update", _check_movement_immutability),
    ("before_delete", _check_movement_delete),
)


def register_immutability_listeners():
    """
    Register the movement immutability listeners.

    Safe to call repeatedly; a listener already registered is skipped.
    """
    from inventory_kernel.models.movement import InventoryMovement

    for event_name, listener_fn in _LISTENERS:
        if not event.contains(InventoryMovement, event_name, listener_fn):
            event.listen(InventoryMovement, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the movement immutability listeners.

    WARNING: Only use this in tests that must violate immutability on
    purpose to verify the database-level layer.
    """
    from inventory_kernel.models.movement import InventoryMovement

    for event_name, listener_fn in _LISTENERS:
        if event.contains(InventoryMovement, event_name, listener_fn):
            event.remove(InventoryMovement, event_name, listener_fn)


def listeners_registered() -> bool:
    from inventory_kernel.models.movement import InventoryMovement

    return all(
        event.contains(InventoryMovement, event_name, listener_fn)
        for event_name, listener_fn in _LISTENERS
    )
