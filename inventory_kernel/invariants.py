"""
Kernel Invariants Contract.

These invariants are structural law.  They are enforced by the ledger
service's guarded UPDATE statements, by named CHECK constraints, and by the
movement immutability listeners and triggers.  No configuration may turn
them off.

This module exists solely to declare them explicitly.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the inventory kernel."""

    RESERVED_WITHIN_QUANTITY = "reserved_within_quantity"
    """0 <= reserved_quantity <= quantity on every ledger row.  Enforced by
    the guarded UPDATEs in LedgerService and by CHECK constraints."""

    AVAILABLE_DERIVED = "available_derived"
    """available_quantity == quantity - reserved_quantity on every row.
    Written in the same statement as the fields it derives from."""

    NO_OVERSELL = "no_oversell"
    """Concurrent reservations never grant more units than were available.
    Enforced by a single conditional UPDATE per reservation."""

    MOVEMENT_PER_MUTATION = "movement_per_mutation"
    """Every successful quantity change writes exactly one movement in the
    same transaction; a rejected change writes none."""

    MOVEMENT_IMMUTABILITY = "movement_immutability"
    """Movements are append-only.  Enforced by ORM listeners
    (inventory_kernel.db.immutability) and PostgreSQL triggers."""

    TRANSFER_CONSERVATION = "transfer_conservation"
    """A transfer changes the sum of quantity across the two locations by
    zero.  Both rows change in one transaction."""

    SEQUENCE_MONOTONICITY = "sequence_monotonicity"
    """Movement seq values are strictly increasing, allocated from a locked
    counter row."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# Enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "inventory_config",
)
