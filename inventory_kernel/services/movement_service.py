"""
MovementService -- append-only writer for the movement log.

Responsibility:
    Validates a MovementSpec, allocates its ``seq`` and inserts one
    InventoryMovement row in the caller's transaction.  Ledger mutations
    call ``record()`` after their row update, so a failed record fails
    the mutation it belongs to.

Invariants enforced:
    - quantity is a positive integer.
    - A transfer names two distinct locations.
    - Any movement other than an adjustment names at least one location.
    - Rows are never updated or deleted (db/immutability.py, db/triggers.py).

Failure modes:
    - InvalidMovementError for a malformed spec (nothing is written).
    - StorageError on backing-store failure.
"""

from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import MovementRecord, MovementSpec
from inventory_kernel.domain.values import MovementAction, MovementType
from inventory_kernel.exceptions import InvalidMovementError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.movement import InventoryMovement
from inventory_kernel.services.base import BaseService, storage_errors
from inventory_kernel.services.sequence_service import SequenceService

logger = get_logger("services.movement")


def validate_movement_spec(spec: MovementSpec) -> None:
    """
    Raise InvalidMovementError if ``spec`` cannot be recorded.
    """
    quantity = spec.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidMovementError(f"quantity must be an integer, got {quantity!r}")
    if quantity <= 0:
        raise InvalidMovementError(f"quantity must be positive, got {quantity}")

    try:
        movement_type = MovementType(spec.movement_type)
        MovementAction(spec.action)
    except ValueError as exc:
        raise InvalidMovementError(str(exc)) from exc

    if spec.created_by is None:
        raise InvalidMovementError("created_by is required")

    if movement_type == MovementType.TRANSFER:
        if spec.from_location_id is None or spec.to_location_id is None:
            raise InvalidMovementError("transfer requires both locations")
        if spec.from_location_id == spec.to_location_id:
            raise InvalidMovementError("transfer locations must differ")
    elif (
        movement_type != MovementType.ADJUSTMENT
        and spec.from_location_id is None
        and spec.to_location_id is None
    ):
        raise InvalidMovementError(
            f"{movement_type.value} movement must name a location"
        )


class MovementService(BaseService[InventoryMovement]):
    """
    Appends movements.

    The only write path into ``inventory_movements``.  Timestamps come from
    the injected clock.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._sequences = SequenceService(session)

    def record(self, spec: MovementSpec) -> MovementRecord:
        """
        Append one movement.

        Raises:
            InvalidMovementError: ``spec`` is malformed.
            StorageError: the insert failed.
        """
        validate_movement_spec(spec)

        with storage_errors("record_movement"):
            seq = self._sequences.next_value(SequenceService.MOVEMENT)
            movement = InventoryMovement(
                seq=seq,
                vendor_id=spec.vendor_id,
                product_id=spec.product_id,
                from_location_id=spec.from_location_id,
                to_location_id=spec.to_location_id,
                quantity=spec.quantity,
                movement_type=MovementType(spec.movement_type),
                action=MovementAction(spec.action),
                reason=spec.reason,
                reference_id=spec.reference_id,
                created_by=spec.created_by,
                created_at=self._clock.now(),
            )
            self.session.add(movement)
            self.session.flush()

        logger.info(
            "movement_recorded",
            extra={
                "seq": seq,
                "movement_type": movement.movement_type.value,
                "action": movement.action.value,
                "product_id": str(spec.product_id),
                "quantity": spec.quantity,
                "reference_id": spec.reference_id,
            },
        )
        return MovementRecord.from_model(movement)
