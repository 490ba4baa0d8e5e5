"""
LedgerService -- the location inventory ledger.

Responsibility:
    Owns every change to a (location, product) quantity triple: direct set,
    reserve, release, fulfill, and two-location transfer.  Each successful
    mutation writes exactly one movement in the same transaction; a rejected
    mutation writes none and leaves the row untouched.

Architecture position:
    Kernel > Services -- imperative shell.  Flushes only; the caller owns
    commit/rollback (see services/base.py).

Invariants enforced (after every operation, on every row):
    0 <= reserved_quantity <= quantity
    available_quantity == quantity - reserved_quantity

Concurrency:
    reserve, release and fulfill are each ONE conditional UPDATE.  The
    guard and the change happen in the same statement and the affected-row
    count decides success, so two checkouts racing for the last unit can
    never both win:

        UPDATE location_inventory
           SET reserved_quantity  = reserved_quantity + :qty,
               available_quantity = quantity - reserved_quantity - :qty
         WHERE location_id = :loc AND product_id = :prod
           AND quantity - reserved_quantity >= :qty

    set_quantity and transfer read before they write, so they lock first
    (SELECT ... FOR UPDATE on PostgreSQL; on SQLite the transaction already
    holds the database write lock).  transfer locks both rows ordered by
    location_id, so opposing transfers cannot deadlock.  The movement
    sequence counter is always locked after the ledger rows.

Failure modes:
    - InvalidQuantityError / InvalidReferenceError: malformed input.
    - LocationNotFoundError / VendorScopeError: unknown or foreign location.
    - InsufficientAvailableError: reserve beyond available.
    - InvalidReservationStateError: release/fulfill beyond reserved.
    - QuantityBelowReservedError: set_quantity below reserved.
    - InsufficientStockError: transfer beyond what may leave the source.
    - StorageError: backing-store failure (retryable by the caller).

Nothing here retries.  Callers treat stock errors as ordinary outcomes.
"""

from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from inventory_kernel.db.dialect import upsert_insert
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import MovementSpec, StockLevel, TransferResult
from inventory_kernel.domain.values import (
    SYSTEM_ACTOR_ID,
    MovementAction,
    MovementType,
)
from inventory_kernel.exceptions import (
    InsufficientAvailableError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidReferenceError,
    InvalidReservationStateError,
    InvalidTransferError,
    LocationNotFoundError,
    QuantityBelowReservedError,
    VendorScopeError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.location import InventoryLocation
from inventory_kernel.models.location_inventory import LocationInventory
from inventory_kernel.services.base import BaseService, storage_errors
from inventory_kernel.services.movement_service import MovementService

logger = get_logger("services.ledger")


def _require_quantity(quantity, *, allow_zero: bool = False) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity, "must be an integer")
    if quantity < 0:
        raise InvalidQuantityError(quantity, "must not be negative")
    if quantity == 0 and not allow_zero:
        raise InvalidQuantityError(quantity, "must be positive")


def _require_reference(value, field: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidReferenceError(field)


class LedgerService(BaseService[LocationInventory]):
    """
    Quantity/reserved/available ledger per (location, product).

    Every public method returns the row's state after the change as a
    StockLevel.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._movements = MovementService(session, clock=self._clock)

    # =========================================================================
    # Row and location helpers
    # =========================================================================

    def _get_location(self, location_id: UUID, vendor_id: UUID | None) -> InventoryLocation:
        location = self.session.get(InventoryLocation, location_id)
        if location is None:
            raise LocationNotFoundError(str(location_id))
        if vendor_id is not None and location.vendor_id != vendor_id:
            raise VendorScopeError(str(location_id), str(vendor_id), str(location.vendor_id))
        return location

    def _row_filter(self, location_id: UUID, product_id: UUID):
        return (
            LocationInventory.location_id == location_id,
            LocationInventory.product_id == product_id,
        )

    def _read_row(self, location_id: UUID, product_id: UUID) -> LocationInventory | None:
        return self.session.execute(
            select(LocationInventory)
            .where(*self._row_filter(location_id, product_id))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _lock_rows(self, location_ids: list[UUID], product_id: UUID) -> dict[UUID, LocationInventory]:
        rows = self.session.execute(
            select(LocationInventory)
            .where(
                LocationInventory.location_id.in_(location_ids),
                LocationInventory.product_id == product_id,
            )
            .order_by(LocationInventory.location_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars()
        return {row.location_id: row for row in rows}

    def _ensure_row(self, location_id: UUID, product_id: UUID, actor_id: UUID) -> None:
        """Create an all-zero row unless one exists.  Races resolve in ON CONFLICT."""
        stmt = (
            upsert_insert(self.session, LocationInventory.__table__)
            .values(
                id=uuid4(),
                location_id=location_id,
                product_id=product_id,
                quantity=0,
                reserved_quantity=0,
                available_quantity=0,
                created_by_id=actor_id,
            )
            .on_conflict_do_nothing(index_elements=["location_id", "product_id"])
        )
        self.session.execute(stmt)

    def _guarded_update(self, location_id: UUID, product_id: UUID, guard, **values) -> bool:
        result = self.session.execute(
            update(LocationInventory)
            .where(*self._row_filter(location_id, product_id), guard)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _current(self, location_id: UUID, product_id: UUID) -> StockLevel:
        row = self._read_row(location_id, product_id)
        if row is None:
            return StockLevel.zero(location_id, product_id)
        return StockLevel.from_model(row)

    # =========================================================================
    # Direct set
    # =========================================================================

    def set_quantity(
        self,
        location_id: UUID,
        product_id: UUID,
        quantity: int,
        actor_id: UUID,
        *,
        reason: str | None = None,
        vendor_id: UUID | None = None,
    ) -> StockLevel:
        """
        Set on-hand quantity to an absolute value (stock count, receiving).

        Reserved units are kept; available becomes quantity - reserved.
        Writes one adjustment movement of |delta|.  A zero delta writes
        nothing, and setting 0 where no row exists does not create one.

        Raises:
            InvalidQuantityError: quantity is negative or not an integer.
            QuantityBelowReservedError: quantity < reserved_quantity.
        """
        _require_quantity(quantity, allow_zero=True)

        with storage_errors("set_quantity"):
            location = self._get_location(location_id, vendor_id)
            row = self._lock_rows([location_id], product_id).get(location_id)

            if row is None:
                if quantity == 0:
                    return StockLevel.zero(location_id, product_id)
                self._ensure_row(location_id, product_id, actor_id)
                row = self._lock_rows([location_id], product_id)[location_id]

            if quantity < row.reserved_quantity:
                logger.info(
                    "stock_set_rejected",
                    extra={
                        "location_id": str(location_id),
                        "product_id": str(product_id),
                        "requested_quantity": quantity,
                        "reserved_quantity": row.reserved_quantity,
                    },
                )
                raise QuantityBelowReservedError(
                    str(location_id), str(product_id), quantity, row.reserved_quantity
                )

            previous = row.quantity
            delta = quantity - previous
            if delta == 0:
                return StockLevel.from_model(row)

            applied = self._guarded_update(
                location_id,
                product_id,
                LocationInventory.reserved_quantity <= quantity,
                quantity=quantity,
                available_quantity=quantity - LocationInventory.reserved_quantity,
                updated_by_id=actor_id,
            )
            if not applied:
                current = self._current(location_id, product_id)
                raise QuantityBelowReservedError(
                    str(location_id), str(product_id), quantity, current.reserved_quantity
                )

            self._movements.record(
                MovementSpec(
                    vendor_id=location.vendor_id,
                    product_id=product_id,
                    quantity=abs(delta),
                    movement_type=MovementType.ADJUSTMENT,
                    action=MovementAction.STOCK_SET,
                    created_by=actor_id,
                    from_location_id=location_id if delta < 0 else None,
                    to_location_id=location_id if delta > 0 else None,
                    reason=reason or f"Stock set from {previous} to {quantity}",
                )
            )
            level = self._current(location_id, product_id)

        logger.info(
            "stock_set",
            extra={
                "location_id": str(location_id),
                "product_id": str(product_id),
                "previous_quantity": previous,
                "quantity": level.quantity,
                "delta": delta,
            },
        )
        return level

    # =========================================================================
    # Reservation lifecycle
    # =========================================================================

    def reserve(
        self,
        location_id: UUID,
        product_id: UUID,
        quantity: int,
        order_ref: str,
        *,
        actor_id: UUID | None = None,
        vendor_id: UUID | None = None,
    ) -> StockLevel:
        """
        Commit ``quantity`` available units to an order.

        A location without a row for the product has zero available.

        Raises:
            InsufficientAvailableError: fewer than ``quantity`` available.
        """
        _require_quantity(quantity)
        _require_reference(order_ref, "order_ref")
        actor = actor_id or SYSTEM_ACTOR_ID

        with LogContext.bind(order_ref=order_ref), storage_errors("reserve"):
            location = self._get_location(location_id, vendor_id)

            granted = self._guarded_update(
                location_id,
                product_id,
                LocationInventory.quantity - LocationInventory.reserved_quantity >= quantity,
                reserved_quantity=LocationInventory.reserved_quantity + quantity,
                available_quantity=(
                    LocationInventory.quantity - LocationInventory.reserved_quantity - quantity
                ),
                updated_by_id=actor,
            )
            if not granted:
                current = self._current(location_id, product_id)
                logger.info(
                    "reservation_rejected",
                    extra={
                        "location_id": str(location_id),
                        "product_id": str(product_id),
                        "requested": quantity,
                        "available_quantity": current.available_quantity,
                    },
                )
                raise InsufficientAvailableError(
                    str(location_id), str(product_id), quantity, current.available_quantity
                )

            self._movements.record(
                MovementSpec(
                    vendor_id=location.vendor_id,
                    product_id=product_id,
                    quantity=quantity,
                    movement_type=MovementType.OUTBOUND,
                    action=MovementAction.RESERVED,
                    created_by=actor,
                    from_location_id=location_id,
                    reason=f"Order reservation for order {order_ref}",
                    reference_id=order_ref,
                )
            )
            level = self._current(location_id, product_id)

            logger.info(
                "stock_reserved",
                extra={
                    "location_id": str(location_id),
                    "product_id": str(product_id),
                    "quantity": quantity,
                    "available_quantity": level.available_quantity,
                },
            )
        return level

    def release(
        self,
        location_id: UUID,
        product_id: UUID,
        quantity: int,
        order_ref: str,
        *,
        actor_id: UUID | None = None,
        vendor_id: UUID | None = None,
    ) -> StockLevel:
        """
        Return ``quantity`` reserved units to available (order cancelled).

        On-hand quantity is unchanged.

        Raises:
            InvalidReservationStateError: fewer than ``quantity`` reserved.
        """
        _require_quantity(quantity)
        _require_reference(order_ref, "order_ref")
        actor = actor_id or SYSTEM_ACTOR_ID

        with LogContext.bind(order_ref=order_ref), storage_errors("release"):
            location = self._get_location(location_id, vendor_id)

            released = self._guarded_update(
                location_id,
                product_id,
                LocationInventory.reserved_quantity >= quantity,
                reserved_quantity=LocationInventory.reserved_quantity - quantity,
                available_quantity=LocationInventory.available_quantity + quantity,
                updated_by_id=actor,
            )
            if not released:
                current = self._current(location_id, product_id)
                logger.warning(
                    "release_rejected",
                    extra={
                        "location_id": str(location_id),
                        "product_id": str(product_id),
                        "requested": quantity,
                        "reserved_quantity": current.reserved_quantity,
                    },
                )
                raise InvalidReservationStateError(
                    str(location_id),
                    str(product_id),
                    "release",
                    quantity,
                    current.reserved_quantity,
                )

            self._movements.record(
                MovementSpec(
                    vendor_id=location.vendor_id,
                    product_id=product_id,
                    quantity=quantity,
                    movement_type=MovementType.INBOUND,
                    action=MovementAction.RELEASED,
                    created_by=actor,
                    to_location_id=location_id,
                    reason=f"Reservation released for order {order_ref}",
                    reference_id=order_ref,
                )
            )
            level = self._current(location_id, product_id)

            logger.info(
                "reservation_released",
                extra={
                    "location_id": str(location_id),
                    "product_id": str(product_id),
                    "quantity": quantity,
                    "available_quantity": level.available_quantity,
                },
            )
        return level

    def fulfill(
        self,
        location_id: UUID,
        product_id: UUID,
        quantity: int,
        order_ref: str,
        *,
        actor_id: UUID | None = None,
        vendor_id: UUID | None = None,
    ) -> StockLevel:
        """
        Ship ``quantity`` reserved units: on-hand and reserved both drop,
        available is unchanged.

        Raises:
            InvalidReservationStateError: fewer than ``quantity`` reserved.
        """
        _require_quantity(quantity)
        _require_reference(order_ref, "order_ref")
        actor = actor_id or SYSTEM_ACTOR_ID

        with LogContext.bind(order_ref=order_ref), storage_errors("fulfill"):
            location = self._get_location(location_id, vendor_id)

            fulfilled = self._guarded_update(
                location_id,
                product_id,
                LocationInventory.reserved_quantity >= quantity,
                quantity=LocationInventory.quantity - quantity,
                reserved_quantity=LocationInventory.reserved_quantity - quantity,
                updated_by_id=actor,
            )
            if not fulfilled:
                current = self._current(location_id, product_id)
                logger.warning(
                    "fulfillment_rejected",
                    extra={
                        "location_id": str(location_id),
                        "product_id": str(product_id),
                        "requested": quantity,
                        "reserved_quantity": current.reserved_quantity,
                    },
                )
                raise InvalidReservationStateError(
                    str(location_id),
                    str(product_id),
                    "fulfill",
                    quantity,
                    current.reserved_quantity,
                )

            self._movements.record(
                MovementSpec(
                    vendor_id=location.vendor_id,
                    product_id=product_id,
                    quantity=quantity,
                    movement_type=MovementType.OUTBOUND,
                    action=MovementAction.FULFILLED,
                    created_by=actor,
                    from_location_id=location_id,
                    reason=f"Order fulfillment for order {order_ref}",
                    reference_id=order_ref,
                )
            )
            level = self._current(location_id, product_id)

            logger.info(
                "stock_fulfilled",
                extra={
                    "location_id": str(location_id),
                    "product_id": str(product_id),
                    "quantity": quantity,
                    "remaining_quantity": level.quantity,
                },
            )
        return level

    # =========================================================================
    # Transfer
    # =========================================================================

    def transfer(
        self,
        from_location_id: UUID,
        to_location_id: UUID,
        product_id: UUID,
        quantity: int,
        reason: str | None,
        actor_id: UUID,
        *,
        reference_id: str | None = None,
        vendor_id: UUID | None = None,
    ) -> TransferResult:
        """
        Move ``quantity`` on-hand units between two locations of one vendor.

        Reserved units cannot leave: the source must keep at least its
        reserved quantity.  The destination row is created if missing.
        Writes exactly one transfer movement naming both locations.

        Raises:
            InvalidTransferError: source and destination are the same.
            LocationNotFoundError: either location is unknown.
            VendorScopeError: the locations belong to different vendors.
            InsufficientStockError: the source cannot give ``quantity``.
        """
        _require_quantity(quantity)
        if from_location_id == to_location_id:
            raise InvalidTransferError(
                str(from_location_id),
                str(to_location_id),
                "source and destination must differ",
            )
        reference = reference_id or f"transfer_{uuid4().hex}"

        with LogContext.bind(order_ref=reference), storage_errors("transfer"):
            source = self._get_location(from_location_id, vendor_id)
            destination = self._get_location(to_location_id, vendor_id)
            if source.vendor_id != destination.vendor_id:
                raise VendorScopeError(
                    str(to_location_id), str(source.vendor_id), str(destination.vendor_id)
                )

            rows = self._lock_rows([from_location_id, to_location_id], product_id)
            source_row = rows.get(from_location_id)
            on_hand = source_row.quantity if source_row else 0
            reserved = source_row.reserved_quantity if source_row else 0
            if quantity > on_hand - reserved:
                logger.info(
                    "transfer_rejected",
                    extra={
                        "from_location_id": str(from_location_id),
                        "to_location_id": str(to_location_id),
                        "product_id": str(product_id),
                        "requested": quantity,
                        "quantity": on_hand,
                        "reserved_quantity": reserved,
                    },
                )
                raise InsufficientStockError(
                    str(from_location_id), str(product_id), quantity, on_hand, reserved
                )

            if to_location_id not in rows:
                self._ensure_row(to_location_id, product_id, actor_id)
                self._lock_rows([to_location_id], product_id)

            # Both rows change or neither
            with self.session.begin_nested():
                taken = self._guarded_update(
                    from_location_id,
                    product_id,
                    LocationInventory.quantity - LocationInventory.reserved_quantity >= quantity,
                    quantity=LocationInventory.quantity - quantity,
                    available_quantity=LocationInventory.available_quantity - quantity,
                    updated_by_id=actor_id,
                )
                if not taken:
                    current = self._current(from_location_id, product_id)
                    raise InsufficientStockError(
                        str(from_location_id),
                        str(product_id),
                        quantity,
                        current.quantity,
                        current.reserved_quantity,
                    )
                received = self._guarded_update(
                    to_location_id,
                    product_id,
                    LocationInventory.quantity >= 0,
                    quantity=LocationInventory.quantity + quantity,
                    available_quantity=LocationInventory.available_quantity + quantity,
                    updated_by_id=actor_id,
                )
                if not received:
                    raise LocationNotFoundError(str(to_location_id))

            movement = self._movements.record(
                MovementSpec(
                    vendor_id=source.vendor_id,
                    product_id=product_id,
                    quantity=quantity,
                    movement_type=MovementType.TRANSFER,
                    action=MovementAction.TRANSFERRED,
                    created_by=actor_id,
                    from_location_id=from_location_id,
                    to_location_id=to_location_id,
                    reason=reason or f"Transfer from {source.name} to {destination.name}",
                    reference_id=reference,
                )
            )
            result = TransferResult(
                source=self._current(from_location_id, product_id),
                destination=self._current(to_location_id, product_id),
                movement=movement,
            )

            logger.info(
                "transfer_completed",
                extra={
                    "from_location_id": str(from_location_id),
                    "to_location_id": str(to_location_id),
                    "product_id": str(product_id),
                    "quantity": quantity,
                    "movement_seq": movement.seq,
                },
            )
        return result
