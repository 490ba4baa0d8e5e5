"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Checkout flows, POS terminals and the vendor dashboard all react differently
to a failed ledger call. An "out of stock" at checkout is an ordinary outcome;
a storage failure is retryable; an over-release is a caller bug. Parsing
message strings to tell these apart is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        ledger.reserve(location_id, product_id, 2, "order-1")
    except Exception as e:
        if "insufficient" in str(e):
            show_out_of_stock()

Example - RIGHT way:
    try:
        ledger.reserve(location_id, product_id, 2, "order-1")
    except InsufficientAvailableError as e:
        show_out_of_stock(available=e.available_quantity)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InventoryKernelError:

    InventoryKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidQuantityError
    |   +-- InvalidReferenceError
    |   +-- QuantityBelowReservedError
    |   +-- InvalidLocationError
    |   +-- InvalidTransferError
    |   +-- VendorScopeError
    |   +-- InvalidThresholdsError
    |   +-- InvalidMovementError
    |   +-- InvalidSyncConfigError
    |
    +-- NotFoundError
    |   +-- LocationNotFoundError
    |   +-- SyncConfigNotFoundError
    |
    +-- StockError
    |   +-- InsufficientAvailableError
    |   +-- InsufficientStockError
    |
    +-- InvalidStateError
    |   +-- InvalidReservationStateError
    |
    +-- ConflictError
    |   +-- LocationNotEmptyError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- StorageError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_QUANTITY            | Zero/negative/non-integer quantity
                | INVALID_REFERENCE           | Empty order / reference id
                | QUANTITY_BELOW_RESERVED     | set_quantity below reserved units
                | INVALID_LOCATION            | Blank name, unknown location type
                | INVALID_TRANSFER            | Source and destination are the same
                | VENDOR_SCOPE_VIOLATION      | Location owned by another vendor
                | INVALID_THRESHOLDS          | Negative or overlapping thresholds
                | INVALID_MOVEMENT            | Malformed movement record
                | INVALID_SYNC_CONFIG         | Empty channel id
----------------|-----------------------------|-----------------------------------------
Not found       | LOCATION_NOT_FOUND          | Unknown location or outside vendor scope
                | SYNC_CONFIG_NOT_FOUND       | No config for (vendor, channel) key
----------------|-----------------------------|-----------------------------------------
Stock           | INSUFFICIENT_AVAILABLE      | Reserve exceeds available units
                | INSUFFICIENT_STOCK          | Transfer exceeds source stock
----------------|-----------------------------|-----------------------------------------
State           | INVALID_RESERVATION_STATE   | Release/fulfill exceeds reserved units
----------------|-----------------------------|-----------------------------------------
Conflict        | LOCATION_NOT_EMPTY          | Deleting a location that holds stock
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Updating/deleting a movement
----------------|-----------------------------|-----------------------------------------
Storage         | STORAGE_ERROR               | Backing-store failure (retryable)

===============================================================================
HANDLING PATTERNS
===============================================================================

1. STOCK ERRORS ARE ORDINARY OUTCOMES:

    except (InsufficientAvailableError, InsufficientStockError) as e:
        return {"error": e.code, "message": "out of stock"}

2. STORAGE ERRORS ARE RETRYABLE, BY THE CALLER:

    except StorageError as e:
        if e.retryable:
            schedule_retry()

   The ledger never retries on its own. Retrying a reserve for the same
   order without checking its movements first can double-reserve.

3. STATE ERRORS ARE CALLER BUGS:

    except InvalidReservationStateError as e:
        log.error("release exceeds reservation", extra={"code": e.code})

===============================================================================
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Validation exceptions


class ValidationError(InventoryKernelError):
    """Base exception for malformed input."""

    code: str = "VALIDATION_ERROR"


class InvalidQuantityError(ValidationError):
    """Quantity is not an acceptable integer for the operation."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object, reason: str):
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid quantity {quantity!r}: {reason}")


class InvalidReferenceError(ValidationError):
    """Order or reference id is missing."""

    code: str = "INVALID_REFERENCE"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} must be a non-empty string")


class QuantityBelowReservedError(ValidationError):
    """
    Attempted to set quantity below the units already reserved.

    Reservations must be released or fulfilled first.
    """

    code: str = "QUANTITY_BELOW_RESERVED"

    def __init__(
        self,
        location_id: str,
        product_id: str,
        requested_quantity: int,
        reserved_quantity: int,
    ):
        self.location_id = location_id
        self.product_id = product_id
        self.requested_quantity = requested_quantity
        self.reserved_quantity = reserved_quantity
        super().__init__(
            f"Cannot set quantity of {product_id} at {location_id} to "
            f"{requested_quantity}: {reserved_quantity} units are reserved"
        )


class InvalidLocationError(ValidationError):
    """Location attributes are invalid."""

    code: str = "INVALID_LOCATION"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid location: {reason}")


class InvalidTransferError(ValidationError):
    """Transfer request is malformed."""

    code: str = "INVALID_TRANSFER"

    def __init__(self, from_location_id: str, to_location_id: str, reason: str):
        self.from_location_id = from_location_id
        self.to_location_id = to_location_id
        self.reason = reason
        super().__init__(
            f"Invalid transfer {from_location_id} -> {to_location_id}: {reason}"
        )


class VendorScopeError(ValidationError):
    """A location outside the caller's vendor scope was involved."""

    code: str = "VENDOR_SCOPE_VIOLATION"

    def __init__(self, location_id: str, expected_vendor_id: str, actual_vendor_id: str):
        self.location_id = location_id
        self.expected_vendor_id = expected_vendor_id
        self.actual_vendor_id = actual_vendor_id
        super().__init__(
            f"Location {location_id} belongs to vendor {actual_vendor_id}, "
            f"not {expected_vendor_id}"
        )


class InvalidThresholdsError(ValidationError):
    """Stock classification thresholds are inconsistent."""

    code: str = "INVALID_THRESHOLDS"

    def __init__(self, low_threshold: int, overstock_threshold: int, reason: str):
        self.low_threshold = low_threshold
        self.overstock_threshold = overstock_threshold
        self.reason = reason
        super().__init__(
            f"Invalid thresholds (low={low_threshold}, "
            f"overstock={overstock_threshold}): {reason}"
        )


class InvalidMovementError(ValidationError):
    """Movement record is malformed."""

    code: str = "INVALID_MOVEMENT"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid movement: {reason}")


class InvalidSyncConfigError(ValidationError):
    """Sync configuration key or value is invalid."""

    code: str = "INVALID_SYNC_CONFIG"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid sync config: {reason}")


# Not-found exceptions


class NotFoundError(InventoryKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class LocationNotFoundError(NotFoundError):
    """Location does not exist, or not within the caller's vendor scope."""

    code: str = "LOCATION_NOT_FOUND"

    def __init__(self, location_id: str):
        self.location_id = location_id
        super().__init__(f"Location not found: {location_id}")


class SyncConfigNotFoundError(NotFoundError):
    """No sync configuration exists for the given key."""

    code: str = "SYNC_CONFIG_NOT_FOUND"

    def __init__(self, vendor_id: str, channel_type: str, channel_id: str):
        self.vendor_id = vendor_id
        self.channel_type = channel_type
        self.channel_id = channel_id
        super().__init__(
            f"Sync config not found: vendor={vendor_id} "
            f"channel={channel_type}/{channel_id}"
        )


# Stock exceptions


class StockError(InventoryKernelError):
    """Base exception for not-enough-stock outcomes."""

    code: str = "STOCK_ERROR"


class InsufficientAvailableError(StockError):
    """Reservation exceeds the units available to sell."""

    code: str = "INSUFFICIENT_AVAILABLE"

    def __init__(
        self,
        location_id: str,
        product_id: str,
        requested: int,
        available_quantity: int,
    ):
        self.location_id = location_id
        self.product_id = product_id
        self.requested = requested
        self.available_quantity = available_quantity
        super().__init__(
            f"Insufficient available stock of {product_id} at {location_id}: "
            f"requested {requested}, available {available_quantity}"
        )


class InsufficientStockError(StockError):
    """Transfer exceeds the stock that may leave the source location."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        location_id: str,
        product_id: str,
        requested: int,
        quantity: int,
        reserved_quantity: int = 0,
    ):
        self.location_id = location_id
        self.product_id = product_id
        self.requested = requested
        self.quantity = quantity
        self.reserved_quantity = reserved_quantity
        if requested > quantity:
            detail = f"requested {requested}, on hand {quantity}"
        else:
            detail = (
                f"requested {requested}, on hand {quantity} "
                f"of which {reserved_quantity} reserved"
            )
        super().__init__(
            f"Insufficient stock of {product_id} at {location_id}: {detail}"
        )


# State exceptions


class InvalidStateError(InventoryKernelError):
    """Base exception for state-machine violations."""

    code: str = "INVALID_STATE"


class InvalidReservationStateError(InvalidStateError):
    """Release or fulfill exceeds the currently reserved units."""

    code: str = "INVALID_RESERVATION_STATE"

    def __init__(
        self,
        location_id: str,
        product_id: str,
        operation: str,
        requested: int,
        reserved_quantity: int,
    ):
        self.location_id = location_id
        self.product_id = product_id
        self.operation = operation
        self.requested = requested
        self.reserved_quantity = reserved_quantity
        super().__init__(
            f"Cannot {operation} {requested} units of {product_id} at "
            f"{location_id}: only {reserved_quantity} reserved"
        )


# Conflict exceptions


class ConflictError(InventoryKernelError):
    """Base exception for operations blocked by existing state."""

    code: str = "CONFLICT"


class LocationNotEmptyError(ConflictError):
    """Location still holds stock and cannot be deleted."""

    code: str = "LOCATION_NOT_EMPTY"

    def __init__(self, location_id: str, stocked_products: int):
        self.location_id = location_id
        self.stocked_products = stocked_products
        super().__init__(
            f"Location {location_id} still holds stock of "
            f"{stocked_products} product(s)"
        )


# Immutability exceptions


class ImmutabilityError(InventoryKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete an immutable record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Storage exceptions


class StorageError(InventoryKernelError):
    """
    Backing-store failure.

    Always retryable by the caller; the kernel itself never retries.
    The original driver exception is chained as ``__cause__``.
    """

    code: str = "STORAGE_ERROR"
    retryable: bool = True

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage failure during {operation}: {detail}")
