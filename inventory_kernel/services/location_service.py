"""
LocationService -- the location registry.

Responsibility:
    Create, update, list and delete a vendor's fulfillment locations, and
    answer the pickup (BOPIS) and shipping-origin lookups used at checkout.

Architecture position:
    Kernel > Services.  Every read and write is scoped to one vendor; a
    location owned by another vendor is reported as not found.

Failure modes:
    - InvalidLocationError: blank name or unknown location type.
    - LocationNotFoundError: unknown id, or owned by another vendor.
    - LocationNotEmptyError: deleting a location that still holds stock.
    - StorageError: backing-store failure.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import LocationInfo
from inventory_kernel.domain.values import LocationType
from inventory_kernel.exceptions import (
    InvalidLocationError,
    LocationNotEmptyError,
    LocationNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.location import InventoryLocation
from inventory_kernel.models.location_inventory import LocationInventory
from inventory_kernel.services.base import BaseService, storage_errors

logger = get_logger("services.location")

_UPDATABLE_FIELDS = frozenset({
    "name",
    "location_type",
    "address",
    "city",
    "state",
    "postal_code",
    "country",
    "is_active",
    "is_pickup_location",
    "is_shipping_origin",
})


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidLocationError("name must not be empty")
    return name.strip()


def _coerce_location_type(value) -> LocationType:
    try:
        return LocationType(value)
    except ValueError as exc:
        raise InvalidLocationError(f"unknown location type {value!r}") from exc


class LocationService(BaseService[InventoryLocation]):

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _get_owned(self, vendor_id: UUID, location_id: UUID) -> InventoryLocation:
        location = self.session.get(InventoryLocation, location_id)
        if location is None or location.vendor_id != vendor_id:
            raise LocationNotFoundError(str(location_id))
        return location

    def create_location(
        self,
        vendor_id: UUID,
        name: str,
        actor_id: UUID,
        *,
        location_type: LocationType | str = LocationType.WAREHOUSE,
        address: str | None = None,
        city: str | None = None,
        state: str | None = None,
        postal_code: str | None = None,
        country: str | None = None,
        is_active: bool = True,
        is_pickup_location: bool = False,
        is_shipping_origin: bool = False,
    ) -> LocationInfo:
        """Register a new location for ``vendor_id``."""
        now = self._clock.now()
        location = InventoryLocation(
            vendor_id=vendor_id,
            name=_clean_name(name),
            location_type=_coerce_location_type(location_type),
            address=address,
            city=city,
            state=state,
            postal_code=postal_code,
            country=country,
            is_active=is_active,
            is_pickup_location=is_pickup_location,
            is_shipping_origin=is_shipping_origin,
            created_by_id=actor_id,
            created_at=now,
            updated_at=now,
        )
        with storage_errors("create_location"):
            self.session.add(location)
            self.session.flush()

        logger.info(
            "location_created",
            extra={
                "location_id": str(location.id),
                "vendor_id": str(vendor_id),
                "location_type": location.location_type,
            },
        )
        return LocationInfo.from_model(location)

    def update_location(
        self,
        vendor_id: UUID,
        location_id: UUID,
        actor_id: UUID,
        **patch,
    ) -> LocationInfo:
        """
        Apply a partial update.  Keys with value ``None`` are left unchanged.

        Raises:
            InvalidLocationError: unknown field, blank name, or bad type.
            LocationNotFoundError: not one of the vendor's locations.
        """
        unknown = set(patch) - _UPDATABLE_FIELDS
        if unknown:
            raise InvalidLocationError(f"cannot update {sorted(unknown)}")
        changes = {key: value for key, value in patch.items() if value is not None}
        if "name" in changes:
            changes["name"] = _clean_name(changes["name"])
        if "location_type" in changes:
            changes["location_type"] = _coerce_location_type(changes["location_type"])

        with storage_errors("update_location"):
            location = self._get_owned(vendor_id, location_id)
            for key, value in changes.items():
                setattr(location, key, value)
            if changes:
                location.updated_by_id = actor_id
                location.updated_at = self._clock.now()
                self.session.flush()

        logger.info(
            "location_updated",
            extra={
                "location_id": str(location_id),
                "fields": sorted(changes),
            },
        )
        return LocationInfo.from_model(location)

    def _count_stocked(self, location_id: UUID) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(LocationInventory)
            .where(
                LocationInventory.location_id == location_id,
                LocationInventory.quantity > 0,
            )
        ).scalar_one()

    def _reject_delete(self, location_id: UUID, stocked: int) -> None:
        logger.info(
            "location_delete_rejected",
            extra={"location_id": str(location_id), "stocked_products": stocked},
        )
        raise LocationNotEmptyError(str(location_id), stocked)

    def delete_location(self, vendor_id: UUID, location_id: UUID) -> None:
        """
        Delete an empty location.

        Zero-quantity ledger rows go with it.  Movements that name the
        location are kept.

        Stock can reach the location after the emptiness check (a
        concurrent set_quantity or transfer).  Only rows still at zero are
        deleted, so such a row survives and its foreign key stops the
        location delete; the savepoint then undoes the partial delete.

        Raises:
            LocationNotEmptyError: some product still has quantity > 0 here.
        """
        with storage_errors("delete_location"):
            location = self._get_owned(vendor_id, location_id)
            stocked = self._count_stocked(location_id)
            if stocked:
                self._reject_delete(location_id, stocked)

            try:
                with self.session.begin_nested():
                    self.session.execute(
                        delete(LocationInventory)
                        .where(
                            LocationInventory.location_id == location_id,
                            LocationInventory.quantity == 0,
                        )
                        .execution_options(synchronize_session=False)
                    )
                    self.session.delete(location)
                    self.session.flush()
            except IntegrityError:
                self._reject_delete(location_id, max(self._count_stocked(location_id), 1))

        logger.info(
            "location_deleted",
            extra={"location_id": str(location_id), "vendor_id": str(vendor_id)},
        )

    def get_location(self, vendor_id: UUID, location_id: UUID) -> LocationInfo:
        with storage_errors("get_location"):
            return LocationInfo.from_model(self._get_owned(vendor_id, location_id))

    def list_locations(self, vendor_id: UUID) -> list[LocationInfo]:
        """All of the vendor's locations, newest first."""
        return self._list(vendor_id)

    def list_pickup_locations(self, vendor_id: UUID) -> list[LocationInfo]:
        """Active locations that accept buy-online-pickup-in-store orders."""
        return self._list(
            vendor_id,
            InventoryLocation.is_active.is_(True),
            InventoryLocation.is_pickup_location.is_(True),
        )

    def list_shipping_origins(self, vendor_id: UUID) -> list[LocationInfo]:
        """Active locations that orders may ship from."""
        return self._list(
            vendor_id,
            InventoryLocation.is_active.is_(True),
            InventoryLocation.is_shipping_origin.is_(True),
        )

    def _list(self, vendor_id: UUID, *criteria) -> list[LocationInfo]:
        with storage_errors("list_locations"):
            locations = self.session.execute(
                select(InventoryLocation)
                .where(InventoryLocation.vendor_id == vendor_id, *criteria)
                .order_by(InventoryLocation.created_at.desc(), InventoryLocation.name)
            ).scalars()
            return [LocationInfo.from_model(location) for location in locations]
