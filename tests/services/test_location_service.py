"""
LocationService tests: registry CRUD, vendor scoping, fulfillment lookups,
and the refusal to delete a location that still holds stock.
"""

from uuid import uuid4

import pytest

from inventory_kernel.domain.values import LocationType
from inventory_kernel.exceptions import (
    ConflictError,
    InvalidLocationError,
    LocationNotEmptyError,
    LocationNotFoundError,
)
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.movement_selector import MovementSelector


class TestCreateLocation:

    def test_defaults(self, location_service, vendor_id, test_actor_id, deterministic_clock):
        location = location_service.create_location(vendor_id, "  Main Warehouse  ", test_actor_id)

        assert location.name == "Main Warehouse"
        assert location.vendor_id == vendor_id
        assert location.location_type == LocationType.WAREHOUSE
        assert location.is_active is True
        assert location.is_pickup_location is False
        assert location.is_shipping_origin is False
        assert location.created_at == deterministic_clock.now()

    def test_all_fields(self, location_service, vendor_id, test_actor_id):
        location = location_service.create_location(
            vendor_id,
            "Downtown Store",
            test_actor_id,
            location_type="store",
            address="1 Main St",
            city="Springfield",
            state="IL",
            postal_code="62701",
            country="US",
            is_pickup_location=True,
        )

        assert location.location_type == LocationType.STORE
        assert (location.city, location.postal_code, location.country) == ("Springfield", "62701", "US")
        assert location.is_pickup_location is True

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, location_service, vendor_id, test_actor_id, name):
        with pytest.raises(InvalidLocationError):
            location_service.create_location(vendor_id, name, test_actor_id)

    def test_unknown_type_rejected(self, location_service, vendor_id, test_actor_id):
        with pytest.raises(InvalidLocationError):
            location_service.create_location(vendor_id, "Hub", test_actor_id, location_type="spaceport")


class TestUpdateLocation:

    def test_partial_update(self, location_service, make_location, vendor_id, test_actor_id, deterministic_clock):
        location = make_location("Old Name", city="Austin")
        deterministic_clock.advance(60)

        updated = location_service.update_location(
            vendor_id, location.id, test_actor_id, name="New Name", is_shipping_origin=True,
        )

        assert updated.name == "New Name"
        assert updated.is_shipping_origin is True
        assert updated.city == "Austin"
        assert updated.updated_at == deterministic_clock.now()

    def test_none_values_leave_fields_unchanged(self, location_service, make_location, vendor_id, test_actor_id):
        location = make_location("Keep", city="Austin")

        updated = location_service.update_location(vendor_id, location.id, test_actor_id, city=None)

        assert updated.city == "Austin"

    def test_unknown_field_rejected(self, location_service, make_location, vendor_id, test_actor_id):
        location = make_location()

        with pytest.raises(InvalidLocationError):
            location_service.update_location(vendor_id, location.id, test_actor_id, vendor_id=uuid4())

    def test_blank_name_rejected(self, location_service, make_location, vendor_id, test_actor_id):
        location = make_location()

        with pytest.raises(InvalidLocationError):
            location_service.update_location(vendor_id, location.id, test_actor_id, name=" ")

    def test_other_vendor_cannot_update(self, location_service, make_location, test_actor_id):
        location = make_location()

        with pytest.raises(LocationNotFoundError):
            location_service.update_location(uuid4(), location.id, test_actor_id, name="Hijacked")


class TestListLocations:

    def test_newest_first(self, location_service, make_location, vendor_id):
        make_location("First")
        make_location("Second")
        make_location("Third")

        names = [loc.name for loc in location_service.list_locations(vendor_id)]

        assert names == ["Third", "Second", "First"]

    def test_scoped_to_vendor(self, location_service, make_location, vendor_id):
        make_location("Ours")
        make_location("Theirs", vendor=uuid4())

        assert [loc.name for loc in location_service.list_locations(vendor_id)] == ["Ours"]

    def test_pickup_locations_are_active_and_flagged(self, location_service, make_location, vendor_id):
        make_location("Pickup", is_pickup_location=True)
        make_location("Closed Pickup", is_pickup_location=True, is_active=False)
        make_location("Warehouse")

        names = [loc.name for loc in location_service.list_pickup_locations(vendor_id)]

        assert names == ["Pickup"]

    def test_shipping_origins_are_active_and_flagged(self, location_service, make_location, vendor_id):
        make_location("Ships", is_shipping_origin=True)
        make_location("Inactive Ships", is_shipping_origin=True, is_active=False)
        make_location("Store", location_type=LocationType.STORE)

        names = [loc.name for loc in location_service.list_shipping_origins(vendor_id)]

        assert names == ["Ships"]

    def test_get_location_of_other_vendor_not_found(self, location_service, make_location):
        location = make_location()

        with pytest.raises(LocationNotFoundError):
            location_service.get_location(uuid4(), location.id)


class TestDeleteLocation:

    def test_delete_empty_location(self, location_service, make_location, vendor_id):
        location = make_location()

        location_service.delete_location(vendor_id, location.id)

        with pytest.raises(LocationNotFoundError):
            location_service.get_location(vendor_id, location.id)

    def test_delete_with_stock_rejected(
        self, location_service, make_location, stock, vendor_id, product_id
    ):
        location = make_location()
        stock(location.id, product_id, 1)

        with pytest.raises(LocationNotEmptyError) as exc_info:
            location_service.delete_location(vendor_id, location.id)

        assert exc_info.value.stocked_products == 1
        assert isinstance(exc_info.value, ConflictError)
        assert location_service.get_location(vendor_id, location.id).id == location.id

    def test_delete_after_stock_zeroed_keeps_movements(
        self, session, location_service, ledger, make_location, stock, vendor_id, product_id, test_actor_id
    ):
        location = make_location()
        stock(location.id, product_id, 5)
        ledger.set_quantity(location.id, product_id, 0, test_actor_id)

        location_service.delete_location(vendor_id, location.id)

        assert InventorySelector(session).list_for_location(location.id) == []
        assert len(MovementSelector(session).list_for_location(location.id)) == 2

    def test_other_vendor_cannot_delete(self, location_service, make_location):
        location = make_location()

        with pytest.raises(LocationNotFoundError):
            location_service.delete_location(uuid4(), location.id)

    def test_stock_arriving_after_check_survives_delete(
        self,
        session,
        location_service,
        ledger,
        make_location,
        stock,
        vendor_id,
        product_id,
        test_actor_id,
        monkeypatch,
    ):
        location = make_location()
        emptied = uuid4()
        stock(location.id, emptied, 3)
        ledger.set_quantity(location.id, emptied, 0, test_actor_id)
        stock(location.id, product_id, 5)
        movements_before = len(MovementSelector(session).list_for_location(location.id))

        # The emptiness check runs before the stock lands
        real_count = location_service._count_stocked
        calls = []

        def stale_first_count(location_id):
            calls.append(location_id)
            return 0 if len(calls) == 1 else real_count(location_id)

        monkeypatch.setattr(location_service, "_count_stocked", stale_first_count)

        with pytest.raises(LocationNotEmptyError) as exc_info:
            location_service.delete_location(vendor_id, location.id)

        assert exc_info.value.stocked_products == 1
        assert location_service.get_location(vendor_id, location.id).id == location.id
        selector = InventorySelector(session)
        assert selector.get_stock(location.id, product_id).quantity == 5
        assert {level.product_id for level in selector.list_for_location(location.id)} == {
            emptied,
            product_id,
        }
        assert len(MovementSelector(session).list_for_location(location.id)) == movements_before
