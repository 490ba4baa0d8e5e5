"""
InventorySelector and MovementSelector tests.

Selectors are read-only: a missing row reads as zero stock, and movement
listings are newest first.
"""

from uuid import uuid4

from inventory_kernel.domain.dtos import StockLevel
from inventory_kernel.domain.values import LocationType, MovementAction
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.movement_selector import MovementSelector


class TestInventorySelector:

    def test_missing_row_reads_as_zero(self, session, make_location, product_id):
        location = make_location()

        assert InventorySelector(session).get_stock(location.id, product_id) == StockLevel.zero(
            location.id, product_id
        )

    def test_list_for_location(self, session, make_location, stock):
        location = make_location()
        products = sorted([uuid4(), uuid4(), uuid4()], key=str)
        for i, product in enumerate(products, start=1):
            stock(location.id, product, i * 10)

        levels = InventorySelector(session).list_for_location(location.id)

        assert {level.product_id: level.quantity for level in levels} == {
            products[0]: 10,
            products[1]: 20,
            products[2]: 30,
        }

    def test_list_for_product_joins_location(self, session, make_location, stock, product_id):
        store = make_location("B Store", location_type=LocationType.STORE, is_pickup_location=True)
        warehouse = make_location("A Warehouse", is_shipping_origin=True)
        stock(store.id, product_id, 4, reserved=1)
        stock(warehouse.id, product_id, 40)

        rows = InventorySelector(session).list_for_product(product_id)

        assert [row.location_name for row in rows] == ["A Warehouse", "B Store"]
        assert rows[0].is_shipping_origin is True
        assert rows[1].location_type == LocationType.STORE
        assert rows[1].is_pickup_location is True
        assert (rows[1].quantity, rows[1].reserved_quantity, rows[1].available_quantity) == (4, 1, 3)

    def test_list_for_product_vendor_filter(self, session, make_location, stock, vendor_id, product_id):
        ours = make_location("Ours")
        theirs = make_location("Theirs", vendor=uuid4())
        stock(ours.id, product_id, 1)
        stock(theirs.id, product_id, 2)

        all_rows = InventorySelector(session).list_for_product(product_id)
        our_rows = InventorySelector(session).list_for_product(product_id, vendor_id=vendor_id)

        assert len(all_rows) == 2
        assert [row.location_id for row in our_rows] == [ours.id]


class TestMovementSelector:

    def test_newest_first_with_limit(self, session, ledger, make_location, stock, product_id):
        location = make_location()
        stock(location.id, product_id, 10)
        ledger.reserve(location.id, product_id, 1, "order-1")
        ledger.reserve(location.id, product_id, 1, "order-2")

        latest_two = MovementSelector(session).list_for_product(product_id, limit=2)

        assert [m.reference_id for m in latest_two] == ["order-2", "order-1"]
        assert latest_two[0].seq > latest_two[1].seq

    def test_list_for_vendor(self, session, make_location, stock, vendor_id):
        ours = make_location("Ours")
        theirs = make_location("Theirs", vendor=uuid4())
        stock(ours.id, uuid4(), 1)
        stock(theirs.id, uuid4(), 1)

        movements = MovementSelector(session).list_for_vendor(vendor_id)

        assert len(movements) == 1
        assert movements[0].to_location_id == ours.id

    def test_list_for_reference(self, session, ledger, make_location, stock, product_id):
        location = make_location()
        stock(location.id, product_id, 10)
        ledger.reserve(location.id, product_id, 3, "order-1")
        ledger.fulfill(location.id, product_id, 3, "order-1")

        actions = [m.action for m in MovementSelector(session).list_for_reference("order-1")]

        assert actions == [MovementAction.FULFILLED, MovementAction.RESERVED]

    def test_list_for_location_includes_both_transfer_sides(
        self, session, ledger, make_location, stock, product_id, test_actor_id
    ):
        source = make_location("Source")
        destination = make_location("Destination")
        stock(source.id, product_id, 5)
        ledger.transfer(source.id, destination.id, product_id, 2, None, test_actor_id)

        selector = MovementSelector(session)

        assert len(selector.list_for_location(source.id)) == 2
        assert [m.action for m in selector.list_for_location(destination.id)] == [
            MovementAction.TRANSFERRED
        ]
