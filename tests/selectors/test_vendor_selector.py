"""
VendorSelector tests: per-product totals across locations, stock
classification, and dashboard metrics.
"""

from uuid import uuid4

import pytest

from inventory_kernel.domain.stock_status import StockThresholds
from inventory_kernel.exceptions import InvalidThresholdsError
from inventory_kernel.selectors.vendor_selector import VendorSelector


class TestTotals:

    def test_sums_across_locations(self, session, make_location, stock, vendor_id, product_id):
        first = make_location("First")
        second = make_location("Second")
        stock(first.id, product_id, 10, reserved=3)
        stock(second.id, product_id, 5)

        totals = VendorSelector(session).totals(vendor_id)

        assert len(totals) == 1
        assert totals[0].product_id == product_id
        assert (totals[0].total_quantity, totals[0].total_reserved, totals[0].total_available) == (15, 3, 12)

    def test_other_vendors_excluded(self, session, make_location, stock, vendor_id, product_id):
        ours = make_location("Ours")
        theirs = make_location("Theirs", vendor=uuid4())
        stock(ours.id, product_id, 1)
        stock(theirs.id, product_id, 99)

        totals = VendorSelector(session).totals(vendor_id)

        assert totals[0].total_quantity == 1

    def test_no_stock_is_empty(self, session, make_location, vendor_id):
        make_location()

        assert VendorSelector(session).totals(vendor_id) == []


class TestClassify:

    @pytest.fixture
    def catalog(self, make_location, stock, ledger):
        """Five products spanning every bucket at low=5, overstock=100."""
        location = make_location()
        products = {name: uuid4() for name in ("sold_out", "reserved_out", "low", "adequate", "over")}
        stock(location.id, products["sold_out"], 0)
        stock(location.id, products["reserved_out"], 4, reserved=4)
        stock(location.id, products["low"], 5)
        stock(location.id, products["adequate"], 50)
        stock(location.id, products["over"], 100)
        return products

    def test_buckets(self, session, vendor_id, catalog):
        buckets = VendorSelector(session).classify(vendor_id, 5, 100)

        def ids(group):
            return {p.product_id for p in group}

        # "sold_out" was set to 0 without a row, so it is not in the totals
        assert ids(buckets.out_of_stock) == {catalog["reserved_out"]}
        assert ids(buckets.low_stock) == {catalog["low"]}
        assert ids(buckets.adequate) == {catalog["adequate"]}
        assert ids(buckets.overstock) == {catalog["over"]}

    def test_thresholds_change_buckets(self, session, vendor_id, catalog):
        buckets = VendorSelector(session).classify(vendor_id, 50, 60)

        assert {p.product_id for p in buckets.low_stock} == {catalog["low"], catalog["adequate"]}
        assert {p.product_id for p in buckets.overstock} == {catalog["over"]}
        assert buckets.adequate == ()

    @pytest.mark.parametrize("low, over", [(-1, 10), (10, 10), (20, 10)])
    def test_invalid_thresholds_rejected(self, session, vendor_id, low, over):
        with pytest.raises(InvalidThresholdsError):
            VendorSelector(session).classify(vendor_id, low, over)

    def test_metrics(self, session, make_location, vendor_id, catalog):
        make_location("Pickup Store", is_pickup_location=True)
        make_location("Shipping Hub", is_shipping_origin=True)
        make_location("Closed", is_shipping_origin=True, is_active=False)

        metrics = VendorSelector(session).metrics(vendor_id)

        assert metrics.total_products == 4
        assert metrics.out_of_stock_count == 1
        assert metrics.low_stock_count == 1
        assert metrics.adequate_count == 1
        assert metrics.overstock_count == 1
        assert metrics.active_locations == 3
        assert metrics.pickup_locations == 1
        assert metrics.shipping_locations == 1

    def test_metrics_with_custom_thresholds(self, session, vendor_id, catalog):
        metrics = VendorSelector(session).metrics(vendor_id, StockThresholds(low_stock=0, overstock=1))

        assert metrics.low_stock_count == 0
        assert metrics.overstock_count == 3
