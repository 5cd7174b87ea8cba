"""Integration tests for dashboard reports."""

from relief.locking import dispatch
from relief.stock.classifier import StockStatus
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location
from relief.stock.reports import category_overview, stock_alerts
from relief.stock.visibility import HideStock


def _initialize(item_name, quantity, category="food", location_type="provincial", location_id="provincial"):
    return dispatch(
        InitializeStock(
            item_name=item_name,
            category=category,
            initial_quantity=quantity,
            location_type=location_type,
            location_id=location_id,
        )
    )


class TestStockAlerts:
    def test_most_urgent_first(self):
        _initialize("Rice", 50)
        _initialize("Noodles", 8)
        _initialize("Milk", 2)
        _initialize("Eggs", 0)
        _initialize("Beans", 0, location_type="shelter", location_id="s1")

        alerts = stock_alerts()
        assert [(a.item_name, a.status) for a in alerts] == [
            ("Beans", StockStatus.OUT_OF_STOCK),
            ("Eggs", StockStatus.OUT_OF_STOCK),
            ("Milk", StockStatus.CRITICAL),
            ("Noodles", StockStatus.LOW),
        ]

    def test_scoped_to_location(self):
        _initialize("Eggs", 0)
        _initialize("Beans", 0, location_type="shelter", location_id="s1")
        assert [a.item_name for a in stock_alerts(Location.shelter("s1"))] == ["Beans"]

    def test_hidden_rows_are_ignored(self):
        stock_id = _initialize("Eggs", 0)
        dispatch(HideStock(stock_id=stock_id))
        assert stock_alerts() == []


class TestCategoryOverview:
    def test_counts_distinct_items_and_quantities(self):
        _initialize("Rice", 100)
        _initialize("Rice", 20, location_type="shelter", location_id="s1")
        _initialize("Water", 40, category="water")

        overview = category_overview()
        assert overview["categories"]["food"] == {"items": 1, "quantity": 120}
        assert overview["categories"]["water"] == {"items": 1, "quantity": 40}
        assert overview["totals"] == {"items": 2, "quantity": 160, "provincial": 140, "shelter": 20}

    def test_empty(self):
        assert category_overview() == {
            "categories": {},
            "totals": {"items": 0, "quantity": 0, "provincial": 0, "shelter": 0},
        }
