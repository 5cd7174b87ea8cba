"""Stock aggregate behaviour without going through command handlers."""

import pytest
from protean.exceptions import ValidationError
from relief.errors import InsufficientStock, InvalidQuantity, InvalidThresholds
from relief.stock.classifier import StockStatus
from relief.stock.events import StockAdjusted, StockInitialized, StockReceived, StockTransferred
from relief.stock.location import Location
from relief.stock.stock import DEFAULT_CATEGORY, DEFAULT_UNIT, Stock


def _open(quantity=100, **kwargs):
    return Stock.open("Rice", Location.provincial(), quantity=quantity, **kwargs)


class TestOpen:
    def test_defaults(self):
        stock = _open()
        assert stock.quantity == 100
        assert stock.total_received == 100
        assert stock.total_dispensed == 0
        assert stock.category == DEFAULT_CATEGORY
        assert stock.unit == DEFAULT_UNIT
        assert stock.min_stock_level == 10
        assert stock.critical_level == 5
        assert stock.is_hidden is False

    def test_item_name_is_trimmed(self):
        stock = Stock.open("  Rice  ", Location.provincial())
        assert stock.item_name == "Rice"

    def test_blank_item_name_rejected(self):
        with pytest.raises(ValidationError):
            Stock.open("   ", Location.provincial())

    def test_negative_initial_quantity_rejected(self):
        with pytest.raises(InvalidQuantity):
            _open(quantity=-1)

    def test_critical_above_minimum_rejected(self):
        with pytest.raises(InvalidThresholds):
            _open(min_stock_level=5, critical_level=6)

    def test_raises_initialized_event(self):
        stock = _open()
        event = stock._events[-1]
        assert isinstance(event, StockInitialized)
        assert event.initial_quantity == 100

    def test_status_is_derived(self):
        assert _open(quantity=0).status == StockStatus.OUT_OF_STOCK
        assert _open(quantity=3).status == StockStatus.CRITICAL
        assert _open(quantity=8).status == StockStatus.LOW
        assert _open(quantity=50).status == StockStatus.SUFFICIENT


class TestBalanceChanges:
    def test_receive_adds_and_returns_previous(self):
        stock = _open()
        previous = stock.receive(20, supplier="Red Cross")
        assert previous == 100
        assert stock.quantity == 120
        assert stock.total_received == 120
        assert isinstance(stock._events[-1], StockReceived)

    @pytest.mark.parametrize("quantity", [0, -5, None])
    def test_receive_requires_positive_quantity(self, quantity):
        stock = _open()
        with pytest.raises(InvalidQuantity):
            stock.receive(quantity)
        assert stock.quantity == 100

    def test_receive_unhides(self):
        stock = _open()
        stock.hide()
        stock.receive(1)
        assert stock.is_hidden is False

    def test_dispense_subtracts(self):
        stock = _open()
        stock.dispense(30)
        assert stock.quantity == 70
        assert stock.total_dispensed == 30

    def test_dispense_more_than_available(self):
        stock = _open(quantity=10)
        with pytest.raises(InsufficientStock) as exc:
            stock.dispense(11)
        assert exc.value.available == 10
        assert exc.value.requested == 11
        assert exc.value.shortfall == 1
        assert stock.quantity == 10

    def test_dispense_entire_balance(self):
        stock = _open(quantity=10)
        stock.dispense(10)
        assert stock.quantity == 0
        assert stock.status == StockStatus.OUT_OF_STOCK

    def test_transfer_out_and_in(self):
        source = _open()
        target = Stock.open("Rice", Location.shelter("s1"))
        source.transfer_out(40, "t-1", target.location)
        target.transfer_in(40, "t-1", source.location)
        assert source.quantity == 60
        assert target.quantity == 40
        assert isinstance(source._events[-1], StockTransferred)
        assert source._events[-1].direction == "out"
        assert target._events[-1].direction == "in"

    def test_transfer_out_more_than_available(self):
        source = _open(quantity=5)
        with pytest.raises(InsufficientStock):
            source.transfer_out(6, "t-1", Location.shelter("s1"))
        assert source.quantity == 5


class TestAdjust:
    def test_adjust_returns_signed_delta(self):
        stock = _open()
        assert stock.adjust_to(90, "Count") == -10
        assert stock.quantity == 90
        event = stock._events[-1]
        assert isinstance(event, StockAdjusted)
        assert event.quantity_change == -10

    def test_adjust_upwards(self):
        stock = _open()
        assert stock.adjust_to(110, "Found pallet") == 10

    def test_adjust_to_zero(self):
        stock = _open()
        stock.adjust_to(0, "Flood damage")
        assert stock.quantity == 0

    def test_adjust_negative_rejected(self):
        stock = _open()
        with pytest.raises(InvalidQuantity):
            stock.adjust_to(-1, "Count")
        assert stock.quantity == 100


class TestMetadata:
    def test_change_thresholds(self):
        stock = _open(quantity=15)
        stock.change_thresholds(20, 8)
        assert stock.status == StockStatus.LOW

    def test_change_thresholds_validates(self):
        stock = _open()
        with pytest.raises(InvalidThresholds):
            stock.change_thresholds(5, 10)
        with pytest.raises(InvalidThresholds):
            stock.change_thresholds(-1, 0)

    def test_hide_and_show(self):
        stock = _open()
        stock.hide()
        assert stock.is_hidden is True
        stock.show()
        assert stock.is_hidden is False

    def test_hide_twice_raises_one_event(self):
        stock = _open()
        stock.hide()
        count = len(stock._events)
        stock.hide()
        assert len(stock._events) == count
