"""Application tests for adjustments, thresholds and visibility."""

import pytest
from relief.errors import InvalidQuantity, InvalidThresholds, MissingReason, NotFound
from relief.locking import dispatch
from relief.movement import log as movement_log
from relief.stock import ledger
from relief.stock.adjustment import AdjustStock, UpdateThresholds
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location
from relief.stock.receiving import ReceiveStock
from relief.stock.visibility import HideStock, ShowStock


def _initialize(quantity=50):
    return dispatch(
        InitializeStock(item_name="Blanket", initial_quantity=quantity, location_type="shelter", location_id="s1")
    )


def _adjust_movements(stock_id):
    return [m for m in movement_log.query_by_stock(stock_id) if m.movement_type == "adjust"]


class TestAdjustStock:
    def test_sets_balance_and_records_signed_movement(self):
        stock_id = _initialize()
        dispatch(AdjustStock(stock_id=stock_id, new_quantity=44, reason="Monthly count", performed_by="staff-2"))

        assert ledger.get(stock_id).quantity == 44
        [movement] = _adjust_movements(stock_id)
        assert movement.direction == "out"
        assert movement.quantity == 6
        assert movement.signed_quantity == -6
        assert movement.notes == "Monthly count"
        assert movement.performed_by == "staff-2"
        assert movement.reference_id.startswith("ADJ-")

    def test_upward_adjustment(self):
        stock_id = _initialize()
        dispatch(AdjustStock(stock_id=stock_id, new_quantity=60, reason="Found boxes"))
        [movement] = _adjust_movements(stock_id)
        assert movement.signed_quantity == 10
        assert movement.destination_id == "s1"

    def test_reason_is_required(self):
        stock_id = _initialize()
        with pytest.raises(MissingReason):
            dispatch(AdjustStock(stock_id=stock_id, new_quantity=10, reason="  "))
        assert ledger.get(stock_id).quantity == 50

    def test_negative_rejected(self):
        stock_id = _initialize()
        with pytest.raises(InvalidQuantity):
            dispatch(AdjustStock(stock_id=stock_id, new_quantity=-1, reason="Typo"))
        assert _adjust_movements(stock_id) == []

    def test_unknown_stock(self):
        with pytest.raises(NotFound):
            dispatch(AdjustStock(stock_id="missing", new_quantity=1, reason="Count"))


class TestUpdateThresholds:
    def test_changes_status(self):
        stock_id = _initialize(quantity=15)
        assert ledger.get(stock_id).status.value == "sufficient"
        dispatch(UpdateThresholds(stock_id=stock_id, min_stock_level=20, critical_level=15))
        view = ledger.get(stock_id)
        assert (view.min_stock_level, view.critical_level) == (20, 15)
        assert view.status.value == "critical"

    def test_invalid_pair_rejected(self):
        stock_id = _initialize()
        with pytest.raises(InvalidThresholds):
            dispatch(UpdateThresholds(stock_id=stock_id, min_stock_level=2, critical_level=3))

    def test_no_movement_written(self):
        stock_id = _initialize()
        dispatch(UpdateThresholds(stock_id=stock_id, min_stock_level=30, critical_level=10))
        assert movement_log.query_by_stock(stock_id).count() == 1


class TestVisibility:
    def test_hidden_rows_leave_listing_but_keep_history(self):
        stock_id = _initialize()
        dispatch(HideStock(stock_id=stock_id))

        assert ledger.list_by_location(Location.shelter("s1")) == []
        assert len(ledger.list_by_location(Location.shelter("s1"), include_hidden=True)) == 1
        assert movement_log.query_by_stock(stock_id).count() == 1

    def test_show_restores(self):
        stock_id = _initialize()
        dispatch(HideStock(stock_id=stock_id))
        dispatch(ShowStock(stock_id=stock_id))
        assert not ledger.get(stock_id).is_hidden

    def test_receiving_unhides(self):
        stock_id = _initialize()
        dispatch(HideStock(stock_id=stock_id))
        dispatch(ReceiveStock(item_name="Blanket", quantity=1, location_type="shelter", location_id="s1"))
        assert not ledger.get(stock_id).is_hidden
