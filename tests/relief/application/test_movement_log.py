"""Application tests for movement history reads."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from relief.locking import dispatch
from relief.movement import log as movement_log
from relief.paging import PagedQuery
from relief.stock.dispensing import DispenseStock
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location
from relief.stock.receiving import ReceiveStock
from relief.stock.transfer import TransferStock


def _seed():
    stock_id = dispatch(
        InitializeStock(item_name="Rice", initial_quantity=100, location_type="provincial", location_id="provincial")
    )
    dispatch(ReceiveStock(item_name="Rice", quantity=20, location_type="provincial", location_id="provincial"))
    dispatch(
        TransferStock(
            item_name="Rice",
            quantity=30,
            from_location_type="provincial",
            from_location_id="provincial",
            to_location_type="shelter",
            to_location_id="s1",
        )
    )
    dispatch(DispenseStock(item_name="Rice", quantity=10, location_type="shelter", location_id="s1"))
    return stock_id


class TestQueries:
    def test_newest_first(self):
        _seed()
        stamps = [m.performed_at for m in movement_log.query_all()]
        assert stamps == sorted(stamps, reverse=True)
        assert len(stamps) == 5

    def test_by_location(self):
        _seed()
        shelter = list(movement_log.query_by_location(Location.shelter("s1")))
        assert sorted(m.movement_type for m in shelter) == ["dispense", "transfer"]

    def test_by_type(self):
        _seed()
        assert movement_log.query_all(movement_type="receive").count() == 2
        assert movement_log.query_all(movement_type="dispense").count() == 1

    def test_date_range(self):
        _seed()
        now = datetime.now(UTC)
        assert movement_log.query_all(date_range=(now - timedelta(hours=1), now + timedelta(hours=1))).count() == 5
        assert movement_log.query_all(date_range=(now + timedelta(hours=1), None)).count() == 0
        assert movement_log.query_all(date_range=(None, now - timedelta(hours=1))).count() == 0

    def test_queries_restart_on_every_iteration(self):
        _seed()
        history = movement_log.query_all()
        assert len(list(history)) == len(list(history)) == 5


class TestReconstruction:
    def test_signed_sum_matches_balance(self):
        stock_id = _seed()
        assert movement_log.reconstruct_balance(stock_id) == 90


class TestRecord:
    def test_movement_cannot_be_recorded_twice(self):
        stock_id = _seed()
        movement = movement_log.query_by_stock(stock_id).first()
        with pytest.raises(ValidationError):
            movement_log.record(movement)


class TestPaging:
    def test_pages_across_boundaries(self):
        for index in range(7):
            dispatch(
                InitializeStock(
                    item_name=f"Item {index}",
                    initial_quantity=1,
                    location_type="provincial",
                    location_id="provincial",
                )
            )
        from relief.movement.movement import Movement

        query = PagedQuery(Movement, order_by="-performed_at", page_size=3)
        assert query.count() == 7
        assert len(query.page(offset=5, limit=10)) == 2
        assert query.first().item_name == "Item 6"
