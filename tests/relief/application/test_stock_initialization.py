"""Application tests for opening stock rows."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from relief.errors import DuplicateStock, InvalidThresholds
from relief.locking import dispatch
from relief.movement import log as movement_log
from relief.stock import ledger
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location
from relief.stock.stock import Stock


def _initialize(**overrides):
    defaults = {
        "item_name": "Rice",
        "category": "food",
        "unit": "kg",
        "initial_quantity": 100,
        "location_type": "provincial",
        "location_id": "provincial",
        "performed_by": "admin-1",
    }
    defaults.update(overrides)
    return dispatch(InitializeStock(**defaults))


class TestInitializeStock:
    def test_creates_row(self):
        stock_id = _initialize()
        view = ledger.get(stock_id)
        assert view.item_name == "Rice"
        assert view.quantity == 100
        assert view.unit == "kg"
        assert view.location == Location.provincial()

    def test_initial_quantity_recorded_as_receive_movement(self):
        stock_id = _initialize(initial_quantity=40)
        movements = list(movement_log.query_by_stock(stock_id))
        assert len(movements) == 1
        movement = movements[0]
        assert movement.movement_type == "receive"
        assert movement.quantity == 40
        assert movement.quantity_before == 0
        assert movement.quantity_after == 40
        assert movement.reference_id.startswith("INIT-")
        assert movement.performed_by == "admin-1"

    def test_zero_initial_quantity_writes_no_movement(self):
        stock_id = _initialize(initial_quantity=0)
        assert movement_log.query_by_stock(stock_id).count() == 0
        assert ledger.get(stock_id).status.value == "outOfStock"

    def test_supplied_reference_is_used(self):
        stock_id = _initialize(reference_id="DOC-7")
        assert movement_log.query_by_stock(stock_id).first().reference_id == "DOC-7"

    def test_duplicate_item_at_location_rejected(self):
        _initialize()
        with pytest.raises(DuplicateStock):
            _initialize(initial_quantity=5)
        assert len(current_domain.repository_for(Stock)._dao.query.all().items) == 1

    def test_duplicate_check_trims_item_name(self):
        _initialize()
        with pytest.raises(DuplicateStock):
            _initialize(item_name="  Rice ")

    def test_same_item_at_other_location_allowed(self):
        _initialize()
        shelter_stock = _initialize(location_type="shelter", location_id="s1", initial_quantity=0)
        assert ledger.get(shelter_stock).location == Location.shelter("s1")

    def test_invalid_thresholds_rejected(self):
        with pytest.raises(InvalidThresholds):
            _initialize(min_stock_level=3, critical_level=4)

    def test_unknown_location_type_rejected(self):
        with pytest.raises(ValidationError):
            _initialize(location_type="depot")
