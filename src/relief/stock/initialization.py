"""Stock initialization — open a stock row for an item at a location."""

from protean.fields import Integer, String, Text
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.locking import serialized_by
from relief.stock.engine import StockBatch
from relief.stock.location import Location, LocationType, command_row_key
from relief.stock.stock import DEFAULT_CRITICAL_LEVEL, DEFAULT_MIN_STOCK_LEVEL, Stock


def _or_default(value, default):
    return default if value is None else value


@serialized_by(command_row_key)
@relief.command(part_of="Stock")
class InitializeStock:
    item_name = String(required=True, max_length=200)
    category = String(max_length=50)
    unit = String(max_length=50)
    initial_quantity = Integer(default=0)
    min_stock_level = Integer(default=DEFAULT_MIN_STOCK_LEVEL)
    critical_level = Integer(default=DEFAULT_CRITICAL_LEVEL)
    location_type = String(choices=LocationType, required=True)
    location_id = String(required=True, max_length=100)
    location_name = String(max_length=200)
    performed_by = String(max_length=100)
    reference_id = String(max_length=100)
    notes = Text()


@relief.command_handler(part_of=Stock)
class InitializeStockHandler:
    @handle(InitializeStock)
    def initialize_stock(self, command):
        location = Location(command.location_type, command.location_id, command.location_name)
        batch = StockBatch(performed_by=command.performed_by, notes=command.notes)
        stock = batch.open(
            item_name=command.item_name,
            location=location,
            quantity=command.initial_quantity or 0,
            category=command.category,
            unit=command.unit,
            min_stock_level=_or_default(command.min_stock_level, DEFAULT_MIN_STOCK_LEVEL),
            critical_level=_or_default(command.critical_level, DEFAULT_CRITICAL_LEVEL),
            reference_id=command.reference_id,
        )
        batch.commit()

        logger.info(
            "Stock initialized",
            stock_id=str(stock.id),
            item_name=stock.item_name,
            location=location.key,
            quantity=stock.quantity,
        )
        return str(stock.id)
