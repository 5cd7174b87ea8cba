"""Supplier deliveries into a location."""

from protean.fields import Integer, String, Text
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.locking import serialized_by
from relief.stock.engine import StockBatch
from relief.stock.location import Location, LocationType, command_row_key
from relief.stock.stock import Stock


@serialized_by(command_row_key)
@relief.command(part_of="Stock")
class ReceiveStock:
    item_name = String(required=True, max_length=200)
    quantity = Integer()
    location_type = String(choices=LocationType, required=True)
    location_id = String(required=True, max_length=100)
    location_name = String(max_length=200)
    supplier = String(max_length=200)
    category = String(max_length=50)  # Used only when the row is new
    unit = String(max_length=50)  # Used only when the row is new
    performed_by = String(max_length=100)
    reference_id = String(max_length=100)
    notes = Text()


@relief.command_handler(part_of=Stock)
class ReceiveStockHandler:
    @handle(ReceiveStock)
    def receive_stock(self, command):
        location = Location(command.location_type, command.location_id, command.location_name)
        batch = StockBatch(performed_by=command.performed_by, notes=command.notes)
        movement = batch.receive(
            item_name=command.item_name,
            location=location,
            quantity=command.quantity,
            supplier=command.supplier,
            category=command.category,
            unit=command.unit,
            reference_id=command.reference_id,
        )
        batch.commit()

        logger.info(
            "Stock received",
            stock_id=str(movement.stock_id),
            item_name=movement.item_name,
            location=location.key,
            quantity=movement.quantity,
            supplier=command.supplier,
            reference_id=movement.reference_id,
        )
        return str(movement.stock_id)
