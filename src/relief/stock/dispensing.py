"""Hand stock out to beneficiaries at a location."""

from protean.fields import Integer, String, Text
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.locking import serialized_by
from relief.stock.engine import StockBatch
from relief.stock.location import Location, LocationType, command_row_key
from relief.stock.stock import Stock


@serialized_by(command_row_key)
@relief.command(part_of="Stock")
class DispenseStock:
    item_name = String(required=True, max_length=200)
    quantity = Integer()
    location_type = String(choices=LocationType, required=True)
    location_id = String(required=True, max_length=100)
    recipient = String(max_length=200)
    performed_by = String(max_length=100)
    reference_id = String(max_length=100)
    notes = Text()


@relief.command_handler(part_of=Stock)
class DispenseStockHandler:
    @handle(DispenseStock)
    def dispense_stock(self, command):
        location = Location(command.location_type, command.location_id)
        batch = StockBatch(performed_by=command.performed_by, notes=command.notes)
        movement = batch.dispense(
            item_name=command.item_name,
            location=location,
            quantity=command.quantity,
            recipient=command.recipient,
            reference_id=command.reference_id,
        )
        batch.commit()

        logger.info(
            "Stock dispensed",
            stock_id=str(movement.stock_id),
            item_name=movement.item_name,
            location=location.key,
            quantity=movement.quantity,
            remaining=movement.quantity_after,
        )
        return str(movement.stock_id)
