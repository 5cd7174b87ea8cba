"""Stock transfer — move quantity of one item between two locations.

Both sides change in one Unit of Work together with their paired
``transfer`` movements, while the locks for both rows are held.
"""

from protean.fields import Integer, String, Text
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.locking import serialized_by
from relief.stock.engine import StockBatch
from relief.stock.location import Location, LocationType
from relief.stock.stock import Stock


def _both_rows(command):
    item_name = (command.item_name or "").strip()
    return [
        Location(command.from_location_type, command.from_location_id).stock_key(item_name),
        Location(command.to_location_type, command.to_location_id).stock_key(item_name),
    ]


@serialized_by(_both_rows)
@relief.command(part_of="Stock")
class TransferStock:
    item_name = String(required=True, max_length=200)
    quantity = Integer()
    from_location_type = String(choices=LocationType, required=True)
    from_location_id = String(required=True, max_length=100)
    from_location_name = String(max_length=200)
    to_location_type = String(choices=LocationType, required=True)
    to_location_id = String(required=True, max_length=100)
    to_location_name = String(max_length=200)
    performed_by = String(max_length=100)
    reference_id = String(max_length=100)
    notes = Text()


@relief.command_handler(part_of=Stock)
class TransferStockHandler:
    @handle(TransferStock)
    def transfer_stock(self, command):
        source = Location(command.from_location_type, command.from_location_id, command.from_location_name)
        destination = Location(command.to_location_type, command.to_location_id, command.to_location_name)

        batch = StockBatch(performed_by=command.performed_by, notes=command.notes)
        outgoing, incoming = batch.transfer(
            item_name=command.item_name,
            quantity=command.quantity,
            source=source,
            destination=destination,
            reference_id=command.reference_id,
        )
        batch.commit()

        logger.info(
            "Stock transferred",
            item_name=outgoing.item_name,
            quantity=outgoing.quantity,
            source=source.key,
            destination=destination.key,
            transfer_id=str(outgoing.transfer_id),
            source_remaining=outgoing.quantity_after,
        )
        return {
            "transfer_id": str(outgoing.transfer_id),
            "out_movement_id": str(outgoing.id),
            "in_movement_id": str(incoming.id),
            "from_stock_id": str(outgoing.stock_id),
            "to_stock_id": str(incoming.stock_id),
        }
