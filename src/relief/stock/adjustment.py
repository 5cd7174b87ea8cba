"""Stock adjustment — set a counted balance, or change a row's thresholds."""

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.errors import MissingReason
from relief.locking import serialized_by
from relief.stock.engine import StockBatch
from relief.stock.stock import Stock


def stock_row_key(command):
    """Lock key of the row named by ``command.stock_id`` (item and location never change)."""
    stock = current_domain.repository_for(Stock).get_stock(command.stock_id)
    return [stock.lock_key]


@serialized_by(stock_row_key)
@relief.command(part_of="Stock")
class AdjustStock:
    """Correct a balance to a physically counted quantity."""

    stock_id = Identifier(required=True)
    new_quantity = Integer()
    reason = String(max_length=500)
    performed_by = String(max_length=100)
    reference_id = String(max_length=100)


@serialized_by(stock_row_key)
@relief.command(part_of="Stock")
class UpdateThresholds:
    stock_id = Identifier(required=True)
    min_stock_level = Integer()
    critical_level = Integer()
    notes = Text()


@relief.command_handler(part_of=Stock)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        if not (command.reason or "").strip():
            raise MissingReason()

        batch = StockBatch(performed_by=command.performed_by)
        stock = batch.get(command.stock_id)
        movement = batch.adjust(stock, command.new_quantity, command.reason.strip(), reference_id=command.reference_id)
        batch.commit()

        logger.info(
            "Stock adjusted",
            stock_id=str(stock.id),
            item_name=stock.item_name,
            previous_quantity=movement.quantity_before,
            new_quantity=movement.quantity_after,
            reason=command.reason,
        )
        return str(stock.id)

    @handle(UpdateThresholds)
    def update_thresholds(self, command):
        batch = StockBatch()
        stock = batch.get(command.stock_id)
        stock.change_thresholds(command.min_stock_level, command.critical_level)
        batch.touch(stock)
        batch.commit()

        logger.info(
            "Stock thresholds changed",
            stock_id=str(stock.id),
            min_stock_level=stock.min_stock_level,
            critical_level=stock.critical_level,
        )
        return str(stock.id)
