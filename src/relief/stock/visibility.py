"""Soft-hide and restore stock rows.

Stock rows are never deleted: hidden rows drop out of location listings and
alerts but keep their history. Receiving or transferring into a hidden row
makes it visible again.
"""

from protean.fields import Identifier
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.locking import serialized_by
from relief.stock.adjustment import stock_row_key
from relief.stock.engine import StockBatch
from relief.stock.stock import Stock


@serialized_by(stock_row_key)
@relief.command(part_of="Stock")
class HideStock:
    stock_id = Identifier(required=True)


@serialized_by(stock_row_key)
@relief.command(part_of="Stock")
class ShowStock:
    stock_id = Identifier(required=True)


@relief.command_handler(part_of=Stock)
class StockVisibilityHandler:
    @handle(HideStock)
    def hide_stock(self, command):
        batch = StockBatch()
        stock = batch.get(command.stock_id)
        stock.hide()
        batch.touch(stock)
        batch.commit()
        logger.info("Stock hidden", stock_id=str(stock.id), quantity=stock.quantity)
        return str(stock.id)

    @handle(ShowStock)
    def show_stock(self, command):
        batch = StockBatch()
        stock = batch.get(command.stock_id)
        stock.show()
        batch.touch(stock)
        batch.commit()
        logger.info("Stock shown", stock_id=str(stock.id))
        return str(stock.id)
