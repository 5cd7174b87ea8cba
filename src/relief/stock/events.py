"""Domain events for the Stock aggregate.

Each balance change raises one event carrying the before/after quantities.
Events feed the daily activity projection; the Movement Log is written
directly by the transfer engine in the same Unit of Work.
"""

from protean.fields import DateTime, Identifier, Integer, String

from relief.domain import relief


@relief.event(part_of="Stock")
class StockInitialized:
    """A stock row was opened for an item at a location."""

    __version__ = 1

    stock_id = Identifier(required=True)
    item_name = String(required=True)
    category = String()
    unit = String()
    location_type = String(required=True)
    location_id = String(required=True)
    initial_quantity = Integer(default=0)
    min_stock_level = Integer(default=0)
    critical_level = Integer(default=0)
    initialized_at = DateTime(required=True)


@relief.event(part_of="Stock")
class StockReceived:
    """Stock arrived from an external supplier."""

    __version__ = 1

    stock_id = Identifier(required=True)
    item_name = String(required=True)
    location_type = String(required=True)
    location_id = String(required=True)
    quantity = Integer(default=0)
    previous_quantity = Integer(default=0)
    new_quantity = Integer(default=0)
    supplier = String()
    received_at = DateTime(required=True)


@relief.event(part_of="Stock")
class StockDispensed:
    """Stock was handed out to beneficiaries."""

    __version__ = 1

    stock_id = Identifier(required=True)
    item_name = String(required=True)
    location_type = String(required=True)
    location_id = String(required=True)
    quantity = Integer(default=0)
    previous_quantity = Integer(default=0)
    new_quantity = Integer(default=0)
    recipient = String()
    dispensed_at = DateTime(required=True)


@relief.event(part_of="Stock")
class StockTransferred:
    """One side of a transfer: stock left (``out``) or arrived at (``in``) this row."""

    __version__ = 1

    stock_id = Identifier(required=True)
    transfer_id = Identifier(required=True)
    direction = String(required=True)
    item_name = String(required=True)
    location_type = String(required=True)
    location_id = String(required=True)
    counterpart_type = String()
    counterpart_id = String()
    quantity = Integer(default=0)
    previous_quantity = Integer(default=0)
    new_quantity = Integer(default=0)
    transferred_at = DateTime(required=True)


@relief.event(part_of="Stock")
class StockAdjusted:
    """The balance was set directly to a counted value."""

    __version__ = 1

    stock_id = Identifier(required=True)
    item_name = String(required=True)
    location_type = String(required=True)
    location_id = String(required=True)
    quantity_change = Integer(default=0)  # Signed
    previous_quantity = Integer(default=0)
    new_quantity = Integer(default=0)
    reason = String()
    adjusted_by = String()
    adjusted_at = DateTime(required=True)


@relief.event(part_of="Stock")
class StockThresholdsChanged:
    __version__ = 1

    stock_id = Identifier(required=True)
    min_stock_level = Integer(default=0)
    critical_level = Integer(default=0)
    changed_at = DateTime(required=True)


@relief.event(part_of="Stock")
class StockVisibilityChanged:
    __version__ = 1

    stock_id = Identifier(required=True)
    is_hidden = String(required=True)  # "True" / "False"
    changed_at = DateTime(required=True)
