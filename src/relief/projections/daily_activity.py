"""Per location, per day quantity flows."""

from datetime import datetime

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from relief.domain import relief
from relief.stock.events import (
    StockAdjusted,
    StockDispensed,
    StockInitialized,
    StockReceived,
    StockTransferred,
)
from relief.stock.stock import Stock


@relief.projection
class DailyStockActivity:
    activity_id = Identifier(identifier=True, required=True)  # {location_type}:{location_id}:{YYYY-MM-DD}
    location_type = String(required=True)
    location_id = String(required=True)
    date = String(required=True)  # ISO date string YYYY-MM-DD
    received = Integer(default=0)
    dispensed = Integer(default=0)
    transferred_in = Integer(default=0)
    transferred_out = Integer(default=0)
    adjusted = Integer(default=0)  # Net signed change
    updated_at = DateTime()


def _date_key(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d") if dt else ""


def _get_or_create(location_type, location_id, timestamp: datetime):
    date_str = _date_key(timestamp)
    activity_id = f"{location_type}:{location_id}:{date_str}"
    repo = current_domain.repository_for(DailyStockActivity)
    try:
        return repo.get(activity_id)
    except ObjectNotFoundError:
        return DailyStockActivity(
            activity_id=activity_id,
            location_type=location_type,
            location_id=location_id,
            date=date_str,
            received=0,
            dispensed=0,
            transferred_in=0,
            transferred_out=0,
            adjusted=0,
            updated_at=timestamp,
        )


def _bump(event, timestamp, field_name, amount):
    view = _get_or_create(event.location_type, event.location_id, timestamp)
    setattr(view, field_name, (getattr(view, field_name) or 0) + amount)
    view.updated_at = timestamp
    current_domain.repository_for(DailyStockActivity).add(view)


@relief.projector(projector_for=DailyStockActivity, aggregates=[Stock])
class DailyStockActivityProjector:
    @on(StockInitialized)
    def on_stock_initialized(self, event):
        if event.initial_quantity:
            _bump(event, event.initialized_at, "received", event.initial_quantity)

    @on(StockReceived)
    def on_stock_received(self, event):
        _bump(event, event.received_at, "received", event.quantity)

    @on(StockDispensed)
    def on_stock_dispensed(self, event):
        _bump(event, event.dispensed_at, "dispensed", event.quantity)

    @on(StockTransferred)
    def on_stock_transferred(self, event):
        field_name = "transferred_in" if event.direction == "in" else "transferred_out"
        _bump(event, event.transferred_at, field_name, event.quantity)

    @on(StockAdjusted)
    def on_stock_adjusted(self, event):
        _bump(event, event.adjusted_at, "adjusted", event.quantity_change)


def activity_for(location_type: str, location_id: str, date: str) -> DailyStockActivity | None:
    repo = current_domain.repository_for(DailyStockActivity)
    try:
        return repo.get(f"{location_type}:{location_id}:{date}")
    except ObjectNotFoundError:
        return None


def activity_by_location(location_type: str, location_id: str) -> list[DailyStockActivity]:
    repo = current_domain.repository_for(DailyStockActivity)
    rows = repo._dao.query.filter(location_type=location_type, location_id=location_id).all().items
    return sorted(rows, key=lambda row: row.date, reverse=True)
