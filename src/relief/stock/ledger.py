"""Stock Ledger read accessors.

Views are built fresh from the stored row on every call, so ``status``
always reflects the current balance and thresholds.
"""

from dataclasses import asdict, dataclass
from datetime import datetime

from protean.utils.globals import current_domain

from relief.stock.classifier import StockStatus
from relief.stock.location import Location
from relief.stock.stock import Stock


@dataclass(frozen=True)
class StockView:
    id: str
    item_name: str
    category: str
    unit: str
    location_type: str
    location_id: str
    location_name: str | None
    quantity: int
    min_stock_level: int
    critical_level: int
    total_received: int
    total_dispensed: int
    is_hidden: bool
    status: StockStatus
    updated_at: datetime | None = None

    @classmethod
    def of(cls, stock: Stock) -> "StockView":
        return cls(
            id=str(stock.id),
            item_name=stock.item_name,
            category=stock.category,
            unit=stock.unit,
            location_type=stock.location_type,
            location_id=stock.location_id,
            location_name=stock.location_name,
            quantity=stock.quantity or 0,
            min_stock_level=stock.min_stock_level or 0,
            critical_level=stock.critical_level or 0,
            total_received=stock.total_received or 0,
            total_dispensed=stock.total_dispensed or 0,
            is_hidden=bool(stock.is_hidden),
            status=stock.status,
            updated_at=stock.updated_at,
        )

    @property
    def location(self) -> Location:
        return Location(self.location_type, self.location_id, self.location_name)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def get(stock_id) -> StockView:
    """Return the current view of a stock row, or raise ``NotFound``."""
    return StockView.of(current_domain.repository_for(Stock).get_stock(stock_id))


def find(item_name: str, location: Location) -> StockView | None:
    stock = current_domain.repository_for(Stock).find_at(item_name.strip(), location)
    return StockView.of(stock) if stock is not None else None


def list_by_location(location: Location, include_hidden: bool = False) -> list[StockView]:
    rows = current_domain.repository_for(Stock).list_at(location, include_hidden=include_hidden)
    return [StockView.of(row) for row in rows]
