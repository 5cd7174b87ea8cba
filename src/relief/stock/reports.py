"""Dashboard reports computed from current stock rows.

Status is classified at read time, so these are plain queries rather than
stored projections.
"""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from relief.stock.classifier import StockStatus
from relief.stock.ledger import StockView
from relief.stock.location import Location, LocationType
from relief.stock.stock import Stock


@dataclass(frozen=True)
class StockAlert:
    stock_id: str
    item_name: str
    category: str
    location_type: str
    location_id: str
    location_name: str | None
    quantity: int
    min_stock_level: int
    critical_level: int
    status: StockStatus


def stock_alerts(location: Location | None = None) -> list[StockAlert]:
    """Visible rows that are not sufficient, most urgent first."""
    repo = current_domain.repository_for(Stock)
    rows = repo.list_at(location) if location is not None else repo.list_all()

    alerts = [
        StockAlert(
            stock_id=view.id,
            item_name=view.item_name,
            category=view.category,
            location_type=view.location_type,
            location_id=view.location_id,
            location_name=view.location_name,
            quantity=view.quantity,
            min_stock_level=view.min_stock_level,
            critical_level=view.critical_level,
            status=view.status,
        )
        for view in map(StockView.of, rows)
        if view.status != StockStatus.SUFFICIENT
    ]
    return sorted(alerts, key=lambda alert: (-alert.status.severity, alert.item_name, alert.location_id))


def category_overview() -> dict:
    """Item counts and quantities per category, plus provincial/shelter totals."""
    categories: dict[str, dict] = {}
    totals = {
        "items": 0,
        "quantity": 0,
        LocationType.PROVINCIAL.value: 0,
        LocationType.SHELTER.value: 0,
    }
    item_names: dict[str, set] = {}

    for stock in current_domain.repository_for(Stock).list_all():
        quantity = stock.quantity or 0
        bucket = categories.setdefault(stock.category, {"items": 0, "quantity": 0})
        names = item_names.setdefault(stock.category, set())
        if stock.item_name not in names:
            names.add(stock.item_name)
            bucket["items"] += 1
        bucket["quantity"] += quantity

        totals["quantity"] += quantity
        totals[stock.location_type] += quantity

    totals["items"] = len(set().union(*item_names.values())) if item_names else 0
    return {"categories": categories, "totals": totals}
