"""Stock status classification.

A stock row's status is never stored; it is derived from the balance and the
row's thresholds every time the row is read.
"""

from enum import Enum


class StockStatus(Enum):
    SUFFICIENT = "sufficient"
    LOW = "low"
    CRITICAL = "critical"
    OUT_OF_STOCK = "outOfStock"

    @property
    def severity(self) -> int:
        """Higher is more urgent."""
        return _SEVERITY[self]


_SEVERITY = {
    StockStatus.SUFFICIENT: 0,
    StockStatus.LOW: 1,
    StockStatus.CRITICAL: 2,
    StockStatus.OUT_OF_STOCK: 3,
}


def classify(quantity: int, min_stock_level: int, critical_level: int) -> StockStatus:
    """Map a balance and its thresholds to a status band.

    Boundaries resolve to the more severe band: a quantity equal to
    ``critical_level`` is critical, one equal to ``min_stock_level`` is low.
    """
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= critical_level:
        return StockStatus.CRITICAL
    if quantity <= min_stock_level:
        return StockStatus.LOW
    return StockStatus.SUFFICIENT
