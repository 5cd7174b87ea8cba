"""Stock aggregate (CQRS) — the balance of one item at one location.

One row exists per (item, location). The balance only changes through the
methods below, each of which validates before mutating and raises a domain
event describing the change. Rows are never deleted: an emptied or retired
row is soft-hidden so the Movement Log keeps resolving its ``stock_id``.

Status (sufficient / low / critical / outOfStock) is derived from the
balance and thresholds on every read and is never persisted.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from relief.domain import relief
from relief.errors import InsufficientStock, InvalidQuantity, InvalidThresholds, NotFound
from relief.paging import PagedQuery
from relief.stock.classifier import StockStatus, classify
from relief.stock.events import (
    StockAdjusted,
    StockDispensed,
    StockInitialized,
    StockReceived,
    StockThresholdsChanged,
    StockTransferred,
    StockVisibilityChanged,
)
from relief.stock.location import Location, LocationType

DEFAULT_MIN_STOCK_LEVEL = 10
DEFAULT_CRITICAL_LEVEL = 5
DEFAULT_CATEGORY = "other"
DEFAULT_UNIT = "unit"


def validate_thresholds(min_stock_level, critical_level):
    if min_stock_level is None or critical_level is None:
        raise InvalidThresholds(min_stock_level, critical_level)
    if min_stock_level < 0 or critical_level < 0 or critical_level > min_stock_level:
        raise InvalidThresholds(min_stock_level, critical_level)


def require_positive(quantity):
    if quantity is None or isinstance(quantity, bool) or quantity <= 0:
        raise InvalidQuantity(quantity)


def normalize_item_name(item_name):
    name = (item_name or "").strip()
    if not name:
        raise ValidationError({"item_name": ["Item name is required"]})
    return name


@relief.aggregate
class Stock:
    """The balance of one item at one location."""

    item_name = String(required=True, max_length=200)
    category = String(max_length=50, default=DEFAULT_CATEGORY)
    unit = String(max_length=50, default=DEFAULT_UNIT)

    location_type = String(choices=LocationType, required=True)
    location_id = String(required=True, max_length=100)
    location_name = String(max_length=200)

    quantity = Integer(default=0)
    min_stock_level = Integer(default=DEFAULT_MIN_STOCK_LEVEL)
    critical_level = Integer(default=DEFAULT_CRITICAL_LEVEL)

    total_received = Integer(default=0)
    total_dispensed = Integer(default=0)

    is_hidden = Boolean(default=False)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def quantity_cannot_be_negative(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": ["Stock quantity cannot be negative"]})

    @invariant.post
    def critical_level_within_minimum(self):
        if (
            self.critical_level is not None
            and self.min_stock_level is not None
            and self.critical_level > self.min_stock_level
        ):
            raise ValidationError({"critical_level": ["Critical level cannot exceed minimum stock level"]})

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def location(self) -> Location:
        return Location(self.location_type, self.location_id, self.location_name)

    @property
    def lock_key(self) -> str:
        return self.location.stock_key(self.item_name)

    @property
    def status(self) -> StockStatus:
        return classify(self.quantity or 0, self.min_stock_level or 0, self.critical_level or 0)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(
        cls,
        item_name,
        location: Location,
        quantity=0,
        category=None,
        unit=None,
        min_stock_level=DEFAULT_MIN_STOCK_LEVEL,
        critical_level=DEFAULT_CRITICAL_LEVEL,
    ):
        """Open a stock row for an item at a location."""
        item_name = normalize_item_name(item_name)
        validate_thresholds(min_stock_level, critical_level)
        if quantity is None or quantity < 0:
            raise InvalidQuantity(quantity, "Initial quantity cannot be negative")

        now = datetime.now(UTC)
        stock = cls(
            item_name=item_name,
            category=category or DEFAULT_CATEGORY,
            unit=unit or DEFAULT_UNIT,
            location_type=location.type,
            location_id=location.id,
            location_name=location.name,
            quantity=quantity,
            min_stock_level=min_stock_level,
            critical_level=critical_level,
            total_received=quantity,
            total_dispensed=0,
            is_hidden=False,
            created_at=now,
            updated_at=now,
        )
        stock.raise_(
            StockInitialized(
                stock_id=str(stock.id),
                item_name=item_name,
                category=stock.category,
                unit=stock.unit,
                location_type=location.type,
                location_id=location.id,
                initial_quantity=quantity,
                min_stock_level=min_stock_level,
                critical_level=critical_level,
                initialized_at=now,
            )
        )
        return stock

    # -------------------------------------------------------------------
    # Balance changes
    # -------------------------------------------------------------------
    def _ensure_available(self, quantity):
        available = self.quantity or 0
        if quantity > available:
            raise InsufficientStock(self.item_name, self.location, available, quantity)

    def receive(self, quantity, supplier=None):
        """Add stock delivered from outside the ledger."""
        require_positive(quantity)
        previous = self.quantity or 0
        now = datetime.now(UTC)

        with atomic_change(self):
            self.quantity = previous + quantity
            self.total_received = (self.total_received or 0) + quantity
            self.is_hidden = False
            self.updated_at = now

        self.raise_(
            StockReceived(
                stock_id=str(self.id),
                item_name=self.item_name,
                location_type=self.location_type,
                location_id=self.location_id,
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                supplier=supplier,
                received_at=now,
            )
        )
        return previous

    def dispense(self, quantity, recipient=None):
        """Hand stock out to beneficiaries."""
        require_positive(quantity)
        self._ensure_available(quantity)
        previous = self.quantity
        now = datetime.now(UTC)

        with atomic_change(self):
            self.quantity = previous - quantity
            self.total_dispensed = (self.total_dispensed or 0) + quantity
            self.updated_at = now

        self.raise_(
            StockDispensed(
                stock_id=str(self.id),
                item_name=self.item_name,
                location_type=self.location_type,
                location_id=self.location_id,
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                recipient=recipient,
                dispensed_at=now,
            )
        )
        return previous

    def transfer_out(self, quantity, transfer_id, destination: Location):
        require_positive(quantity)
        self._ensure_available(quantity)
        return self._shift(-quantity, "out", transfer_id, destination)

    def transfer_in(self, quantity, transfer_id, source: Location):
        require_positive(quantity)
        self.is_hidden = False
        return self._shift(quantity, "in", transfer_id, source)

    def _shift(self, delta, direction, transfer_id, counterpart: Location):
        previous = self.quantity or 0
        now = datetime.now(UTC)

        with atomic_change(self):
            self.quantity = previous + delta
            self.updated_at = now

        self.raise_(
            StockTransferred(
                stock_id=str(self.id),
                transfer_id=str(transfer_id),
                direction=direction,
                item_name=self.item_name,
                location_type=self.location_type,
                location_id=self.location_id,
                counterpart_type=counterpart.type,
                counterpart_id=counterpart.id,
                quantity=abs(delta),
                previous_quantity=previous,
                new_quantity=self.quantity,
                transferred_at=now,
            )
        )
        return previous

    def adjust_to(self, new_quantity, reason, adjusted_by=None):
        """Set the balance to a counted value. Returns the signed change."""
        if new_quantity is None or isinstance(new_quantity, bool) or new_quantity < 0:
            raise InvalidQuantity(new_quantity, "Adjusted quantity cannot be negative", field="new_quantity")

        previous = self.quantity or 0
        delta = new_quantity - previous
        now = datetime.now(UTC)

        with atomic_change(self):
            self.quantity = new_quantity
            self.updated_at = now

        self.raise_(
            StockAdjusted(
                stock_id=str(self.id),
                item_name=self.item_name,
                location_type=self.location_type,
                location_id=self.location_id,
                quantity_change=delta,
                previous_quantity=previous,
                new_quantity=new_quantity,
                reason=reason,
                adjusted_by=adjusted_by,
                adjusted_at=now,
            )
        )
        return delta

    # -------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------
    def change_thresholds(self, min_stock_level, critical_level):
        validate_thresholds(min_stock_level, critical_level)
        now = datetime.now(UTC)

        with atomic_change(self):
            self.min_stock_level = min_stock_level
            self.critical_level = critical_level
            self.updated_at = now

        self.raise_(
            StockThresholdsChanged(
                stock_id=str(self.id),
                min_stock_level=min_stock_level,
                critical_level=critical_level,
                changed_at=now,
            )
        )

    def _set_hidden(self, hidden):
        if bool(self.is_hidden) == hidden:
            return
        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_hidden = hidden
            self.updated_at = now
        self.raise_(
            StockVisibilityChanged(
                stock_id=str(self.id),
                is_hidden=str(hidden),
                changed_at=now,
            )
        )

    def hide(self):
        self._set_hidden(True)

    def show(self):
        self._set_hidden(False)


@relief.repository(part_of=Stock)
class StockRepository:
    """Lookups by row id and by (item, location)."""

    def get_stock(self, stock_id) -> Stock:
        try:
            return self.get(stock_id)
        except ObjectNotFoundError:
            raise NotFound("Stock", stock_id) from None

    def find_at(self, item_name: str, location: Location) -> Stock | None:
        return self._dao.query.filter(
            item_name=item_name,
            location_type=location.type,
            location_id=location.id,
        ).all().first

    def list_at(self, location: Location, include_hidden: bool = False) -> list[Stock]:
        rows = PagedQuery(
            Stock,
            filters={"location_type": location.type, "location_id": location.id},
            predicate=None if include_hidden else _visible,
        )
        return sorted(rows, key=lambda row: row.item_name)

    def list_all(self, include_hidden: bool = False) -> list[Stock]:
        return list(PagedQuery(Stock, predicate=None if include_hidden else _visible))


def _visible(stock):
    return not stock.is_hidden
