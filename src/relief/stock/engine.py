"""Transfer engine — stock mutations and their movements as one unit.

A ``StockBatch`` is the working set of a single command handler. It loads
stock rows once, applies each change through the Stock aggregate (which
validates before mutating), collects the matching Movement rows and writes
everything in ``commit()``. Because the handler runs inside a Protean Unit
of Work, a failure anywhere before the commit leaves storage untouched, and
the commit lands every stock row and movement together.

Callers must hold the row locks for every row the batch touches (see
``relief.locking``); the batch re-reads balances inside those locks.
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean.utils.globals import current_domain

from relief.domain import logger
from relief.errors import DuplicateStock, InsufficientStock, NotFound, SameLocation
from relief.movement import log as movement_log
from relief.movement.movement import Direction, Movement, MovementType, PartyType
from relief.stock.location import Location
from relief.stock.references import ReferencePrefix, generate_reference_id
from relief.stock.stock import (
    DEFAULT_CRITICAL_LEVEL,
    DEFAULT_MIN_STOCK_LEVEL,
    Stock,
    normalize_item_name,
    require_positive,
)


def _party(location: Location):
    return (location.type, location.id, location.name)


class StockBatch:
    def __init__(self, performed_by=None, notes=None):
        self.performed_by = performed_by
        self.notes = notes
        self._repo = current_domain.repository_for(Stock)
        self._stocks: dict[str, Stock] = {}
        self._touched: list[str] = []
        self._movements: list[Movement] = []

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------
    def _remember(self, stock: Stock) -> Stock:
        return self._stocks.setdefault(stock.lock_key, stock)

    def _touch(self, stock: Stock):
        if stock.lock_key not in self._touched:
            self._touched.append(stock.lock_key)

    def find(self, item_name, location: Location) -> Stock | None:
        key = location.stock_key(item_name)
        if key in self._stocks:
            return self._stocks[key]
        stock = self._repo.find_at(item_name, location)
        return self._remember(stock) if stock is not None else None

    def require(self, item_name, location: Location) -> Stock:
        stock = self.find(item_name, location)
        if stock is None:
            raise NotFound("Stock", location.stock_key(item_name))
        return stock

    def get(self, stock_id) -> Stock:
        for stock in self._stocks.values():
            if str(stock.id) == str(stock_id):
                return stock
        return self._remember(self._repo.get_stock(stock_id))

    def available(self, item_name, location: Location) -> int:
        stock = self.find(item_name, location)
        return (stock.quantity or 0) if stock is not None else 0

    @property
    def movements(self) -> list[Movement]:
        return list(self._movements)

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def open(
        self,
        item_name,
        location: Location,
        quantity=0,
        category=None,
        unit=None,
        min_stock_level=DEFAULT_MIN_STOCK_LEVEL,
        critical_level=DEFAULT_CRITICAL_LEVEL,
        reference_id=None,
    ) -> Stock:
        """Create the row for (item, location); record the opening balance as a receipt."""
        item_name = normalize_item_name(item_name)
        if self.find(item_name, location) is not None:
            raise DuplicateStock(item_name, location)

        stock = Stock.open(
            item_name=item_name,
            location=location,
            quantity=quantity,
            category=category,
            unit=unit,
            min_stock_level=min_stock_level,
            critical_level=critical_level,
        )
        self._remember(stock)
        self._touch(stock)

        if quantity:
            self._movements.append(
                Movement.of(
                    stock,
                    MovementType.RECEIVE,
                    Direction.IN,
                    quantity,
                    quantity_before=0,
                    performed_by=self.performed_by,
                    source=(PartyType.EXTERNAL.value, None, "Initial stock"),
                    destination=_party(location),
                    reference_id=reference_id or generate_reference_id(ReferencePrefix.INITIALIZE),
                    notes=self.notes,
                )
            )
        return stock

    def receive(
        self,
        item_name,
        location: Location,
        quantity,
        supplier=None,
        category=None,
        unit=None,
        reference_id=None,
    ) -> Movement:
        """Add supplier stock, opening the row first when the item is new here."""
        require_positive(quantity)
        item_name = normalize_item_name(item_name)
        stock = self.find(item_name, location)
        if stock is None:
            stock = self.open(item_name, location, 0, category=category, unit=unit)

        before = stock.receive(quantity, supplier=supplier)
        self._touch(stock)
        movement = Movement.of(
            stock,
            MovementType.RECEIVE,
            Direction.IN,
            quantity,
            quantity_before=before,
            performed_by=self.performed_by,
            source=(PartyType.EXTERNAL.value, None, supplier),
            destination=_party(stock.location),
            reference_id=reference_id or generate_reference_id(ReferencePrefix.RECEIVE),
            notes=self.notes,
        )
        self._movements.append(movement)
        return movement

    def dispense(self, item_name, location: Location, quantity, recipient=None, reference_id=None) -> Movement:
        require_positive(quantity)
        stock = self.require(normalize_item_name(item_name), location)

        before = stock.dispense(quantity, recipient=recipient)
        self._touch(stock)
        movement = Movement.of(
            stock,
            MovementType.DISPENSE,
            Direction.OUT,
            quantity,
            quantity_before=before,
            performed_by=self.performed_by,
            source=_party(stock.location),
            destination=(PartyType.BENEFICIARY.value, None, recipient),
            reference_id=reference_id or generate_reference_id(ReferencePrefix.DISPENSE),
            notes=self.notes,
        )
        self._movements.append(movement)
        return movement

    def transfer(
        self,
        item_name,
        quantity,
        source: Location,
        destination: Location,
        reference_id=None,
    ) -> tuple[Movement, Movement]:
        """Move ``quantity`` of an item between two locations.

        Returns the (out, in) movement pair; both share a ``transfer_id``.
        """
        require_positive(quantity)
        if source == destination:
            raise SameLocation(source)

        item_name = normalize_item_name(item_name)
        origin = self.require(item_name, source)
        if quantity > (origin.quantity or 0):
            raise InsufficientStock(item_name, source, origin.quantity or 0, quantity)

        target = self.find(item_name, destination)
        if target is None:
            target = self.open(item_name, destination, 0, category=origin.category, unit=origin.unit)

        transfer_id = str(uuid4())
        reference_id = reference_id or generate_reference_id(ReferencePrefix.TRANSFER)
        performed_at = datetime.now(UTC)
        parties = {
            "source": _party(origin.location),
            "destination": _party(target.location),
        }

        origin_before = origin.transfer_out(quantity, transfer_id, target.location)
        target_before = target.transfer_in(quantity, transfer_id, origin.location)
        self._touch(origin)
        self._touch(target)

        outgoing = Movement.of(
            origin,
            MovementType.TRANSFER,
            Direction.OUT,
            quantity,
            quantity_before=origin_before,
            performed_by=self.performed_by,
            reference_id=reference_id,
            notes=self.notes,
            transfer_id=transfer_id,
            performed_at=performed_at,
            **parties,
        )
        incoming = Movement.of(
            target,
            MovementType.TRANSFER,
            Direction.IN,
            quantity,
            quantity_before=target_before,
            performed_by=self.performed_by,
            reference_id=reference_id,
            notes=self.notes,
            transfer_id=transfer_id,
            performed_at=performed_at,
            **parties,
        )
        self._movements.extend([outgoing, incoming])
        return outgoing, incoming

    def adjust(self, stock: Stock, new_quantity, reason, reference_id=None) -> Movement:
        before = stock.quantity or 0
        delta = stock.adjust_to(new_quantity, reason, adjusted_by=self.performed_by)
        self._touch(stock)
        location = _party(stock.location)
        movement = Movement.of(
            stock,
            MovementType.ADJUST,
            Direction.IN if delta >= 0 else Direction.OUT,
            delta,
            quantity_before=before,
            performed_by=self.performed_by,
            source=None if delta >= 0 else location,
            destination=location if delta >= 0 else None,
            reference_id=reference_id or generate_reference_id(ReferencePrefix.ADJUST),
            notes=reason if not self.notes else f"{reason}; {self.notes}",
        )
        self._movements.append(movement)
        return movement

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------
    def touch(self, stock: Stock):
        """Mark a row changed outside the balance operations (thresholds, visibility)."""
        self._remember(stock)
        self._touch(stock)

    def commit(self):
        for key in self._touched:
            self._repo.add(self._stocks[key])
        for movement in self._movements:
            movement_log.record(movement)

        logger.debug(
            "Stock batch committed",
            stocks=len(self._touched),
            movements=len(self._movements),
            performed_by=self.performed_by,
        )
        return self._movements
