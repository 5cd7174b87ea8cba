"""Movement Log — append and read the stock history.

The log exposes ``record`` and read queries only. Reads are lazy
``PagedQuery`` sequences ordered by ``performed_at`` descending and can be
iterated again from the start at any time.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from relief.movement.movement import Movement, MovementType
from relief.paging import PagedQuery
from relief.stock.location import Location

NEWEST_FIRST = "-performed_at"


def record(movement: Movement) -> Movement:
    """Append a movement. A movement id can only be written once."""
    repo = current_domain.repository_for(Movement)
    if repo._dao.query.filter(id=str(movement.id)).all().items:
        raise ValidationError({"id": [f"Movement {movement.id} is already recorded and cannot be changed"]})
    repo.add(movement)
    return movement


def _utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def _window(date_range):
    """Predicate and early-stop callables for an inclusive (start, end) range."""
    if not date_range:
        return None, None
    start, end = date_range
    start = _utc_naive(start) if start else None
    end = _utc_naive(end) if end else None

    def within(movement):
        performed_at = _utc_naive(movement.performed_at)
        return end is None or performed_at <= end

    def past_start(movement):
        # Rows arrive newest first; once older than ``start`` nothing else matches
        return start is not None and _utc_naive(movement.performed_at) < start

    return within, past_start


def query_by_stock(stock_id) -> PagedQuery:
    return PagedQuery(Movement, filters={"stock_id": str(stock_id)}, order_by=NEWEST_FIRST)


def query_by_location(location: Location, date_range=None) -> PagedQuery:
    predicate, stop = _window(date_range)
    return PagedQuery(
        Movement,
        filters={"location_type": location.type, "location_id": location.id},
        order_by=NEWEST_FIRST,
        predicate=predicate,
        stop=stop,
    )


def query_all(movement_type=None, date_range=None) -> PagedQuery:
    if isinstance(movement_type, MovementType):
        movement_type = movement_type.value
    predicate, stop = _window(date_range)
    return PagedQuery(
        Movement,
        filters={"movement_type": movement_type},
        order_by=NEWEST_FIRST,
        predicate=predicate,
        stop=stop,
    )


def query_by_reference(reference_id: str) -> PagedQuery:
    """Movements written under one document or request number."""
    return PagedQuery(Movement, filters={"reference_id": reference_id}, order_by=NEWEST_FIRST)


def reconstruct_balance(stock_id) -> int:
    """Sum of signed movement quantities for a stock row."""
    return sum(movement.signed_quantity for movement in query_by_stock(stock_id))
