"""Movement aggregate — one immutable row per balance-affecting event.

Movements are written by the transfer engine in the same Unit of Work as the
stock change they describe and are never updated or deleted afterwards. Item
and location names are denormalized so history stays readable after the
stock row is edited or hidden.

Quantities are stored as magnitudes; the sign follows from the type:
receive and transfer-in add, dispense and transfer-out subtract, and an
adjustment carries its own direction.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from relief.domain import relief


class MovementType(Enum):
    RECEIVE = "receive"
    TRANSFER = "transfer"
    DISPENSE = "dispense"
    ADJUST = "adjust"


class Direction(Enum):
    IN = "in"
    OUT = "out"


class PartyType(Enum):
    """Counterparties that are not stock locations."""

    EXTERNAL = "external"  # Suppliers and donors
    BENEFICIARY = "beneficiary"


@relief.aggregate
class Movement:
    movement_type = String(choices=MovementType, required=True)
    direction = String(choices=Direction, required=True)
    quantity = Integer(default=0)

    # The stock row this movement changed
    stock_id = Identifier(required=True)
    item_name = String(required=True, max_length=200)
    category = String(max_length=50)
    unit = String(max_length=50)
    location_type = String(required=True, max_length=20)
    location_id = String(required=True, max_length=100)
    location_name = String(max_length=200)

    # From / to
    source_type = String(max_length=20)
    source_id = String(max_length=100)
    source_name = String(max_length=200)
    destination_type = String(max_length=20)
    destination_id = String(max_length=100)
    destination_name = String(max_length=200)

    quantity_before = Integer(default=0)
    quantity_after = Integer(default=0)

    transfer_id = Identifier()
    reference_id = String(max_length=100)
    notes = Text()
    performed_by = String(max_length=100)
    performed_at = DateTime(required=True)

    @invariant.post
    def quantity_is_a_magnitude(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": ["Movement quantity must not be negative"]})

    @property
    def signed_quantity(self) -> int:
        magnitude = self.quantity or 0
        return magnitude if self.direction == Direction.IN.value else -magnitude

    @classmethod
    def of(
        cls,
        stock,
        movement_type: MovementType,
        direction: Direction,
        quantity,
        quantity_before,
        performed_by=None,
        source=None,
        destination=None,
        reference_id=None,
        notes=None,
        transfer_id=None,
        performed_at=None,
    ):
        """Describe a change already applied to ``stock``.

        ``source`` and ``destination`` are ``(type, id, name)`` triples.
        """
        source_type, source_id, source_name = source or (None, None, None)
        destination_type, destination_id, destination_name = destination or (None, None, None)
        return cls(
            movement_type=movement_type.value,
            direction=direction.value,
            quantity=abs(quantity),
            stock_id=str(stock.id),
            item_name=stock.item_name,
            category=stock.category,
            unit=stock.unit,
            location_type=stock.location_type,
            location_id=stock.location_id,
            location_name=stock.location_name,
            source_type=source_type,
            source_id=source_id,
            source_name=source_name,
            destination_type=destination_type,
            destination_id=destination_id,
            destination_name=destination_name,
            quantity_before=quantity_before,
            quantity_after=stock.quantity,
            transfer_id=str(transfer_id) if transfer_id else None,
            reference_id=reference_id,
            notes=notes,
            performed_by=performed_by,
            performed_at=performed_at or datetime.now(UTC),
        )
