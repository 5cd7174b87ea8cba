"""SupplyRequest aggregate (CQRS) — a shelter's multi-item ask for stock.

State Machine (3 states):
    PENDING → APPROVED | REJECTED
    APPROVED, REJECTED → (terminal)

A request never touches stock by itself. Approval is carried out by the
review handler, which transfers every line from provincial stock to the
shelter in the same Unit of Work that flips the status.
"""

import secrets
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from relief.domain import relief
from relief.errors import EmptyRequest, InvalidQuantity, MissingNotes, MissingReason, NotPending
from relief.request.events import SupplyRequestApproved, SupplyRequestRejected, SupplyRequestSubmitted
from relief.stock.location import Location


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class RequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Urgency(Enum):
    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"


class Decision(Enum):
    APPROVE = "approved"
    REJECT = "rejected"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    RequestStatus.PENDING: {RequestStatus.APPROVED, RequestStatus.REJECTED},
    RequestStatus.APPROVED: set(),
    RequestStatus.REJECTED: set(),
}


def generate_request_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"REQ-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@relief.entity(part_of="SupplyRequest")
class RequestLine:
    """One requested item. ``position`` keeps the submitted order."""

    stock_id = Identifier()  # Provincial stock row the shelter picked, if any
    item_name = String(required=True, max_length=200)
    requested_quantity = Integer()
    unit = String(max_length=50)
    reason = String(required=True, max_length=500)
    position = Integer(default=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@relief.aggregate
class SupplyRequest:
    request_number = String(required=True, max_length=30)
    shelter_id = String(required=True, max_length=100)
    shelter_name = String(max_length=200)
    requested_by = String(required=True, max_length=100)
    urgency = String(choices=Urgency, default=Urgency.NORMAL.value)
    notes = Text()

    lines = HasMany(RequestLine)

    status = String(choices=RequestStatus, default=RequestStatus.PENDING.value)
    reviewed_by = String(max_length=100)
    reviewed_at = DateTime()
    admin_notes = Text()

    submitted_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def review_fields_match_status(self):
        if self.status != RequestStatus.PENDING.value and not self.reviewed_by:
            raise ValidationError({"reviewed_by": ["A reviewed request must name its reviewer"]})

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def shelter(self) -> Location:
        return Location.shelter(self.shelter_id, self.shelter_name)

    @property
    def ordered_lines(self) -> list:
        return sorted(self.lines, key=lambda line: line.position or 0)

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value

    @property
    def total_quantity(self) -> int:
        return sum(line.requested_quantity or 0 for line in self.lines)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        shelter_id,
        requested_by,
        items,
        urgency=Urgency.NORMAL.value,
        shelter_name=None,
        notes=None,
        request_number=None,
    ):
        """Create a pending request.

        ``items`` is a list of dicts with ``item_name``, ``requested_quantity``,
        ``reason`` and optionally ``stock_id`` and ``unit``.
        """
        if not items:
            raise EmptyRequest()

        lines = []
        for position, item in enumerate(items):
            item_name = (item.get("item_name") or "").strip()
            if not item_name:
                raise ValidationError({"item_name": [f"Item {position + 1} has no item name"]})
            if not (item.get("reason") or "").strip():
                raise MissingReason(item_name)
            quantity = item.get("requested_quantity")
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
                raise InvalidQuantity(quantity, f"Requested quantity for {item_name} must be a positive integer")
            lines.append(
                RequestLine(
                    stock_id=item.get("stock_id"),
                    item_name=item_name,
                    requested_quantity=quantity,
                    unit=item.get("unit"),
                    reason=item["reason"].strip(),
                    position=position,
                )
            )

        now = datetime.now(UTC)
        request = cls(
            request_number=request_number or generate_request_number(now),
            shelter_id=shelter_id,
            shelter_name=shelter_name,
            requested_by=requested_by,
            urgency=urgency or Urgency.NORMAL.value,
            notes=notes,
            status=RequestStatus.PENDING.value,
            submitted_at=now,
            updated_at=now,
        )
        for line in lines:
            request.add_lines(line)

        request.raise_(
            SupplyRequestSubmitted(
                request_id=str(request.id),
                request_number=request.request_number,
                shelter_id=str(shelter_id),
                requested_by=requested_by,
                urgency=request.urgency,
                line_count=len(lines),
                total_quantity=request.total_quantity,
                submitted_at=now,
            )
        )
        return request

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def ensure_pending(self):
        if not self.is_pending:
            raise NotPending(self.request_number, self.status)

    def _assert_can_transition(self, target_status):
        current = RequestStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise NotPending(self.request_number, self.status)

    def approve(self, reviewed_by, notes=None):
        """Mark approved. Stock must already have been transferred by the caller."""
        self._assert_can_transition(RequestStatus.APPROVED)
        now = datetime.now(UTC)

        with atomic_change(self):
            self.status = RequestStatus.APPROVED.value
            self.reviewed_by = reviewed_by
            self.reviewed_at = now
            self.admin_notes = notes
            self.updated_at = now

        self.raise_(
            SupplyRequestApproved(
                request_id=str(self.id),
                request_number=self.request_number,
                shelter_id=self.shelter_id,
                reviewed_by=reviewed_by,
                line_count=len(self.lines),
                admin_notes=notes,
                reviewed_at=now,
            )
        )

    def reject(self, reviewed_by, notes):
        self._assert_can_transition(RequestStatus.REJECTED)
        if not (notes or "").strip():
            raise MissingNotes()
        now = datetime.now(UTC)

        with atomic_change(self):
            self.status = RequestStatus.REJECTED.value
            self.reviewed_by = reviewed_by
            self.reviewed_at = now
            self.admin_notes = notes.strip()
            self.updated_at = now

        self.raise_(
            SupplyRequestRejected(
                request_id=str(self.id),
                request_number=self.request_number,
                shelter_id=self.shelter_id,
                reviewed_by=reviewed_by,
                admin_notes=self.admin_notes,
                reviewed_at=now,
            )
        )
