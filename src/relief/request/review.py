"""ReviewSupplyRequest — approve or reject a pending request.

Rejection needs admin notes and has no stock effect.

Approval is all-or-nothing. Every line is first checked against the current
provincial balances (lines for the same item draw down one running total);
if any line falls short, the review fails with a single ``RequestShortfall``
naming every short line and nothing is written. Otherwise each line is
transferred provincial → shelter, referencing the request number, and the
request is marked approved in the same Unit of Work.

The lock set covers the request itself plus the provincial and shelter rows
of every line, so a retried or concurrent review of the same request waits
and then fails with ``NotPending``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.errors import InsufficientStock, NotFound, RequestShortfall
from relief.locking import serialized_by
from relief.request.request import Decision, SupplyRequest
from relief.stock.engine import StockBatch
from relief.stock.location import Location


def load_request(request_id) -> SupplyRequest:
    try:
        return current_domain.repository_for(SupplyRequest).get(request_id)
    except ObjectNotFoundError:
        raise NotFound("SupplyRequest", request_id) from None


def _request_rows(command):
    request = load_request(command.request_id)
    provincial = Location.provincial()
    keys = [f"request:{request.id}"]
    for line in request.lines:
        keys.append(provincial.stock_key(line.item_name))
        keys.append(request.shelter.stock_key(line.item_name))
    return keys


@serialized_by(_request_rows)
@relief.command(part_of="SupplyRequest")
class ReviewSupplyRequest:
    request_id = Identifier(required=True)
    decision = String(required=True)  # "approved" or "rejected"
    reviewed_by = String(required=True, max_length=100)
    admin_notes = Text()


def find_shortfalls(batch: StockBatch, request: SupplyRequest, source: Location) -> list[InsufficientStock]:
    """Dry-run every line against the current balances at ``source``."""
    remaining: dict[str, int] = {}
    failures = []
    for line in request.ordered_lines:
        if line.item_name not in remaining:
            remaining[line.item_name] = batch.available(line.item_name, source)
        available = remaining[line.item_name]
        if line.requested_quantity > available:
            failures.append(InsufficientStock(line.item_name, source, available, line.requested_quantity))
        else:
            remaining[line.item_name] = available - line.requested_quantity
    return failures


@relief.command_handler(part_of=SupplyRequest)
class ReviewSupplyRequestHandler:
    @handle(ReviewSupplyRequest)
    def review_request(self, command):
        try:
            decision = Decision(command.decision)
        except ValueError:
            raise ValidationError({"decision": [f"Unknown decision {command.decision!r}"]}) from None

        repo = current_domain.repository_for(SupplyRequest)
        request = load_request(command.request_id)
        request.ensure_pending()

        if decision == Decision.REJECT:
            request.reject(reviewed_by=command.reviewed_by, notes=command.admin_notes)
            repo.add(request)
            logger.info(
                "Supply request rejected",
                request_number=request.request_number,
                reviewed_by=command.reviewed_by,
            )
            return str(request.id)

        provincial = Location.provincial()
        batch = StockBatch(performed_by=command.reviewed_by, notes=command.admin_notes)

        shortfalls = find_shortfalls(batch, request, provincial)
        if shortfalls:
            logger.warning(
                "Supply request approval blocked",
                request_number=request.request_number,
                short_items=[failure.item_name for failure in shortfalls],
            )
            raise RequestShortfall(request.request_number, shortfalls)

        for line in request.ordered_lines:
            batch.transfer(
                item_name=line.item_name,
                quantity=line.requested_quantity,
                source=provincial,
                destination=request.shelter,
                reference_id=request.request_number,
            )
        request.approve(reviewed_by=command.reviewed_by, notes=command.admin_notes)

        batch.commit()
        repo.add(request)

        logger.info(
            "Supply request approved",
            request_number=request.request_number,
            reviewed_by=command.reviewed_by,
            line_count=len(request.lines),
            movements=len(batch.movements),
        )
        return str(request.id)
