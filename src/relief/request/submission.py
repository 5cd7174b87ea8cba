"""SubmitSupplyRequest — shelter staff ask for supplies.

Submission never checks or touches stock: balances may change before an
admin reviews the request, so availability is enforced at approval.
``availability_warnings`` gives submitters a non-binding heads-up instead.
"""

import json

from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from relief.domain import logger, relief
from relief.request.request import SupplyRequest, Urgency, generate_request_number
from relief.stock import ledger
from relief.stock.location import Location

MAX_NUMBER_ATTEMPTS = 5


@relief.command(part_of="SupplyRequest")
class SubmitSupplyRequest:
    shelter_id = String(required=True, max_length=100)
    shelter_name = String(max_length=200)
    requested_by = String(required=True, max_length=100)
    urgency = String(choices=Urgency, default=Urgency.NORMAL.value)
    items = Text()  # JSON: [{item_name, requested_quantity, reason, stock_id?, unit?}]
    notes = Text()


def _unique_request_number(repo) -> str:
    for _ in range(MAX_NUMBER_ATTEMPTS):
        candidate = generate_request_number()
        if not repo._dao.query.filter(request_number=candidate).all().items:
            return candidate
    raise ValidationError({"request_number": ["Could not allocate a unique request number"]})


@relief.command_handler(part_of=SupplyRequest)
class SubmitSupplyRequestHandler:
    @handle(SubmitSupplyRequest)
    def submit_request(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else (command.items or [])
        repo = current_domain.repository_for(SupplyRequest)

        request = SupplyRequest.submit(
            shelter_id=command.shelter_id,
            shelter_name=command.shelter_name,
            requested_by=command.requested_by,
            items=items,
            urgency=command.urgency,
            notes=command.notes,
            request_number=_unique_request_number(repo),
        )
        repo.add(request)

        logger.info(
            "Supply request submitted",
            request_id=str(request.id),
            request_number=request.request_number,
            shelter_id=request.shelter_id,
            urgency=request.urgency,
            line_count=len(request.lines),
        )
        return str(request.id)


def availability_warnings(items) -> list[dict]:
    """Lines asking for more than the provincial warehouse currently holds.

    Read-only and advisory; quantities for the same item are summed.
    """
    provincial = Location.provincial()
    requested: dict[str, int] = {}
    for item in items:
        item_name = (item.get("item_name") or "").strip()
        if item_name:
            requested[item_name] = requested.get(item_name, 0) + int(item.get("requested_quantity") or 0)

    warnings = []
    for item_name, quantity in requested.items():
        view = ledger.find(item_name, provincial)
        available = view.quantity if view is not None else 0
        if quantity > available:
            warnings.append({"item_name": item_name, "requested": quantity, "available": available})
    return warnings
