"""Read-side request listings (pending queue, per shelter, per urgency)."""

from relief.paging import PagedQuery
from relief.request.request import RequestStatus, SupplyRequest, Urgency


def _value(choice):
    return choice.value if isinstance(choice, RequestStatus | Urgency) else choice


def list_requests(status=None, shelter_id=None, urgency=None) -> PagedQuery:
    """Requests matching every given filter, newest submission first."""
    return PagedQuery(
        SupplyRequest,
        filters={
            "status": _value(status),
            "shelter_id": shelter_id,
            "urgency": _value(urgency),
        },
        order_by="-submitted_at",
    )


def pending_requests() -> PagedQuery:
    return list_requests(status=RequestStatus.PENDING)
