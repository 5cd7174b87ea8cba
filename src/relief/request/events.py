"""Domain events for the SupplyRequest aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from relief.domain import relief


@relief.event(part_of="SupplyRequest")
class SupplyRequestSubmitted:
    """A shelter asked the provincial warehouse for supplies."""

    __version__ = 1

    request_id = Identifier(required=True)
    request_number = String(required=True)
    shelter_id = String(required=True)
    requested_by = String()
    urgency = String(required=True)
    line_count = Integer(default=0)
    total_quantity = Integer(default=0)
    submitted_at = DateTime(required=True)


@relief.event(part_of="SupplyRequest")
class SupplyRequestApproved:
    """Every line was transferred from provincial stock to the shelter."""

    __version__ = 1

    request_id = Identifier(required=True)
    request_number = String(required=True)
    shelter_id = String(required=True)
    reviewed_by = String(required=True)
    line_count = Integer(default=0)
    admin_notes = Text()
    reviewed_at = DateTime(required=True)


@relief.event(part_of="SupplyRequest")
class SupplyRequestRejected:
    __version__ = 1

    request_id = Identifier(required=True)
    request_number = String(required=True)
    shelter_id = String(required=True)
    reviewed_by = String(required=True)
    admin_notes = Text(required=True)
    reviewed_at = DateTime(required=True)
