"""Typed ledger errors.

Every error carries a stable ``kind`` and an inspectable ``payload`` so API
and batch callers can branch on the failure without parsing messages. Each
one also derives from the Protean exception a framework caller already
expects (``ValidationError``, ``ObjectNotFoundError`` or
``InvalidOperationError``), with messages in Protean's
``{"field": ["message"]}`` form.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class LedgerError(Exception):
    kind = "LedgerError"

    @property
    def payload(self) -> dict:
        return {}

    def describe(self) -> str:
        messages = getattr(self, "messages", None) or {}
        if not messages and self.args and isinstance(self.args[0], dict):
            messages = self.args[0]
        return "; ".join(msg for msgs in messages.values() for msg in msgs)


class NotFound(LedgerError, ObjectNotFoundError):
    kind = "NotFound"

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = str(identifier)
        # ObjectNotFoundError does not keep a messages dict of its own
        self.messages = {"_entity": [f"{entity} with id `{identifier}` does not exist"]}
        super().__init__(self.messages)

    @property
    def payload(self) -> dict:
        return {"entity": self.entity, "id": self.identifier}


class DuplicateStock(LedgerError, ValidationError):
    kind = "DuplicateStock"

    def __init__(self, item_name: str, location):
        self.item_name = item_name
        self.location = str(location)
        super().__init__({"item_name": [f"Stock for {item_name} already exists at {self.location}"]})

    @property
    def payload(self) -> dict:
        return {"item_name": self.item_name, "location": self.location}


class InvalidQuantity(LedgerError, ValidationError):
    kind = "InvalidQuantity"

    def __init__(self, quantity, reason: str = "Quantity must be a positive integer", field: str = "quantity"):
        self.quantity = quantity
        super().__init__({field: [reason]})

    @property
    def payload(self) -> dict:
        return {"quantity": self.quantity}


class InvalidThresholds(LedgerError, ValidationError):
    kind = "InvalidThresholds"

    def __init__(self, min_stock_level, critical_level):
        self.min_stock_level = min_stock_level
        self.critical_level = critical_level
        super().__init__(
            {
                "critical_level": [
                    f"Thresholds must be non-negative with critical level ({critical_level}) "
                    f"not above minimum stock level ({min_stock_level})"
                ]
            }
        )

    @property
    def payload(self) -> dict:
        return {"min_stock_level": self.min_stock_level, "critical_level": self.critical_level}


class SameLocation(LedgerError, ValidationError):
    kind = "SameLocation"

    def __init__(self, location):
        self.location = str(location)
        super().__init__({"to_location": [f"Cannot transfer stock from {self.location} to itself"]})

    @property
    def payload(self) -> dict:
        return {"location": self.location}


class InsufficientStock(LedgerError, ValidationError):
    kind = "InsufficientStock"

    def __init__(self, item_name: str, location, available: int, requested: int):
        self.item_name = item_name
        self.location = str(location)
        self.available = available
        self.requested = requested
        super().__init__(
            {
                "quantity": [
                    f"Insufficient stock of {item_name} at {self.location}: "
                    f"requested {requested}, available {available}"
                ]
            }
        )

    @property
    def shortfall(self) -> int:
        return self.requested - self.available

    @property
    def payload(self) -> dict:
        return {
            "item_name": self.item_name,
            "location": self.location,
            "available": self.available,
            "requested": self.requested,
        }


class EmptyRequest(LedgerError, ValidationError):
    kind = "EmptyRequest"

    def __init__(self):
        super().__init__({"items": ["A request must contain at least one item"]})


class MissingReason(LedgerError, ValidationError):
    kind = "MissingReason"

    def __init__(self, item_name: str | None = None, field: str = "reason"):
        self.item_name = item_name
        target = f" for {item_name}" if item_name else ""
        super().__init__({field: [f"A reason is required{target}"]})

    @property
    def payload(self) -> dict:
        return {"item_name": self.item_name}


class MissingNotes(LedgerError, ValidationError):
    kind = "MissingNotes"

    def __init__(self):
        super().__init__({"admin_notes": ["Notes are required when rejecting a request"]})


class NotPending(LedgerError, ValidationError):
    kind = "NotPending"

    def __init__(self, request_number: str, status: str):
        self.request_number = request_number
        self.status = status
        super().__init__({"status": [f"Request {request_number} has already been {status}"]})

    @property
    def payload(self) -> dict:
        return {"request_number": self.request_number, "status": self.status}


class RequestShortfall(LedgerError, ValidationError):
    """Approval aborted: one or more request lines exceed provincial stock."""

    kind = "InsufficientStock"

    def __init__(self, request_number: str, failures: list[InsufficientStock]):
        self.request_number = request_number
        self.failures = list(failures)
        super().__init__({"items": [failure.describe() for failure in self.failures]})

    @property
    def payload(self) -> dict:
        return {
            "request_number": self.request_number,
            "failures": [failure.payload for failure in self.failures],
        }


class Busy(LedgerError, InvalidOperationError):
    kind = "Busy"

    def __init__(self, keys, timeout: float):
        self.keys = list(keys)
        self.timeout = timeout
        self.messages = {"_lock": [f"Stock is busy, could not lock {', '.join(self.keys)} within {timeout}s"]}
        super().__init__(self.messages)

    @property
    def payload(self) -> dict:
        return {"keys": self.keys, "timeout": self.timeout}
