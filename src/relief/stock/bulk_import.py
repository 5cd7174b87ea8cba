"""Bulk stock import from already-parsed spreadsheet rows.

Each row is processed on its own: a new (item, location) is initialized with
the row's quantity, an existing one receives it. A failing row is logged and
reported, and the import carries on with the next row; rows are never
grouped into a single transaction.
"""

from dataclasses import dataclass, field

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from relief.domain import logger
from relief.errors import LedgerError
from relief.locking import dispatch
from relief.stock import ledger
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location, LocationType
from relief.stock.receiving import ReceiveStock
from relief.stock.stock import DEFAULT_CRITICAL_LEVEL, DEFAULT_MIN_STOCK_LEVEL


@dataclass(frozen=True)
class RowError:
    row: int
    kind: str
    message: str


@dataclass
class ImportReport:
    initialized: int = 0
    received: int = 0
    errors: list[RowError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def succeeded(self) -> int:
        return self.initialized + self.received


def _or_default(value, default):
    return default if value is None else value


def _location(row) -> Location:
    location_type = row.get("location_type") or LocationType.PROVINCIAL.value
    if location_type == LocationType.PROVINCIAL.value and not row.get("location_id"):
        return Location.provincial()
    return Location(location_type, row.get("location_id"), row.get("location_name"))


def _import_row(row, performed_by, reference_id):
    location = _location(row)
    item_name = (row.get("item_name") or "").strip()
    quantity = row.get("quantity") or 0

    existing = ledger.find(item_name, location) if item_name else None
    if existing is None:
        dispatch(
            InitializeStock(
                item_name=item_name,
                category=row.get("category"),
                unit=row.get("unit"),
                initial_quantity=quantity,
                min_stock_level=_or_default(row.get("min_stock_level"), DEFAULT_MIN_STOCK_LEVEL),
                critical_level=_or_default(row.get("critical_level"), DEFAULT_CRITICAL_LEVEL),
                location_type=location.type,
                location_id=location.id,
                location_name=location.name,
                performed_by=performed_by,
                reference_id=reference_id,
                notes=row.get("notes"),
            )
        )
        return "initialized"

    dispatch(
        ReceiveStock(
            item_name=item_name,
            quantity=quantity,
            location_type=location.type,
            location_id=location.id,
            location_name=location.name,
            supplier=row.get("supplier"),
            performed_by=performed_by,
            reference_id=reference_id,
            notes=row.get("notes"),
        )
    )
    return "received"


def import_rows(rows, performed_by=None, reference_id=None) -> ImportReport:
    """Initialize or receive every row independently and report the outcome."""
    report = ImportReport()
    logger.info("Stock import started", rows=len(rows), performed_by=performed_by)

    for index, row in enumerate(rows, start=1):
        try:
            outcome = _import_row(row, performed_by, reference_id)
        except (ValidationError, ObjectNotFoundError, InvalidOperationError, ValueError) as exc:
            kind = exc.kind if isinstance(exc, LedgerError) else type(exc).__name__
            message = exc.describe() if isinstance(exc, LedgerError) else str(exc)
            report.errors.append(RowError(row=index, kind=kind, message=message))
            logger.warning(
                "Stock import row failed",
                row=index,
                item_name=row.get("item_name"),
                error_kind=kind,
                error=message,
            )
            continue

        if outcome == "initialized":
            report.initialized += 1
        else:
            report.received += 1

    logger.info(
        "Stock import complete",
        initialized=report.initialized,
        received=report.received,
        failed=report.failed,
    )
    return report
