"""FastAPI routes for the Relief domain.

Mutating routes build a Protean command and hand it to ``dispatch``, which
takes the command's row locks and processes it synchronously. Those routes are
plain ``def`` so a lock wait blocks a threadpool worker, not the event loop.
Responses re-read the ledger so ``status`` is always freshly classified.
"""

import json
from datetime import datetime

from fastapi import APIRouter, Query
from protean.exceptions import ValidationError

from relief.api.schemas import (
    AdjustStockRequest,
    CategoryBucket,
    DailyActivityResponse,
    DispenseStockRequest,
    ErrorResponse,
    ImportReportResponse,
    ImportRowErrorResponse,
    ImportStockRequest,
    InitializeStockRequest,
    MovementListResponse,
    MovementResponse,
    OverviewResponse,
    ReceiveStockRequest,
    RequestLineResponse,
    ReviewRequestRequest,
    StatusResponse,
    StockAlertResponse,
    StockListResponse,
    StockResponse,
    SubmitRequestRequest,
    SupplyRequestListResponse,
    SupplyRequestResponse,
    TransferResponse,
    TransferStockRequest,
    UpdateThresholdsRequest,
)
from relief.locking import dispatch
from relief.movement import log as movement_log
from relief.projections.daily_activity import activity_by_location
from relief.request.listing import list_requests
from relief.request.review import ReviewSupplyRequest, load_request
from relief.request.submission import SubmitSupplyRequest, availability_warnings
from relief.stock import ledger
from relief.stock.adjustment import AdjustStock, UpdateThresholds
from relief.stock.bulk_import import import_rows
from relief.stock.dispensing import DispenseStock
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location, LocationType, provincial_id
from relief.stock.receiving import ReceiveStock
from relief.stock.reports import category_overview, stock_alerts
from relief.stock.transfer import TransferStock
from relief.stock.visibility import HideStock, ShowStock

MAX_PAGE_SIZE = 200


def _location_id(location_type: str, location_id: str | None) -> str | None:
    if location_id is None and location_type == LocationType.PROVINCIAL.value:
        return provincial_id()
    return location_id


def _location(location_type: str, location_id: str | None) -> Location:
    try:
        return Location(location_type, _location_id(location_type, location_id))
    except ValueError as exc:
        raise ValidationError({"location": [str(exc)]}) from None


def _stock_response(view: ledger.StockView) -> StockResponse:
    return StockResponse(
        stock_id=view.id,
        item_name=view.item_name,
        category=view.category,
        unit=view.unit,
        location_type=view.location_type,
        location_id=view.location_id,
        location_name=view.location_name,
        quantity=view.quantity,
        min_stock_level=view.min_stock_level,
        critical_level=view.critical_level,
        total_received=view.total_received,
        total_dispensed=view.total_dispensed,
        is_hidden=view.is_hidden,
        status=view.status.value,
        updated_at=view.updated_at,
    )


def _movement_response(movement) -> MovementResponse:
    return MovementResponse(
        movement_id=str(movement.id),
        movement_type=movement.movement_type,
        direction=movement.direction,
        quantity=movement.quantity or 0,
        signed_quantity=movement.signed_quantity,
        stock_id=str(movement.stock_id),
        item_name=movement.item_name,
        unit=movement.unit,
        location_type=movement.location_type,
        location_id=movement.location_id,
        source_type=movement.source_type,
        source_id=movement.source_id,
        source_name=movement.source_name,
        destination_type=movement.destination_type,
        destination_id=movement.destination_id,
        destination_name=movement.destination_name,
        quantity_before=movement.quantity_before or 0,
        quantity_after=movement.quantity_after or 0,
        transfer_id=str(movement.transfer_id) if movement.transfer_id else None,
        reference_id=movement.reference_id,
        notes=movement.notes,
        performed_by=movement.performed_by,
        performed_at=movement.performed_at,
    )


def _request_response(request, warnings=()) -> SupplyRequestResponse:
    return SupplyRequestResponse(
        request_id=str(request.id),
        request_number=request.request_number,
        shelter_id=request.shelter_id,
        shelter_name=request.shelter_name,
        requested_by=request.requested_by,
        urgency=request.urgency,
        status=request.status,
        items=[
            RequestLineResponse(
                item_name=line.item_name,
                requested_quantity=line.requested_quantity,
                unit=line.unit,
                reason=line.reason,
                stock_id=str(line.stock_id) if line.stock_id else None,
            )
            for line in request.ordered_lines
        ],
        reviewed_by=request.reviewed_by,
        reviewed_at=request.reviewed_at,
        admin_notes=request.admin_notes,
        submitted_at=request.submitted_at,
        warnings=list(warnings),
    )


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Stock Router
# ---------------------------------------------------------------------------
stock_router = APIRouter(prefix="/stock", tags=["stock"], responses=ERROR_RESPONSES)


@stock_router.post("", status_code=201, response_model=StockResponse)
def initialize_stock(body: InitializeStockRequest) -> StockResponse:
    command = InitializeStock(
        item_name=body.item_name,
        category=body.category,
        unit=body.unit,
        initial_quantity=body.initial_quantity,
        min_stock_level=body.min_stock_level,
        critical_level=body.critical_level,
        location_type=body.location_type,
        location_id=_location_id(body.location_type, body.location_id),
        location_name=body.location_name,
        performed_by=body.performed_by,
        reference_id=body.reference_id,
        notes=body.notes,
    )
    stock_id = dispatch(command)
    return _stock_response(ledger.get(stock_id))


@stock_router.post("/receive", response_model=StockResponse)
def receive_stock(body: ReceiveStockRequest) -> StockResponse:
    command = ReceiveStock(
        item_name=body.item_name,
        quantity=body.quantity,
        location_type=body.location_type,
        location_id=_location_id(body.location_type, body.location_id),
        location_name=body.location_name,
        supplier=body.supplier,
        category=body.category,
        unit=body.unit,
        performed_by=body.performed_by,
        reference_id=body.reference_id,
        notes=body.notes,
    )
    stock_id = dispatch(command)
    return _stock_response(ledger.get(stock_id))


@stock_router.post("/dispense", response_model=StockResponse)
def dispense_stock(body: DispenseStockRequest) -> StockResponse:
    command = DispenseStock(
        item_name=body.item_name,
        quantity=body.quantity,
        location_type=body.location_type,
        location_id=body.location_id,
        recipient=body.recipient,
        performed_by=body.performed_by,
        reference_id=body.reference_id,
        notes=body.notes,
    )
    stock_id = dispatch(command)
    return _stock_response(ledger.get(stock_id))


@stock_router.post("/transfer", response_model=TransferResponse)
def transfer_stock(body: TransferStockRequest) -> TransferResponse:
    command = TransferStock(
        item_name=body.item_name,
        quantity=body.quantity,
        from_location_type=body.from_location_type,
        from_location_id=_location_id(body.from_location_type, body.from_location_id),
        from_location_name=body.from_location_name,
        to_location_type=body.to_location_type,
        to_location_id=_location_id(body.to_location_type, body.to_location_id),
        to_location_name=body.to_location_name,
        performed_by=body.performed_by,
        reference_id=body.reference_id,
        notes=body.notes,
    )
    result = dispatch(command)
    return TransferResponse(
        transfer_id=result["transfer_id"],
        out_movement_id=result["out_movement_id"],
        in_movement_id=result["in_movement_id"],
        source=_stock_response(ledger.get(result["from_stock_id"])),
        destination=_stock_response(ledger.get(result["to_stock_id"])),
    )


@stock_router.post("/import", response_model=ImportReportResponse)
def import_stock(body: ImportStockRequest) -> ImportReportResponse:
    report = import_rows(
        [row.model_dump() for row in body.rows],
        performed_by=body.performed_by,
        reference_id=body.reference_id,
    )
    return ImportReportResponse(
        initialized=report.initialized,
        received=report.received,
        succeeded=report.succeeded,
        failed=report.failed,
        errors=[ImportRowErrorResponse(row=e.row, kind=e.kind, message=e.message) for e in report.errors],
    )


@stock_router.get("", response_model=StockListResponse)
async def list_stock(
    location_type: str = "provincial",
    location_id: str | None = None,
    include_hidden: bool = False,
) -> StockListResponse:
    location = _location(location_type, location_id)
    views = ledger.list_by_location(location, include_hidden=include_hidden)
    return StockListResponse(stocks=[_stock_response(view) for view in views])


@stock_router.get("/{stock_id}", response_model=StockResponse)
async def get_stock(stock_id: str) -> StockResponse:
    return _stock_response(ledger.get(stock_id))


@stock_router.post("/{stock_id}/adjust", response_model=StockResponse)
def adjust_stock(stock_id: str, body: AdjustStockRequest) -> StockResponse:
    command = AdjustStock(
        stock_id=stock_id,
        new_quantity=body.new_quantity,
        reason=body.reason,
        performed_by=body.performed_by,
        reference_id=body.reference_id,
    )
    dispatch(command)
    return _stock_response(ledger.get(stock_id))


@stock_router.put("/{stock_id}/thresholds", response_model=StockResponse)
def update_thresholds(stock_id: str, body: UpdateThresholdsRequest) -> StockResponse:
    dispatch(
        UpdateThresholds(
            stock_id=stock_id,
            min_stock_level=body.min_stock_level,
            critical_level=body.critical_level,
        )
    )
    return _stock_response(ledger.get(stock_id))


@stock_router.put("/{stock_id}/hide", response_model=StatusResponse)
def hide_stock(stock_id: str) -> StatusResponse:
    dispatch(HideStock(stock_id=stock_id))
    return StatusResponse()


@stock_router.put("/{stock_id}/show", response_model=StatusResponse)
def show_stock(stock_id: str) -> StatusResponse:
    dispatch(ShowStock(stock_id=stock_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Movement Router
# ---------------------------------------------------------------------------
movement_router = APIRouter(prefix="/movements", tags=["movements"], responses=ERROR_RESPONSES)


@movement_router.get("", response_model=MovementListResponse)
async def list_movements(
    stock_id: str | None = None,
    location_type: str | None = None,
    location_id: str | None = None,
    movement_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=MAX_PAGE_SIZE),
) -> MovementListResponse:
    date_range = (start, end) if start or end else None
    if stock_id:
        history = movement_log.query_by_stock(stock_id)
    elif location_type:
        location = _location(location_type, location_id)
        history = movement_log.query_by_location(location, date_range)
    else:
        history = movement_log.query_all(movement_type=movement_type, date_range=date_range)

    return MovementListResponse(
        movements=[_movement_response(m) for m in history.page(offset, limit)],
        offset=offset,
        limit=limit,
    )


# ---------------------------------------------------------------------------
# Request Router
# ---------------------------------------------------------------------------
request_router = APIRouter(prefix="/requests", tags=["requests"], responses=ERROR_RESPONSES)


@request_router.post("", status_code=201, response_model=SupplyRequestResponse)
def submit_request(body: SubmitRequestRequest) -> SupplyRequestResponse:
    items = [item.model_dump() for item in body.items]
    command = SubmitSupplyRequest(
        shelter_id=body.shelter_id,
        shelter_name=body.shelter_name,
        requested_by=body.requested_by,
        urgency=body.urgency,
        items=json.dumps(items),
        notes=body.notes,
    )
    request_id = dispatch(command)
    return _request_response(load_request(request_id), warnings=availability_warnings(items))


@request_router.patch("/{request_id}", response_model=SupplyRequestResponse)
def review_request(request_id: str, body: ReviewRequestRequest) -> SupplyRequestResponse:
    command = ReviewSupplyRequest(
        request_id=request_id,
        decision=body.status,
        reviewed_by=body.reviewed_by,
        admin_notes=body.admin_notes,
    )
    dispatch(command)
    return _request_response(load_request(request_id))


@request_router.get("", response_model=SupplyRequestListResponse)
async def get_requests(
    status: str | None = None,
    shelter_id: str | None = None,
    urgency: str | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=MAX_PAGE_SIZE),
) -> SupplyRequestListResponse:
    requests = list_requests(status=status, shelter_id=shelter_id, urgency=urgency).page(offset, limit)
    return SupplyRequestListResponse(
        requests=[_request_response(request) for request in requests],
        offset=offset,
        limit=limit,
    )


@request_router.get("/{request_id}", response_model=SupplyRequestResponse)
async def get_request(request_id: str) -> SupplyRequestResponse:
    return _request_response(load_request(request_id))


# ---------------------------------------------------------------------------
# Report Router
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/reports", tags=["reports"], responses=ERROR_RESPONSES)


@report_router.get("/alerts", response_model=list[StockAlertResponse])
async def get_alerts(
    location_type: str | None = None,
    location_id: str | None = None,
) -> list[StockAlertResponse]:
    location = None
    if location_type:
        location = _location(location_type, location_id)
    return [
        StockAlertResponse(
            stock_id=alert.stock_id,
            item_name=alert.item_name,
            category=alert.category,
            location_type=alert.location_type,
            location_id=alert.location_id,
            location_name=alert.location_name,
            quantity=alert.quantity,
            min_stock_level=alert.min_stock_level,
            critical_level=alert.critical_level,
            status=alert.status.value,
        )
        for alert in stock_alerts(location)
    ]


@report_router.get("/overview", response_model=OverviewResponse)
async def get_overview() -> OverviewResponse:
    overview = category_overview()
    return OverviewResponse(
        categories={name: CategoryBucket(**bucket) for name, bucket in overview["categories"].items()},
        totals=overview["totals"],
    )


@report_router.get("/daily", response_model=list[DailyActivityResponse])
async def get_daily_activity(
    location_type: str = "provincial",
    location_id: str | None = None,
) -> list[DailyActivityResponse]:
    rows = activity_by_location(location_type, _location_id(location_type, location_id))
    return [
        DailyActivityResponse(
            date=row.date,
            location_type=row.location_type,
            location_id=row.location_id,
            received=row.received or 0,
            dispensed=row.dispensed or 0,
            transferred_in=row.transferred_in or 0,
            transferred_out=row.transferred_out or 0,
            adjusted=row.adjusted or 0,
        )
        for row in rows
    ]
