"""Pydantic request/response schemas for the Relief API.

These are the external contract. Quantities and thresholds are not range
checked here: the domain rejects them with typed ledger errors, which the
error handlers translate into stable JSON bodies.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
class InitializeStockRequest(BaseModel):
    item_name: str
    category: str | None = None
    unit: str | None = None
    initial_quantity: int = 0
    min_stock_level: int = 10
    critical_level: int = 5
    location_type: str = "provincial"
    location_id: str | None = None  # Defaults to the provincial warehouse
    location_name: str | None = None
    performed_by: str | None = None
    reference_id: str | None = None
    notes: str | None = None


class ReceiveStockRequest(BaseModel):
    item_name: str
    quantity: int
    location_type: str = "provincial"
    location_id: str | None = None
    location_name: str | None = None
    supplier: str | None = None
    category: str | None = None
    unit: str | None = None
    performed_by: str | None = None
    reference_id: str | None = None
    notes: str | None = None


class DispenseStockRequest(BaseModel):
    item_name: str
    quantity: int
    location_type: str = "shelter"
    location_id: str
    recipient: str | None = None
    performed_by: str | None = None
    reference_id: str | None = None
    notes: str | None = None


class AdjustStockRequest(BaseModel):
    new_quantity: int
    reason: str | None = None
    performed_by: str | None = None
    reference_id: str | None = None


class UpdateThresholdsRequest(BaseModel):
    min_stock_level: int
    critical_level: int


class TransferStockRequest(BaseModel):
    item_name: str
    quantity: int
    from_location_type: str = "provincial"
    from_location_id: str | None = None
    from_location_name: str | None = None
    to_location_type: str = "shelter"
    to_location_id: str
    to_location_name: str | None = None
    performed_by: str | None = None
    reference_id: str | None = None
    notes: str | None = None


class StockResponse(BaseModel):
    stock_id: str
    item_name: str
    category: str
    unit: str
    location_type: str
    location_id: str
    location_name: str | None = None
    quantity: int
    min_stock_level: int
    critical_level: int
    total_received: int
    total_dispensed: int
    is_hidden: bool
    status: str
    updated_at: datetime | None = None


class StockListResponse(BaseModel):
    stocks: list[StockResponse]


class TransferResponse(BaseModel):
    transfer_id: str
    out_movement_id: str
    in_movement_id: str
    source: StockResponse
    destination: StockResponse


class ImportRowSchema(BaseModel):
    item_name: str | None = None
    category: str | None = None
    unit: str | None = None
    quantity: int | None = None
    min_stock_level: int | None = None
    critical_level: int | None = None
    location_type: str | None = None
    location_id: str | None = None
    location_name: str | None = None
    supplier: str | None = None
    notes: str | None = None


class ImportStockRequest(BaseModel):
    rows: list[ImportRowSchema]
    performed_by: str | None = None
    reference_id: str | None = None


class ImportRowErrorResponse(BaseModel):
    row: int
    kind: str
    message: str


class ImportReportResponse(BaseModel):
    initialized: int
    received: int
    succeeded: int
    failed: int
    errors: list[ImportRowErrorResponse]


# ---------------------------------------------------------------------------
# Movements
# ---------------------------------------------------------------------------
class MovementResponse(BaseModel):
    movement_id: str
    movement_type: str
    direction: str
    quantity: int
    signed_quantity: int
    stock_id: str
    item_name: str
    unit: str | None = None
    location_type: str
    location_id: str
    source_type: str | None = None
    source_id: str | None = None
    source_name: str | None = None
    destination_type: str | None = None
    destination_id: str | None = None
    destination_name: str | None = None
    quantity_before: int
    quantity_after: int
    transfer_id: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    performed_by: str | None = None
    performed_at: datetime


class MovementListResponse(BaseModel):
    movements: list[MovementResponse]
    offset: int
    limit: int


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class RequestItemSchema(BaseModel):
    item_name: str
    requested_quantity: int
    reason: str | None = None
    stock_id: str | None = None
    unit: str | None = None


class SubmitRequestRequest(BaseModel):
    shelter_id: str
    shelter_name: str | None = None
    requested_by: str
    urgency: str = "normal"
    items: list[RequestItemSchema] = Field(default_factory=list)
    notes: str | None = None


class ReviewRequestRequest(BaseModel):
    status: str  # "approved" or "rejected"
    reviewed_by: str
    admin_notes: str | None = None


class RequestLineResponse(BaseModel):
    item_name: str
    requested_quantity: int
    unit: str | None = None
    reason: str
    stock_id: str | None = None


class AvailabilityWarning(BaseModel):
    item_name: str
    requested: int
    available: int


class SupplyRequestResponse(BaseModel):
    request_id: str
    request_number: str
    shelter_id: str
    shelter_name: str | None = None
    requested_by: str
    urgency: str
    status: str
    items: list[RequestLineResponse]
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    admin_notes: str | None = None
    submitted_at: datetime | None = None
    warnings: list[AvailabilityWarning] = Field(default_factory=list)


class SupplyRequestListResponse(BaseModel):
    requests: list[SupplyRequestResponse]
    offset: int
    limit: int


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
class StockAlertResponse(BaseModel):
    stock_id: str
    item_name: str
    category: str
    location_type: str
    location_id: str
    location_name: str | None = None
    quantity: int
    min_stock_level: int
    critical_level: int
    status: str


class CategoryBucket(BaseModel):
    items: int
    quantity: int


class OverviewResponse(BaseModel):
    categories: dict[str, CategoryBucket]
    totals: dict[str, int]


class DailyActivityResponse(BaseModel):
    date: str
    location_type: str
    location_id: str
    received: int
    dispensed: int
    transferred_in: int
    transferred_out: int
    adjusted: int
