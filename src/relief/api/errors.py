"""Translate typed ledger errors into stable JSON responses.

Body shape: ``{"error": kind, "message": text, "details": payload}``.
Framework errors that are not ledger errors fall through to Protean's own
FastAPI handlers.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from relief.errors import LedgerError

_STATUS_BY_KIND = {
    "NotFound": 404,
    "DuplicateStock": 409,
    "InsufficientStock": 409,
    "NotPending": 409,
    "Busy": 503,
}


def status_for(exc: LedgerError) -> int:
    return _STATUS_BY_KIND.get(exc.kind, 400)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": exc.kind, "message": exc.describe(), "details": exc.payload},
    )


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(LedgerError, ledger_error_handler)
