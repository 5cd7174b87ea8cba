"""Relief FastAPI application.

Web server that processes ledger commands synchronously via HTTP. Every
request runs inside the relief domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from relief.domain import relief  # noqa: E402
from relief.utils.logging import bind_actor, clear_context

relief.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Relief Supply API",
    description="Provincial warehouse and shelter stock ledger",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the relief domain context and bind the caller for logging."""
    bind_actor(request.headers.get("X-Actor"), path=request.url.path)
    try:
        with relief.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from relief.api import (  # noqa: E402
    movement_router,
    register_error_handlers,
    report_router,
    request_router,
    stock_router,
)

app.include_router(stock_router)
app.include_router(movement_router)
app.include_router(request_router)
app.include_router(report_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "relief": {"name": relief.name},
            },
        }
    )
