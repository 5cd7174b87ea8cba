from relief.api.errors import register_error_handlers
from relief.api.routes import movement_router, report_router, request_router, stock_router

__all__ = [
    "stock_router",
    "movement_router",
    "request_router",
    "report_router",
    "register_error_handlers",
]
