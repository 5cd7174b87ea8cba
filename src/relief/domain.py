"""Relief bounded context — provincial and shelter supply ledger.

Tracks stock per (item, location), keeps an append-only movement log,
transfers stock between the provincial warehouse and shelters, and runs
shelter supply requests through an admin approval workflow (CQRS).
"""

from protean.domain import Domain

from relief.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

relief = Domain(name="relief")
