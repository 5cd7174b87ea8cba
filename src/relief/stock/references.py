"""Human-readable document references for stock operations.

Format: ``{PREFIX}-YYYYMMDD-XXXXX``, e.g. ``RCV-20241221-04817``.
"""

import secrets
from datetime import UTC, datetime
from enum import Enum


class ReferencePrefix(Enum):
    INITIALIZE = "INIT"
    RECEIVE = "RCV"
    TRANSFER = "TRF"
    DISPENSE = "DSP"
    ADJUST = "ADJ"


def generate_reference_id(prefix: ReferencePrefix, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"{prefix.value}-{now:%Y%m%d}-{secrets.randbelow(100_000):05d}"
