"""The provincial warehouse and the shelters it supplies."""

import os
from dataclasses import dataclass, field
from enum import Enum


class LocationType(Enum):
    PROVINCIAL = "provincial"
    SHELTER = "shelter"


DEFAULT_PROVINCIAL_ID = "provincial"


def provincial_id() -> str:
    """Identifier of the provincial warehouse (override with RELIEF_PROVINCIAL_ID)."""
    return os.getenv("RELIEF_PROVINCIAL_ID", DEFAULT_PROVINCIAL_ID)


@dataclass(frozen=True)
class Location:
    """A place that holds stock. Two locations are equal when type and id match."""

    type: str
    id: str
    name: str | None = field(default=None, compare=False)

    def __post_init__(self):
        # Accept LocationType members as well as their raw values
        if isinstance(self.type, LocationType):
            object.__setattr__(self, "type", self.type.value)
        LocationType(self.type)
        if not self.id:
            raise ValueError("Location id is required")
        object.__setattr__(self, "id", str(self.id))

    @classmethod
    def provincial(cls, name: str | None = "Provincial warehouse") -> "Location":
        return cls(LocationType.PROVINCIAL.value, provincial_id(), name)

    @classmethod
    def shelter(cls, shelter_id: str, name: str | None = None) -> "Location":
        return cls(LocationType.SHELTER.value, shelter_id, name)

    @property
    def key(self) -> str:
        return f"{self.type}:{self.id}"

    @property
    def label(self) -> str:
        return self.name or self.key

    def stock_key(self, item_name: str) -> str:
        """Lock key of the stock row for ``item_name`` at this location."""
        return f"{self.key}:{item_name}"

    def __str__(self) -> str:
        return self.label


def command_row_key(command) -> list[str]:
    """Lock key of the single row addressed by an item/location command."""
    location = Location(command.location_type, command.location_id)
    return [location.stock_key((command.item_name or "").strip())]
