"""Map marker models produced by a proximity search."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from pyscour.geo import Coordinate, distance_meters, format_distance


class Registrant(BaseModel):
    """One marker per residential location of a registry record.

    ``id`` is deterministic for a given record and location so markers
    keep their identity across repeated searches.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["registrant"] = "registrant"
    id: str
    coordinate: Coordinate
    display_name: str
    gender: str = ""
    age: int | None = None
    short_address: str = ""
    full_address: str = ""
    detail_uri: str = ""
    image_uri: str = ""
    absconder: bool = False
    location_name: str = ""

    def distance_from(self, reference: Coordinate) -> float:
        """Distance in meters from *reference* to this marker."""
        return distance_meters(reference, self.coordinate)

    def distance_text(self, reference: Coordinate) -> str:
        return format_distance(self.distance_from(reference))


class SearchPin(BaseModel):
    """The resolved search location, shown when it differs from the device."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["search_pin"] = "search_pin"
    coordinate: Coordinate
    title: str = ""


SearchMarker = Registrant | SearchPin
