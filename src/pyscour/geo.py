"""Great-circle distance helpers.

Distances use the haversine formula on a spherical earth, which is accurate
to well under one percent at the few-mile radii the registry search uses.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from pyscour._constants import EARTH_RADIUS_M, METERS_PER_MILE


class Coordinate(BaseModel):
    """A WGS84 latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    @classmethod
    def of(cls, latitude: float, longitude: float) -> Coordinate:
        return cls(latitude=latitude, longitude=longitude)


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle distance in meters between two coordinates."""
    lat1 = math.radians(a.latitude)
    lon1 = math.radians(a.longitude)
    lat2 = math.radians(b.latitude)
    lon2 = math.radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push h marginally above 1 for antipodal points.
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def format_distance(meters: float) -> str:
    """Format a distance in miles for display.

    Two decimals below one mile (``"0.50 mi"``), one decimal at or
    above it (``"2.4 mi"``). The cutoff applies after rounding, so
    0.996 miles reads ``"1.0 mi"``.
    """
    miles = meters_to_miles(meters)
    if round(miles, 2) < 1:
        return f"{miles:.2f} mi"
    return f"{miles:.1f} mi"
