"""Geocoding value types."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pyscour.geo import Coordinate


class PlaceSuggestion(BaseModel):
    """A ranked completion returned by the place-search provider."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    subtitle: str = ""

    @property
    def text(self) -> str:
        """Single-line form used for free-text re-resolution."""
        if self.subtitle:
            return f"{self.title}, {self.subtitle}"
        return self.title


class Placemark(BaseModel):
    """Provider placemark. Any field may be missing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    coordinate: Coordinate | None = None
    administrative_area: str | None = None
    postal_code: str | None = None
    iso_country_code: str | None = None


class Region(BaseModel):
    """Jurisdiction/postal code pair sent with a registry search."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    jurisdiction: str = Field(min_length=2, max_length=2)
    postal_code: str = Field(min_length=1)


class ResolvedLocation(BaseModel):
    """A suggestion resolved to a searchable reference location."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    title: str
    subtitle: str = ""
    coordinate: Coordinate
    jurisdiction: str = Field(min_length=2, max_length=2)
    postal_code: str = Field(min_length=1)

    @property
    def region(self) -> Region:
        return Region(jurisdiction=self.jurisdiction, postal_code=self.postal_code)
