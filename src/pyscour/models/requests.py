"""Pydantic request models for search entrypoints.

These models provide a consistent "validate → normalize → execute" flow
and are used internally by :class:`pyscour.search.ProximitySearchService`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyscour.geo import Coordinate


def format_miles(miles: float) -> str:
    """Decimal mile text sent to the registry (``0.5`` -> ``"0.5"``, ``2`` -> ``"2"``)."""
    return f"{miles:g}"


class SearchRequest(BaseModel):
    """Caller input for a proximity search."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    reference: Coordinate
    radius_miles: float = Field(gt=0, le=100)
    jurisdiction: str | None = None
    postal_code: str | None = None

    @field_validator("jurisdiction")
    @classmethod
    def _normalize_jurisdiction(cls, value: str | None) -> str | None:
        if value is None or not value:
            return None
        if len(value) != 2 or not value.isalpha():
            raise ValueError("jurisdiction must be a two-letter code")
        return value.upper()

    @field_validator("postal_code")
    @classmethod
    def _empty_postal_is_none(cls, value: str | None) -> str | None:
        return value or None


class RegistrySearchPayload(BaseModel):
    """JSON body of the registry search POST."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    credential: str
    zip: str
    longitude: float
    latitude: float
    distance: str
    state: str

    @classmethod
    def build(
        cls,
        *,
        credential: str,
        reference: Coordinate,
        radius_miles: float,
        jurisdiction: str,
        postal_code: str,
    ) -> RegistrySearchPayload:
        return cls(
            credential=credential,
            zip=postal_code,
            longitude=reference.longitude,
            latitude=reference.latitude,
            distance=format_miles(radius_miles),
            state=jurisdiction,
        )
