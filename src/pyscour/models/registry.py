"""Registry search response models.

The registry has shipped two key spellings over time; both are accepted.
Current payloads use ``registrants``/``given``/``sur``/``detailUri``,
older ones ``offenders``/``givenName``/``surName``/``offenderUri``.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyscour._constants import RESIDENTIAL_LOCATION_TYPES
from pyscour.ingestion.normalize import join_nonempty, safe_bool, safe_float, safe_int
from pyscour.models._base import ScourBaseModel


class RegistrantName(ScourBaseModel):
    """Structured name of a registrant."""

    prefix: str = ""
    given: str = Field(default="", validation_alias=AliasChoices("given", "givenName"))
    middle: str = Field(default="", validation_alias=AliasChoices("middle", "middleName"))
    sur: str = Field(default="", validation_alias=AliasChoices("sur", "surName", "surname"))
    suffix: str = ""

    @property
    def display_name(self) -> str:
        """``"<given> <surname>"``."""
        return join_nonempty(self.given, self.sur)


class AliasName(ScourBaseModel):
    """An alias; every part is optional and unknown shapes decode to empty."""

    prefix: str | None = None
    given: str | None = Field(default=None, validation_alias=AliasChoices("given", "givenName"))
    middle: str | None = Field(default=None, validation_alias=AliasChoices("middle", "middleName"))
    sur: str | None = Field(default=None, validation_alias=AliasChoices("sur", "surName", "surname"))
    suffix: str | None = None

    @field_validator("prefix", "given", "middle", "sur", "suffix", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class RegistrantLocation(ScourBaseModel):
    """A single address record of a registrant.

    Parameters
    ----------
    name : str
        Label of the location (e.g. employer name).
    type : str
        Location type such as ``RESIDENTIAL`` or ``EMPLOYER``.
    latitude, longitude : float or None
        Geocoded position; ``None`` when the registry has not geocoded
        the address.
    """

    name: str = ""
    type: str = ""
    street_address: str = ""
    city: str = ""
    county: str = ""
    state: str = ""
    zip_code: str = ""
    zip_code_extension: str = ""
    latitude: float | None = None
    longitude: float | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @property
    def is_residential(self) -> bool:
        return self.type.strip().upper() in RESIDENTIAL_LOCATION_TYPES

    @property
    def has_coordinate(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def postal_text(self) -> str:
        if self.zip_code_extension:
            return f"{self.zip_code}-{self.zip_code_extension}"
        return self.zip_code

    @property
    def full_address(self) -> str:
        """``"<street>, <city>, <state> <zip>[-<ext>]"``."""
        region = join_nonempty(self.state, self.postal_text)
        return join_nonempty(self.street_address, self.city, region, sep=", ")


class RegistrantRecord(ScourBaseModel):
    """One person as returned by the registry search."""

    name: RegistrantName
    aliases: list[AliasName] = Field(default_factory=list)
    gender: str = ""
    age: int | None = None
    locations: list[RegistrantLocation]
    detail_uri: str = Field(default="", validation_alias=AliasChoices("detailUri", "offenderUri"))
    image_uri: str = ""
    dob: str = ""
    absconder: bool = Field(default=False, validation_alias=AliasChoices("absconderFlag", "absconder"))

    @field_validator("aliases", mode="before")
    @classmethod
    def _lenient_aliases(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item if isinstance(item, dict) else {} for item in value]

    @field_validator("age", mode="before")
    @classmethod
    def _coerce_age(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("absconder", mode="before")
    @classmethod
    def _coerce_absconder(cls, value: Any) -> bool:
        return safe_bool(value)


class RegistrySearchResponse(ScourBaseModel):
    """Top-level registry search payload."""

    status_message: str = ""
    registrants: list[RegistrantRecord] = Field(validation_alias=AliasChoices("registrants", "offenders"))
