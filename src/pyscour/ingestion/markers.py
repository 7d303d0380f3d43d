"""Registry record → map marker normalization."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from pyscour.geo import Coordinate
from pyscour.models.markers import Registrant
from pyscour.models.registry import RegistrantLocation, RegistrantRecord, RegistrySearchResponse

_logger = logging.getLogger(__name__)

# Fixed namespace so marker ids are reproducible across processes.
_MARKER_NAMESPACE = uuid.UUID("6f1c2a4e-0c1b-5d7e-9a43-2b8f5e6d7c10")


def _record_identity(record: RegistrantRecord) -> str:
    if record.detail_uri:
        return record.detail_uri
    return "|".join((record.name.given, record.name.middle, record.name.sur, record.dob))


def marker_id(record: RegistrantRecord, index: int, location: RegistrantLocation) -> str:
    """Deterministic id for the *index*-th location of *record*."""
    seed = f"{_record_identity(record)}#{index}@{location.latitude:.6f},{location.longitude:.6f}"
    return str(uuid.uuid5(_MARKER_NAMESPACE, seed))


def _location_coordinate(location: RegistrantLocation) -> Coordinate | None:
    if location.latitude is None or location.longitude is None:
        return None
    if not (-90 <= location.latitude <= 90 and -180 <= location.longitude <= 180):
        return None
    return Coordinate(latitude=location.latitude, longitude=location.longitude)


def explode_record(record: RegistrantRecord) -> list[Registrant]:
    """One :class:`Registrant` per residential, geocoded location of *record*."""
    markers: list[Registrant] = []
    for index, location in enumerate(record.locations):
        if not location.is_residential:
            continue
        coordinate = _location_coordinate(location)
        if coordinate is None:
            _logger.debug("Skipping residential location without usable coordinates index=%d", index)
            continue
        markers.append(
            Registrant(
                id=marker_id(record, index, location),
                coordinate=coordinate,
                display_name=record.name.display_name,
                gender=record.gender,
                age=record.age,
                short_address=location.street_address,
                full_address=location.full_address,
                detail_uri=record.detail_uri,
                image_uri=record.image_uri,
                absconder=record.absconder,
                location_name=location.name,
            )
        )
    return markers


def explode_records(records: Iterable[RegistrantRecord]) -> list[Registrant]:
    markers: list[Registrant] = []
    for record in records:
        markers.extend(explode_record(record))
    return markers


def markers_from_response(response: RegistrySearchResponse) -> list[Registrant]:
    """Flat-map every registrant of *response* into residential markers."""
    markers = explode_records(response.registrants)
    _logger.debug(
        "Normalized registrants=%d into markers=%d",
        len(response.registrants),
        len(markers),
    )
    return markers
