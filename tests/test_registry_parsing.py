from __future__ import annotations

from typing import Any

import pytest

from pyscour._api.registry import parse_search_response
from pyscour.exceptions import ScourDecodeError
from pyscour.ingestion.markers import markers_from_response
from pyscour.models.registry import RegistrantRecord


def _location(name: str, type_: str, lat: Any, lon: Any, **extra: Any) -> dict[str, Any]:
    location = {
        "name": name,
        "type": type_,
        "streetAddress": "100 Main St",
        "city": "Boise",
        "county": "Ada",
        "state": "ID",
        "zipCode": "83702",
        "latitude": lat,
        "longitude": lon,
    }
    location.update(extra)
    return location


def _record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "name": {"prefix": "", "given": "John", "middle": "Q", "sur": "Doe", "suffix": ""},
        "aliases": [],
        "gender": "Male",
        "age": 45,
        "dob": "1980-01-01",
        "detailUri": "https://registry.example/detail/1",
        "imageUri": "https://registry.example/img/1.jpg",
        "absconderFlag": False,
        "locations": [
            _location("Home", "RESIDENTIAL", 43.615, -116.2023, zipCodeExtension="1234"),
            _location("Second home", "Residence", 43.62, -116.21),
            _location("Acme Corp", "EMPLOYER", 43.60, -116.20),
        ],
    }
    record.update(overrides)
    return record


def test_residential_locations_become_markers() -> None:
    response = parse_search_response({"status": "ok", "registrants": [_record()]})

    markers = markers_from_response(response)

    assert len(markers) == 2
    first = markers[0]
    assert first.display_name == "John Doe"
    assert first.short_address == "100 Main St"
    assert first.full_address == "100 Main St, Boise, ID 83702-1234"
    assert first.detail_uri == "https://registry.example/detail/1"
    assert first.location_name == "Home"
    assert first.age == 45
    assert first.coordinate.latitude == pytest.approx(43.615)
    assert markers[1].full_address == "100 Main St, Boise, ID 83702"


def test_marker_ids_are_unique_and_stable() -> None:
    body = {"registrants": [_record()]}

    first = [m.id for m in markers_from_response(parse_search_response(body))]
    second = [m.id for m in markers_from_response(parse_search_response(body))]

    assert first == second
    assert len(set(first)) == len(first)


def test_residential_location_without_coordinates_is_skipped() -> None:
    record = _record(
        locations=[
            _location("Home", "RESIDENTIAL", "--", None),
            _location("Shelter", "RESIDENTIAL", "43.61", "-116.20"),
        ]
    )

    markers = markers_from_response(parse_search_response({"registrants": [record]}))

    assert [m.location_name for m in markers] == ["Shelter"]
    assert markers[0].coordinate.longitude == pytest.approx(-116.20)


def test_legacy_key_spellings_are_accepted() -> None:
    legacy = {
        "name": {"givenName": "Jane", "surName": "Roe"},
        "offenderUri": "https://registry.example/detail/9",
        "absconder": "true",
        "locations": [_location("Home", "RESIDENTIAL", 47.6, -122.3)],
    }

    markers = markers_from_response(parse_search_response({"offenders": [legacy]}))

    assert len(markers) == 1
    assert markers[0].display_name == "Jane Roe"
    assert markers[0].detail_uri == "https://registry.example/detail/9"
    assert markers[0].absconder is True


def test_malformed_aliases_do_not_fail_the_record() -> None:
    record = RegistrantRecord.model_validate(_record(aliases=[1, {"given": 5, "sur": "Smith"}]))

    assert len(record.aliases) == 2
    assert record.aliases[0].given is None
    assert record.aliases[1].given is None
    assert record.aliases[1].sur == "Smith"

    record = RegistrantRecord.model_validate(_record(aliases="garbage"))
    assert record.aliases == []


def test_placeholder_values_fall_back_to_defaults() -> None:
    record = RegistrantRecord.model_validate(_record(gender="--", age="N/A", imageUri=""))

    assert record.gender == ""
    assert record.age is None
    assert record.image_uri == ""
    assert record.raw["gender"] == "--"


def test_record_without_locations_is_a_decode_error() -> None:
    record = _record()
    del record["locations"]

    with pytest.raises(ScourDecodeError):
        parse_search_response({"registrants": [record]})


def test_body_without_registrants_is_a_decode_error() -> None:
    with pytest.raises(ScourDecodeError):
        parse_search_response({"unexpected": True}, endpoint="/registrants/search")


def test_non_object_body_is_a_decode_error() -> None:
    with pytest.raises(ScourDecodeError) as exc_info:
        parse_search_response(["not", "an", "object"], endpoint="/registrants/search")

    assert exc_info.value.endpoint == "/registrants/search"


def test_empty_registrant_list_yields_no_markers() -> None:
    assert markers_from_response(parse_search_response({"registrants": []})) == []
