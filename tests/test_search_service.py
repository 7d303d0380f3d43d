from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest
from pydantic import ValidationError

from pyscour._constants import MESSAGE_NO_RESULTS, MESSAGE_SEARCH_FAILED
from pyscour.config import ScourConfig
from pyscour.exceptions import (
    EmptyResultError,
    ScourDecodeError,
    ScourTransportError,
    UnsupportedJurisdictionError,
)
from pyscour.geo import Coordinate
from pyscour.models.places import Region
from pyscour.search import ProximitySearchService, SearchFailure, SearchPhase, SearchSnapshot

CONFIG = ScourConfig(credential="agent-123", base_url="https://registry.example/api/")
REFERENCE = Coordinate.of(43.615, -116.2023)


def _registrant(uri: str, *residences: tuple[float, float]) -> dict[str, Any]:
    return {
        "name": {"given": "John", "sur": "Doe"},
        "detailUri": uri,
        "locations": [
            {"name": "Home", "type": "RESIDENTIAL", "streetAddress": "1 Main St", "latitude": lat, "longitude": lon}
            for lat, lon in residences
        ]
        + [{"name": "Work", "type": "EMPLOYER", "latitude": 43.6, "longitude": -116.2}],
    }


TWO_MARKERS = {"registrants": [_registrant("https://registry.example/1", (43.61, -116.20), (43.62, -116.21))]}
ONE_MARKER = {"registrants": [_registrant("https://registry.example/2", (43.63, -116.22))]}


class _StaticTransport:
    def __init__(self, body: Any) -> None:
        self._body = body
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        self.calls.append((url, dict(payload)))
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _GatedTransport:
    """Each call waits on its own gate before answering."""

    def __init__(self, *responses: tuple[asyncio.Event, Any]) -> None:
        self._responses = list(responses)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        gate, body = self._responses.pop(0)
        await gate.wait()
        return body


@pytest.mark.asyncio
async def test_populated_search_sends_expected_payload() -> None:
    transport = _StaticTransport(TWO_MARKERS)
    service = ProximitySearchService(CONFIG, transport)

    snapshot = await service.search(REFERENCE, 0.5)

    assert snapshot.phase == SearchPhase.POPULATED
    assert snapshot.is_loading is False
    assert len(snapshot.markers) == 2
    assert service.error_message is None

    url, payload = transport.calls[0]
    assert url == "https://registry.example/api/registrants/search"
    assert payload == {
        "credential": "agent-123",
        "zip": "83702",
        "longitude": -116.2023,
        "latitude": 43.615,
        "distance": "0.5",
        "state": "ID",
    }


@pytest.mark.asyncio
async def test_loading_state_is_published_before_the_response() -> None:
    seen: list[SearchSnapshot] = []
    service = ProximitySearchService(CONFIG, _StaticTransport(ONE_MARKER), on_change=seen.append)

    await service.search(REFERENCE, 1, pin_title="100 Main St")

    assert [s.phase for s in seen] == [SearchPhase.LOADING, SearchPhase.POPULATED]
    assert seen[0].is_loading is True
    assert seen[0].search_pin is not None
    assert seen[0].search_pin.title == "100 Main St"
    assert seen[1].is_loading is False
    assert len(seen[1].annotations) == 2


@pytest.mark.asyncio
async def test_empty_result_sets_empty_phase() -> None:
    service = ProximitySearchService(CONFIG, _StaticTransport({"registrants": []}))

    snapshot = await service.search(REFERENCE, 2)

    assert snapshot.phase == SearchPhase.EMPTY
    assert snapshot.markers == ()
    assert snapshot.message == MESSAGE_NO_RESULTS
    assert service.error_message == MESSAGE_NO_RESULTS
    with pytest.raises(EmptyResultError):
        snapshot.raise_for_failure()


@pytest.mark.asyncio
async def test_malformed_body_fails_and_clears_loading() -> None:
    service = ProximitySearchService(CONFIG, _StaticTransport({"unexpected": True}))

    snapshot = await service.search(REFERENCE, 1)

    assert snapshot.phase == SearchPhase.FAILED
    assert snapshot.failure == SearchFailure.DECODE
    assert snapshot.is_loading is False
    assert snapshot.message == MESSAGE_SEARCH_FAILED
    with pytest.raises(ScourDecodeError):
        snapshot.raise_for_failure()


@pytest.mark.asyncio
async def test_transport_error_fails_with_same_message() -> None:
    error = ScourTransportError("HTTP 503", status_code=503, endpoint=CONFIG.search_url)
    service = ProximitySearchService(CONFIG, _StaticTransport(error))

    snapshot = await service.search(REFERENCE, 1)

    assert snapshot.phase == SearchPhase.FAILED
    assert snapshot.failure == SearchFailure.NETWORK
    assert snapshot.message == MESSAGE_SEARCH_FAILED
    assert snapshot.is_loading is False


@pytest.mark.asyncio
async def test_unsupported_jurisdiction_never_reaches_the_transport() -> None:
    transport = _StaticTransport(TWO_MARKERS)
    service = ProximitySearchService(CONFIG, transport)

    snapshot = await service.search(Coordinate.of(32.78, -96.80), 1, "TX", "75201")

    assert transport.calls == []
    assert snapshot.phase == SearchPhase.FAILED
    assert snapshot.failure == SearchFailure.UNSUPPORTED_JURISDICTION
    assert snapshot.message is not None and "Texas" in snapshot.message
    assert snapshot.is_loading is False
    with pytest.raises(UnsupportedJurisdictionError) as exc_info:
        snapshot.raise_for_failure()
    assert exc_info.value.jurisdiction == "TX"


@pytest.mark.asyncio
async def test_unsupported_device_region_is_blocked() -> None:
    transport = _StaticTransport(TWO_MARKERS)
    service = ProximitySearchService(CONFIG, transport)
    service.set_device_region(Region(jurisdiction="NY", postal_code="10001"))

    snapshot = await service.search(Coordinate.of(40.75, -73.99), 1)

    assert transport.calls == []
    assert snapshot.failure == SearchFailure.UNSUPPORTED_JURISDICTION


@pytest.mark.asyncio
async def test_device_region_replaces_configured_default() -> None:
    transport = _StaticTransport(ONE_MARKER)
    service = ProximitySearchService(CONFIG, transport)
    service.set_device_region(Region(jurisdiction="WA", postal_code="98101"))

    await service.search(Coordinate.of(47.61, -122.33), 3)

    _, payload = transport.calls[0]
    assert payload["state"] == "WA"
    assert payload["zip"] == "98101"
    assert payload["distance"] == "3"


@pytest.mark.asyncio
async def test_resolved_jurisdiction_overrides_device_region() -> None:
    transport = _StaticTransport(ONE_MARKER)
    service = ProximitySearchService(CONFIG, transport)
    service.set_device_region(Region(jurisdiction="WA", postal_code="98101"))

    await service.search(REFERENCE, 1, "id", "83706")

    _, payload = transport.calls[0]
    assert payload["state"] == "ID"
    assert payload["zip"] == "83706"


@pytest.mark.asyncio
async def test_invalid_radius_leaves_state_untouched() -> None:
    transport = _StaticTransport(ONE_MARKER)
    service = ProximitySearchService(CONFIG, transport)

    with pytest.raises(ValidationError):
        await service.search(REFERENCE, 0)

    assert service.phase == SearchPhase.IDLE
    assert transport.calls == []


@pytest.mark.asyncio
async def test_stale_response_does_not_overwrite_newer_markers() -> None:
    slow_gate = asyncio.Event()
    fast_gate = asyncio.Event()
    fast_gate.set()
    service = ProximitySearchService(CONFIG, _GatedTransport((slow_gate, TWO_MARKERS), (fast_gate, ONE_MARKER)))

    slow = asyncio.create_task(service.search(REFERENCE, 1))
    await asyncio.sleep(0)
    latest = await service.search(REFERENCE, 1)

    assert latest.phase == SearchPhase.POPULATED
    assert len(latest.markers) == 1

    slow_gate.set()
    await slow

    assert service.snapshot.sequence == 2
    assert len(service.markers) == 1
    assert service.is_loading is False


@pytest.mark.asyncio
async def test_loading_stays_true_until_latest_attempt_finishes() -> None:
    first_gate = asyncio.Event()
    second_gate = asyncio.Event()
    service = ProximitySearchService(CONFIG, _GatedTransport((first_gate, ONE_MARKER), (second_gate, TWO_MARKERS)))

    first = asyncio.create_task(service.search(REFERENCE, 1))
    await asyncio.sleep(0)
    second = asyncio.create_task(service.search(REFERENCE, 2))
    await asyncio.sleep(0)

    first_gate.set()
    await first
    assert service.is_loading is True

    second_gate.set()
    await second
    assert service.is_loading is False
    assert len(service.markers) == 2


@pytest.mark.asyncio
async def test_dismiss_keeps_markers_and_reset_clears_them() -> None:
    service = ProximitySearchService(CONFIG, _StaticTransport(ONE_MARKER))
    await service.search(REFERENCE, 1, pin_title="Pin")

    dismissed = service.dismiss()
    assert dismissed.phase == SearchPhase.IDLE
    assert len(dismissed.markers) == 1

    assert service.clear_search_pin().search_pin is None

    reset = service.reset()
    assert reset.markers == ()
    assert reset.phase == SearchPhase.IDLE
