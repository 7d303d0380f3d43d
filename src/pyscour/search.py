"""Proximity search: query the registry and own the resulting markers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, ValidationError

from pyscour import jurisdiction as _jurisdiction
from pyscour._api.registry import fetch_registrants
from pyscour._constants import MESSAGE_NO_RESULTS, MESSAGE_SEARCH_FAILED, MESSAGE_UNSUPPORTED_JURISDICTION
from pyscour._transport import Transport
from pyscour.config import ScourConfig
from pyscour.exceptions import (
    EmptyResultError,
    ScourDecodeError,
    ScourError,
    ScourTransportError,
    UnsupportedJurisdictionError,
)
from pyscour.geo import Coordinate
from pyscour.ingestion.markers import markers_from_response
from pyscour.models.markers import Registrant, SearchMarker, SearchPin
from pyscour.models.places import Region
from pyscour.models.requests import RegistrySearchPayload, SearchRequest

_logger = logging.getLogger(__name__)


class SearchPhase(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    EMPTY = "empty"
    FAILED = "failed"


class SearchFailure(StrEnum):
    """Internal failure class; NETWORK and DECODE share one user message."""

    NETWORK = "network"
    DECODE = "decode"
    UNSUPPORTED_JURISDICTION = "unsupported_jurisdiction"


class SearchSnapshot(BaseModel):
    """Immutable view of the search service state."""

    model_config = ConfigDict(frozen=True)

    phase: SearchPhase = SearchPhase.IDLE
    markers: tuple[Registrant, ...] = ()
    search_pin: SearchPin | None = None
    is_loading: bool = False
    message: str | None = None
    failure: SearchFailure | None = None
    jurisdiction: str | None = None
    sequence: int = 0

    @property
    def annotations(self) -> tuple[SearchMarker, ...]:
        """Registrant markers followed by the search pin, if any."""
        if self.search_pin is None:
            return self.markers
        return (*self.markers, self.search_pin)

    def raise_for_failure(self) -> None:
        """Raise the typed error matching a terminal EMPTY/FAILED snapshot."""
        if self.phase == SearchPhase.EMPTY:
            raise EmptyResultError(self.message or MESSAGE_NO_RESULTS)
        if self.phase != SearchPhase.FAILED:
            return
        if self.failure == SearchFailure.UNSUPPORTED_JURISDICTION:
            code = self.jurisdiction or ""
            raise UnsupportedJurisdictionError(code, _jurisdiction.display_name(code))
        if self.failure == SearchFailure.DECODE:
            raise ScourDecodeError(self.message or MESSAGE_SEARCH_FAILED)
        raise ScourTransportError(self.message or MESSAGE_SEARCH_FAILED)


class ProximitySearchService:
    """Issue registry searches and publish marker state.

    The service is the only writer of its markers, search pin and loading
    flag. All methods must run on the owning event loop; observers receive
    every new :class:`SearchSnapshot` through ``on_change``.

    Each search attempt is tagged with a monotonically increasing sequence
    number. A response that arrives after a newer attempt started is
    discarded, so a slow request can never overwrite fresher markers.
    """

    def __init__(
        self,
        config: ScourConfig,
        transport: Transport,
        *,
        on_change: Callable[[SearchSnapshot], None] | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._on_change = on_change
        self._snapshot = SearchSnapshot()
        self._sequence = 0
        self._device_region: Region | None = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> SearchSnapshot:
        return self._snapshot

    @property
    def phase(self) -> SearchPhase:
        return self._snapshot.phase

    @property
    def markers(self) -> tuple[Registrant, ...]:
        return self._snapshot.markers

    @property
    def search_pin(self) -> SearchPin | None:
        return self._snapshot.search_pin

    @property
    def is_loading(self) -> bool:
        return self._snapshot.is_loading

    @property
    def error_message(self) -> str | None:
        if self._snapshot.phase in (SearchPhase.EMPTY, SearchPhase.FAILED):
            return self._snapshot.message
        return None

    @property
    def device_region(self) -> Region | None:
        return self._device_region

    def _publish(self, snapshot: SearchSnapshot) -> SearchSnapshot:
        self._snapshot = snapshot
        if self._on_change is not None:
            try:
                self._on_change(snapshot)
            except Exception:
                _logger.debug("on_change callback failed", exc_info=True)
        return snapshot

    # ------------------------------------------------------------------
    # Region defaults
    # ------------------------------------------------------------------

    def set_device_region(self, region: Region | None) -> None:
        """Record the reverse-geocoded region of the device location."""
        self._device_region = region

    def default_region(self) -> Region:
        """Device region if known, else the configured fallback."""
        if self._device_region is not None:
            return self._device_region
        return Region(
            jurisdiction=self._config.default_jurisdiction,
            postal_code=self._config.default_postal_code,
        )

    def _region_for(self, request: SearchRequest) -> Region:
        default = self.default_region()
        if request.jurisdiction is None:
            return default
        postal_code = request.postal_code
        if postal_code is None and default.jurisdiction == request.jurisdiction:
            postal_code = default.postal_code
        if postal_code is None:
            postal_code = self._config.default_postal_code
        return Region(jurisdiction=request.jurisdiction, postal_code=postal_code)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        reference: Coordinate,
        radius_miles: float,
        jurisdiction: str | None = None,
        postal_code: str | None = None,
        *,
        pin_title: str | None = None,
    ) -> SearchSnapshot:
        """Run one search attempt and return the resulting snapshot.

        ``jurisdiction``/``postal_code`` come from a resolved address; when
        omitted the device region (or configured fallback) is used.
        Passing ``pin_title`` places the search pin at ``reference``.

        Raises
        ------
        pydantic.ValidationError
            If the radius or jurisdiction arguments are malformed. No state
            changes in that case.
        """
        request = SearchRequest(
            reference=reference,
            radius_miles=radius_miles,
            jurisdiction=jurisdiction,
            postal_code=postal_code,
        )
        region = self._region_for(request)

        self._sequence += 1
        sequence = self._sequence
        pin = SearchPin(coordinate=reference, title=pin_title) if pin_title is not None else None

        self._publish(
            self._snapshot.model_copy(
                update={
                    "phase": SearchPhase.LOADING,
                    "is_loading": True,
                    "message": None,
                    "failure": None,
                    "search_pin": pin,
                    "jurisdiction": region.jurisdiction,
                    "sequence": sequence,
                }
            )
        )

        if not _jurisdiction.is_supported(region.jurisdiction):
            name = _jurisdiction.display_name(region.jurisdiction) or region.jurisdiction
            _logger.info("Search blocked for unsupported jurisdiction=%s", region.jurisdiction)
            return self._finish(
                sequence,
                phase=SearchPhase.FAILED,
                markers=(),
                message=MESSAGE_UNSUPPORTED_JURISDICTION.format(name=name),
                failure=SearchFailure.UNSUPPORTED_JURISDICTION,
            )

        payload = RegistrySearchPayload.build(
            credential=self._config.credential,
            reference=request.reference,
            radius_miles=request.radius_miles,
            jurisdiction=region.jurisdiction,
            postal_code=region.postal_code,
        )

        try:
            response = await fetch_registrants(self._config, self._transport, payload)
            markers = tuple(markers_from_response(response))
        except ScourTransportError as exc:
            _logger.warning("Registry search failed: %s", exc)
            return self._finish(
                sequence,
                phase=SearchPhase.FAILED,
                markers=(),
                message=MESSAGE_SEARCH_FAILED,
                failure=SearchFailure.NETWORK,
            )
        except (ScourDecodeError, ValidationError) as exc:
            _logger.warning("Registry search response could not be decoded: %s", exc)
            return self._finish(
                sequence,
                phase=SearchPhase.FAILED,
                markers=(),
                message=MESSAGE_SEARCH_FAILED,
                failure=SearchFailure.DECODE,
            )
        except ScourError as exc:
            _logger.warning("Registry search error: %s", exc)
            return self._finish(
                sequence,
                phase=SearchPhase.FAILED,
                markers=(),
                message=MESSAGE_SEARCH_FAILED,
                failure=SearchFailure.NETWORK,
            )
        except BaseException:
            self._finish(
                sequence,
                phase=SearchPhase.FAILED,
                markers=(),
                message=MESSAGE_SEARCH_FAILED,
                failure=SearchFailure.NETWORK,
            )
            raise

        if not markers:
            return self._finish(
                sequence,
                phase=SearchPhase.EMPTY,
                markers=(),
                message=MESSAGE_NO_RESULTS,
                failure=None,
            )
        return self._finish(
            sequence,
            phase=SearchPhase.POPULATED,
            markers=markers,
            message=None,
            failure=None,
        )

    def _finish(
        self,
        sequence: int,
        *,
        phase: SearchPhase,
        markers: tuple[Registrant, ...],
        message: str | None,
        failure: SearchFailure | None,
    ) -> SearchSnapshot:
        if sequence != self._sequence:
            _logger.debug("Discarding stale search result sequence=%d latest=%d", sequence, self._sequence)
            return self._snapshot
        _logger.debug("Search sequence=%d finished phase=%s markers=%d", sequence, phase, len(markers))
        return self._publish(
            self._snapshot.model_copy(
                update={
                    "phase": phase,
                    "markers": markers,
                    "is_loading": False,
                    "message": message,
                    "failure": failure,
                }
            )
        )

    # ------------------------------------------------------------------
    # Transitions back to IDLE
    # ------------------------------------------------------------------

    def dismiss(self) -> SearchSnapshot:
        """Acknowledge a terminal state; markers are kept."""
        if self._snapshot.phase == SearchPhase.LOADING:
            return self._snapshot
        return self._publish(
            self._snapshot.model_copy(update={"phase": SearchPhase.IDLE, "message": None, "failure": None})
        )

    def clear_search_pin(self) -> SearchSnapshot:
        if self._snapshot.search_pin is None:
            return self._snapshot
        return self._publish(self._snapshot.model_copy(update={"search_pin": None}))

    def reset(self) -> SearchSnapshot:
        """Forget markers and pin; an in-flight attempt is treated as stale."""
        self._sequence += 1
        return self._publish(SearchSnapshot(sequence=self._sequence))
