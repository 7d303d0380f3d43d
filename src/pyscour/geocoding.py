"""Place search and address resolution on top of a geocoding provider."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from collections.abc import Callable, Sequence
from typing import Protocol

from pyscour.exceptions import GeocodeError
from pyscour.geo import Coordinate
from pyscour.jurisdiction import US_JURISDICTIONS, normalize_jurisdiction
from pyscour.models.places import PlaceSuggestion, Placemark, Region, ResolvedLocation

_logger = logging.getLogger(__name__)

_COUNTRY_RE = re.compile(r"united states(?: of america)?|usa|u\.s\.a\.?|us", re.IGNORECASE)
_TRAILING_ZIP_RE = re.compile(r"\s+\d{5}(?:-\d{4})?$")
_STATE_NAMES = frozenset(name.lower() for name in US_JURISDICTIONS.values())


class GeocodingProvider(Protocol):
    """Place-search and geocoding backend (platform or web service)."""

    async def suggest(self, query: str) -> Sequence[PlaceSuggestion]:
        """Ranked completions for a partial query."""
        ...

    async def lookup(self, suggestion: PlaceSuggestion) -> Sequence[Placemark]:
        """Full placemarks for a selected completion."""
        ...

    async def geocode(self, address: str) -> Sequence[Placemark]:
        ...

    async def reverse_geocode(self, coordinate: Coordinate) -> Sequence[Placemark]:
        ...


def is_us_suggestion(suggestion: PlaceSuggestion) -> bool:
    """Whether a suggestion ends in a US country, state code or state name.

    Only the last comma-separated component counts, optionally followed by
    a ZIP code: ``"Boise, ID 83702"`` passes, ``"Milano MI, Italy"`` does not.
    """
    parts = [part.strip() for part in f"{suggestion.title},{suggestion.subtitle}".split(",") if part.strip()]
    if not parts:
        return False
    last = _TRAILING_ZIP_RE.sub("", parts[-1])
    if _COUNTRY_RE.fullmatch(last):
        return True
    if last in US_JURISDICTIONS:
        return True
    return last.lower() in _STATE_NAMES


def _first_placemark(placemarks: Sequence[Placemark], what: str) -> Placemark:
    if not placemarks:
        raise GeocodeError(f"No placemark found for {what!r}")
    return placemarks[0]


class GeocodingResolver:
    """Debounced live suggestions plus immediate resolution of a selection.

    All methods must be called on the owning event loop. Typing updates
    go through :meth:`set_query_fragment`, which never blocks; the
    provider is only queried once the fragment has been stable for
    ``debounce`` seconds.
    """

    def __init__(
        self,
        provider: GeocodingProvider,
        *,
        debounce: float = 0.25,
        on_results: Callable[[tuple[PlaceSuggestion, ...]], None] | None = None,
    ) -> None:
        self._provider = provider
        self._debounce = debounce
        self._on_results = on_results
        self._results: tuple[PlaceSuggestion, ...] = ()
        self._query = ""
        self._pending: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def query(self) -> str:
        return self._query

    @property
    def results(self) -> tuple[PlaceSuggestion, ...]:
        return self._results

    @property
    def pending(self) -> asyncio.Task[None] | None:
        """The scheduled provider query, if one has not completed yet."""
        task = self._pending
        if task is None or task.done():
            return None
        return task

    # ------------------------------------------------------------------
    # Live suggestions
    # ------------------------------------------------------------------

    def set_query_fragment(self, text: str) -> None:
        """Replace the live query; a pending query is cancelled, never queued."""
        self._query = text
        self._generation += 1
        self._cancel_pending()

        if not text.strip():
            self._publish(())
            return

        generation = self._generation
        self._pending = asyncio.get_running_loop().create_task(self._debounced_query(text, generation))

    async def _debounced_query(self, text: str, generation: int) -> None:
        if self._debounce > 0:
            await asyncio.sleep(self._debounce)
        try:
            suggestions = await self._provider.suggest(text)
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.warning("Place search failed for fragment", exc_info=True)
            return

        if generation != self._generation:
            _logger.debug("Dropping suggestions for superseded fragment")
            return

        filtered = tuple(s for s in suggestions if is_us_suggestion(s))
        _logger.debug("Place search suggestions=%d us=%d", len(suggestions), len(filtered))
        self._publish(filtered)

    def _publish(self, results: tuple[PlaceSuggestion, ...]) -> None:
        self._results = results
        if self._on_results is not None:
            try:
                self._on_results(results)
            except Exception:
                _logger.debug("on_results callback failed", exc_info=True)

    def _cancel_pending(self) -> None:
        task = self._pending
        self._pending = None
        if task is not None and not task.done():
            task.cancel()

    async def aclose(self) -> None:
        """Cancel any scheduled provider query."""
        task = self._pending
        self._cancel_pending()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Resolution (never debounced)
    # ------------------------------------------------------------------

    async def resolve(self, candidate: PlaceSuggestion) -> ResolvedLocation:
        """Resolve a selected suggestion to a searchable location.

        Raises
        ------
        GeocodeError
            If the provider fails, returns no placemark, or the first
            placemark lacks a coordinate, US jurisdiction or postal code.
        """
        try:
            placemarks = await self._provider.lookup(candidate)
        except GeocodeError:
            raise
        except Exception as exc:
            raise GeocodeError(f"Place lookup failed for {candidate.title!r}") from exc

        placemark = _first_placemark(placemarks, candidate.title)
        jurisdiction = normalize_jurisdiction(placemark.administrative_area)
        postal_code = (placemark.postal_code or "").strip()
        if placemark.coordinate is None or jurisdiction is None or not postal_code:
            raise GeocodeError(f"Placemark for {candidate.title!r} is missing coordinate, state or postal code")

        return ResolvedLocation(
            title=candidate.title,
            subtitle=candidate.subtitle,
            coordinate=placemark.coordinate,
            jurisdiction=jurisdiction,
            postal_code=postal_code,
        )

    async def resolve_free_text(self, text: str) -> Coordinate:
        """Geocode stored address text to a coordinate."""
        try:
            placemarks = await self._provider.geocode(text)
        except GeocodeError:
            raise
        except Exception as exc:
            raise GeocodeError(f"Geocoding failed for {text!r}") from exc

        placemark = _first_placemark(placemarks, text)
        if placemark.coordinate is None:
            raise GeocodeError(f"Placemark for {text!r} has no coordinate")
        return placemark.coordinate

    async def resolve_region(self, coordinate: Coordinate) -> Region | None:
        """Reverse-geocode *coordinate* to a jurisdiction/postal code pair.

        Returns ``None`` when the provider cannot supply both; callers fall
        back to configured defaults.
        """
        try:
            placemarks = await self._provider.reverse_geocode(coordinate)
        except Exception:
            _logger.debug("Reverse geocode failed", exc_info=True)
            return None
        if not placemarks:
            return None
        placemark = placemarks[0]
        jurisdiction = normalize_jurisdiction(placemark.administrative_area)
        postal_code = (placemark.postal_code or "").strip()
        if jurisdiction is None or not postal_code:
            return None
        return Region(jurisdiction=jurisdiction, postal_code=postal_code)
