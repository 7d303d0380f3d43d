"""High-level async client wiring search, geocoding and entitlements."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyscour._constants import DEFAULT_SEARCH_RADIUS
from pyscour._transport import JsonTransport, Transport
from pyscour.config import ScourConfig
from pyscour.entitlement import EntitlementManager, PurchaseLedger
from pyscour.exceptions import EntitlementRequiredError, GeocodeError, ScourError
from pyscour.geo import Coordinate
from pyscour.geocoding import GeocodingProvider, GeocodingResolver
from pyscour.location import LocationProvider, PlatformLocationSource
from pyscour.models.markers import Registrant
from pyscour.models.places import PlaceSuggestion, ResolvedLocation
from pyscour.models.recent import RecentSearchEntry
from pyscour.recent import RecentSearchStore
from pyscour.search import ProximitySearchService, SearchSnapshot
from pyscour.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

_logger = logging.getLogger(__name__)


class ScourClient:
    """Async client for nearby registrant searches.

    Usage::

        async with ScourClient(config, geocoder=provider, ledger=ledger) as client:
            snapshot = await client.search_nearby(1.0)
            uri = await client.open_detail(snapshot.markers[0])
    """

    def __init__(
        self,
        config: ScourConfig,
        *,
        geocoder: GeocodingProvider,
        ledger: PurchaseLedger,
        location_source: PlatformLocationSource | None = None,
        storage: KeyValueStorage | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_search_change: Callable[[SearchSnapshot], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport
        if storage is None:
            storage = JsonFileStorage(config.storage_path) if config.storage_path else MemoryStorage()
        self._storage = storage
        self._search: ProximitySearchService | None = None
        self._on_search_change = on_search_change
        self._resolver = GeocodingResolver(geocoder, debounce=config.debounce_seconds)
        self._entitlements = EntitlementManager(
            ledger,
            product_ids=config.product_ids,
            storage=storage,
            interval=config.entitlement_interval,
        )
        self._location: LocationProvider | None = None
        if location_source is not None:
            self._location = LocationProvider(
                location_source,
                distance_filter_m=config.distance_filter_m,
                min_interval_s=config.location_min_interval,
            )
        self._recent: RecentSearchStore | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ScourClient:
        transport = self._injected_transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = JsonTransport(self._http_session, timeout=self._config.request_timeout)
        self._search = ProximitySearchService(self._config, transport, on_change=self._on_search_change)
        self._recent = await RecentSearchStore.open(self._storage)
        if self._location is not None:
            self._location.start()
        await self._entitlements.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._entitlements.stop()
        await self._resolver.aclose()
        if self._location is not None:
            self._location.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._search = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def search(self) -> ProximitySearchService:
        if self._search is None:
            raise ScourError("Client not initialized. Use 'async with ScourClient(...) as client:'")
        return self._search

    @property
    def recent(self) -> RecentSearchStore:
        if self._recent is None:
            raise ScourError("Client not initialized. Use 'async with ScourClient(...) as client:'")
        return self._recent

    @property
    def resolver(self) -> GeocodingResolver:
        return self._resolver

    @property
    def entitlements(self) -> EntitlementManager:
        return self._entitlements

    @property
    def location(self) -> LocationProvider | None:
        return self._location

    # ------------------------------------------------------------------
    # Searching
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        """Forward live search-field text to the debounced resolver."""
        self._resolver.set_query_fragment(text)

    async def search_nearby(
        self,
        radius_miles: float = DEFAULT_SEARCH_RADIUS,
        *,
        coordinate: Coordinate | None = None,
        fix_timeout: float = 10.0,
    ) -> SearchSnapshot:
        """Search around the device (or an explicit *coordinate*)."""
        if coordinate is None:
            if self._location is None:
                raise ScourError("No location source configured; pass coordinate=")
            fix = await self._location.wait_for_fix(fix_timeout)
            if fix is None:
                raise ScourError("No device location available")
            coordinate = fix.coordinate

        region = await self._resolver.resolve_region(coordinate)
        if region is not None:
            self.search.set_device_region(region)
        else:
            _logger.debug("No device region; using %s", self.search.default_region())
        return await self.search.search(coordinate, radius_miles)

    async def search_suggestion(
        self,
        candidate: PlaceSuggestion,
        radius_miles: float = DEFAULT_SEARCH_RADIUS,
    ) -> tuple[ResolvedLocation, SearchSnapshot]:
        """Resolve a selected suggestion, remember it, and search around it.

        Raises
        ------
        GeocodeError
            If the suggestion cannot be resolved; no search is issued.
        """
        resolved = await self._resolver.resolve(candidate)
        await self.recent.add(resolved.title, resolved.subtitle, resolved.jurisdiction, resolved.postal_code)
        snapshot = await self.search.search(
            resolved.coordinate,
            radius_miles,
            resolved.jurisdiction,
            resolved.postal_code,
            pin_title=resolved.title,
        )
        return resolved, snapshot

    async def search_recent(
        self,
        entry: RecentSearchEntry,
        radius_miles: float = DEFAULT_SEARCH_RADIUS,
    ) -> SearchSnapshot:
        """Re-run a stored search by geocoding its text again.

        Entries saved without a region take the region of their own
        coordinate, never the device or configured default.

        Raises
        ------
        GeocodeError
            If the text cannot be geocoded, or the region of an entry
            without a stored one cannot be determined; no search is issued.
        """
        coordinate = await self._resolver.resolve_free_text(entry.text)
        jurisdiction, postal_code = entry.jurisdiction, entry.postal_code
        if jurisdiction is None:
            region = await self._resolver.resolve_region(coordinate)
            if region is None:
                raise GeocodeError(f"Could not determine the jurisdiction of {entry.text!r}")
            jurisdiction, postal_code = region.jurisdiction, region.postal_code
        await self.recent.add(entry.main_text, entry.sub_text, jurisdiction, postal_code)
        return await self.search.search(
            coordinate,
            radius_miles,
            jurisdiction,
            postal_code,
            pin_title=entry.main_text,
        )

    # ------------------------------------------------------------------
    # Entitlement gate
    # ------------------------------------------------------------------

    async def open_detail(self, registrant: Registrant) -> str:
        """Return the detail URI of *registrant* if the user is entitled.

        Raises
        ------
        EntitlementRequiredError
            If verification finds no active entitlement.
        """
        await self._entitlements.verify()
        if not self._entitlements.check_entitlement():
            _logger.info("Detail view blocked; entitlement state=%s", self._entitlements.state)
            raise EntitlementRequiredError("An active purchase is required to view registrant details")
        return registrant.detail_uri

    async def on_foreground(self) -> None:
        await self._entitlements.on_foreground()
