"""pyscour - Async Python client for nearby public registry searches."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyscour")
except PackageNotFoundError:
    __version__ = "0+local"
from pyscour._constants import SEARCH_RADIUS_OPTIONS, parse_radius_label
from pyscour.client import ScourClient
from pyscour.config import ScourConfig
from pyscour.entitlement import EntitlementManager, PurchaseLedger
from pyscour.exceptions import (
    EmptyResultError,
    EntitlementRequiredError,
    GeocodeError,
    ProductNotFoundError,
    PurchaseError,
    PurchaseVerificationError,
    ScourConfigError,
    ScourDecodeError,
    ScourError,
    ScourTransportError,
    UnsupportedJurisdictionError,
)
from pyscour.geo import Coordinate, distance_meters, format_distance
from pyscour.geocoding import GeocodingProvider, GeocodingResolver
from pyscour.jurisdiction import display_name, is_supported
from pyscour.location import LocationAuthorization, LocationFix, LocationProvider
from pyscour.models import (
    EntitlementState,
    LedgerPurchaseResult,
    LedgerTransaction,
    PlaceSuggestion,
    Placemark,
    PurchaseOutcome,
    PurchaseStatus,
    RecentSearchEntry,
    Region,
    Registrant,
    ResolvedLocation,
    SearchMarker,
    SearchPin,
    StoreProduct,
)
from pyscour.recent import RecentSearchStore
from pyscour.search import ProximitySearchService, SearchFailure, SearchPhase, SearchSnapshot
from pyscour.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "__version__",
    "Coordinate",
    "EmptyResultError",
    "EntitlementManager",
    "EntitlementRequiredError",
    "EntitlementState",
    "GeocodeError",
    "GeocodingProvider",
    "GeocodingResolver",
    "JsonFileStorage",
    "KeyValueStorage",
    "LedgerPurchaseResult",
    "LedgerTransaction",
    "LocationAuthorization",
    "LocationFix",
    "LocationProvider",
    "MemoryStorage",
    "PlaceSuggestion",
    "Placemark",
    "ProductNotFoundError",
    "ProximitySearchService",
    "PurchaseError",
    "PurchaseLedger",
    "PurchaseOutcome",
    "PurchaseStatus",
    "PurchaseVerificationError",
    "RecentSearchEntry",
    "RecentSearchStore",
    "Region",
    "Registrant",
    "ResolvedLocation",
    "SEARCH_RADIUS_OPTIONS",
    "ScourClient",
    "ScourConfig",
    "ScourConfigError",
    "ScourDecodeError",
    "ScourError",
    "ScourTransportError",
    "SearchFailure",
    "SearchMarker",
    "SearchPhase",
    "SearchPin",
    "SearchSnapshot",
    "StoreProduct",
    "UnsupportedJurisdictionError",
    "display_name",
    "distance_meters",
    "format_distance",
    "is_supported",
    "parse_radius_label",
]
