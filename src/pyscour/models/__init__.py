"""Data models for registry, geocoding and purchase data."""

from pyscour.geo import Coordinate
from pyscour.models._base import ScourBaseModel
from pyscour.models.entitlement import (
    EntitlementState,
    LedgerPurchaseResult,
    LedgerTransaction,
    PurchaseOutcome,
    PurchaseStatus,
    StoreProduct,
)
from pyscour.models.markers import Registrant, SearchMarker, SearchPin
from pyscour.models.places import PlaceSuggestion, Placemark, Region, ResolvedLocation
from pyscour.models.recent import RecentSearchEntry
from pyscour.models.registry import (
    AliasName,
    RegistrantLocation,
    RegistrantName,
    RegistrantRecord,
    RegistrySearchResponse,
)
from pyscour.models.requests import RegistrySearchPayload, SearchRequest, format_miles

__all__ = [
    "AliasName",
    "Coordinate",
    "EntitlementState",
    "LedgerPurchaseResult",
    "LedgerTransaction",
    "PlaceSuggestion",
    "Placemark",
    "PurchaseOutcome",
    "PurchaseStatus",
    "RecentSearchEntry",
    "Region",
    "Registrant",
    "RegistrantLocation",
    "RegistrantName",
    "RegistrantRecord",
    "RegistrySearchPayload",
    "RegistrySearchResponse",
    "ResolvedLocation",
    "ScourBaseModel",
    "SearchMarker",
    "SearchPin",
    "SearchRequest",
    "StoreProduct",
    "format_miles",
]
