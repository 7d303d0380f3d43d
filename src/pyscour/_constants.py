"""Internal constants shared across the library."""

USER_AGENT = "pyscour/1 (+aiohttp)"

SEARCH_PATH = "/registrants/search"

# Fallback region used when no device reverse-geocode is available.
DEFAULT_JURISDICTION = "ID"
DEFAULT_POSTAL_CODE = "83702"

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_MILE = 1609.344

RESIDENTIAL_LOCATION_TYPES: frozenset[str] = frozenset({"RESIDENTIAL", "RESIDENCE"})

# ------------------------------------------------------------------
# Persistence keys
# ------------------------------------------------------------------

RECENT_SEARCHES_KEY = "recentSearches"
ENTITLEMENT_HINT_KEY = "isSubscribed"
MAX_RECENT_SEARCHES = 10

# ------------------------------------------------------------------
# Search radius presets  (label -> miles)
# ------------------------------------------------------------------

SEARCH_RADIUS_OPTIONS: tuple[float, ...] = (0.5, 1.0, 2.0, 3.0)
DEFAULT_SEARCH_RADIUS = 0.5


def parse_radius_label(label: str) -> float:
    """Convert a radius label such as ``".5 mi"`` or ``"2 mi"`` to miles.

    Raises :class:`ValueError` for unparseable or non-positive values.
    """
    text = label.strip().lower()
    if text.endswith("mi"):
        text = text[:-2].strip()
    try:
        miles = float(text)
    except ValueError:
        raise ValueError(f"invalid radius label: {label!r}") from None
    if miles <= 0:
        raise ValueError(f"radius must be positive, got {label!r}")
    return miles


# ------------------------------------------------------------------
# User-facing messages
# ------------------------------------------------------------------

MESSAGE_SEARCH_FAILED = "Unable to load registrants right now. Please try again."
MESSAGE_NO_RESULTS = "No registrants found in this area."
MESSAGE_UNSUPPORTED_JURISDICTION = "Searches in {name} are not currently supported."
