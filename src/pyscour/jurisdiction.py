"""US jurisdiction codes and the registry search deny-list.

The registry provider cannot serve searches for a handful of jurisdictions.
Everything not on :data:`UNSUPPORTED_JURISDICTIONS` is treated as
searchable.
"""

from __future__ import annotations

import re

from pyscour.exceptions import UnsupportedJurisdictionError

US_JURISDICTIONS: dict[str, str] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "DC": "District of Columbia",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
    "AS": "American Samoa",
    "GU": "Guam",
    "MP": "Northern Mariana Islands",
    "PR": "Puerto Rico",
    "VI": "U.S. Virgin Islands",
}

# Hardcoded; a newly restricted jurisdiction needs a release.
UNSUPPORTED_JURISDICTIONS: dict[str, str] = {
    code: US_JURISDICTIONS[code] for code in ("CA", "FL", "IL", "MA", "MI", "NJ", "NY", "OH", "PA", "TX")
}

_NAME_TO_CODE: dict[str, str] = {name.lower(): code for code, name in US_JURISDICTIONS.items()}
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_jurisdiction(value: str | None) -> str | None:
    """Map a jurisdiction code or full name to its two-letter code.

    Returns ``None`` when *value* is empty or not a US jurisdiction.

    >>> normalize_jurisdiction("idaho")
    'ID'
    >>> normalize_jurisdiction(" tx ")
    'TX'
    """
    if value is None:
        return None
    text = _WHITESPACE_RE.sub(" ", value).strip()
    if not text:
        return None
    code = text.upper()
    if code in US_JURISDICTIONS:
        return code
    return _NAME_TO_CODE.get(text.lower())


def is_supported(code: str) -> bool:
    """Return ``False`` only for deny-listed jurisdictions."""
    return code.strip().upper() not in UNSUPPORTED_JURISDICTIONS


def display_name(code: str) -> str | None:
    """Human-readable name of a deny-listed jurisdiction, else ``None``."""
    return UNSUPPORTED_JURISDICTIONS.get(code.strip().upper())


def ensure_supported(code: str) -> str:
    """Return the normalized code, raising for deny-listed jurisdictions.

    Raises
    ------
    UnsupportedJurisdictionError
        If *code* is on the deny-list.
    """
    normalized = code.strip().upper()
    if not is_supported(normalized):
        raise UnsupportedJurisdictionError(normalized, display_name(normalized))
    return normalized
