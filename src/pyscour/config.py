"""Client configuration for pyscour."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pyscour._constants import DEFAULT_JURISDICTION, DEFAULT_POSTAL_CODE, SEARCH_PATH
from pyscour.exceptions import ScourConfigError

DEFAULT_PRODUCT_IDS: tuple[str, ...] = ("lurk_199",)


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        raise ScourConfigError(f"{key} must be numeric, got {value!r}") from None


@dataclasses.dataclass(frozen=True)
class ScourConfig:
    """Client configuration.

    Parameters
    ----------
    credential : str
        Agent credential sent with every registry search request.
    base_url : str
        Registry API base URL.
    search_path : str
        Path of the registrant search endpoint.
    default_jurisdiction : str
        Two-letter jurisdiction used when neither a resolved search nor a
        device reverse-geocode supplies one.
    default_postal_code : str
        Postal code paired with ``default_jurisdiction``.
    request_timeout : float
        Total HTTP timeout in seconds for a search request.
    debounce_seconds : float
        Quiescence window before a typed query fragment reaches the
        geocoding provider.
    entitlement_interval : float
        Seconds between periodic entitlement verifications.
    product_ids : tuple of str
        Product identifiers that grant the entitlement. A single product or
        several tiers (e.g. monthly and yearly) are both supported.
    distance_filter_m : float
        Minimum movement in meters before a new device fix is delivered.
    location_min_interval : float
        Seconds after which a fix is delivered even without movement.
    storage_path : Path or None
        JSON file used for persisted state. ``None`` keeps state in memory.
    """

    credential: str
    base_url: str
    search_path: str = SEARCH_PATH
    default_jurisdiction: str = DEFAULT_JURISDICTION
    default_postal_code: str = DEFAULT_POSTAL_CODE
    request_timeout: float = 20.0
    debounce_seconds: float = 0.25
    entitlement_interval: float = 3600.0
    product_ids: tuple[str, ...] = DEFAULT_PRODUCT_IDS
    distance_filter_m: float = 10.0
    location_min_interval: float = 60.0
    storage_path: Path | None = None

    def __post_init__(self) -> None:
        if not self.product_ids:
            raise ScourConfigError("product_ids must contain at least one product")
        if self.debounce_seconds < 0:
            raise ScourConfigError("debounce_seconds must be >= 0")
        if self.entitlement_interval <= 0:
            raise ScourConfigError("entitlement_interval must be > 0")

    @property
    def search_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.search_path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> ScourConfig:
        """Create configuration from environment variables.

        Reads ``SCOUR_CREDENTIAL``, ``SCOUR_BASE_URL`` and optional
        ``SCOUR_*`` variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ScourConfig
            Populated configuration.

        Raises
        ------
        ScourConfigError
            If a required value is missing or a numeric value is invalid.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SCOUR_CREDENTIAL": "credential",
            "SCOUR_BASE_URL": "base_url",
            "SCOUR_SEARCH_PATH": "search_path",
            "SCOUR_DEFAULT_JURISDICTION": "default_jurisdiction",
            "SCOUR_DEFAULT_POSTAL_CODE": "default_postal_code",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "SCOUR_REQUEST_TIMEOUT": "request_timeout",
            "SCOUR_DEBOUNCE_SECONDS": "debounce_seconds",
            "SCOUR_ENTITLEMENT_INTERVAL": "entitlement_interval",
            "SCOUR_DISTANCE_FILTER_M": "distance_filter_m",
            "SCOUR_LOCATION_MIN_INTERVAL": "location_min_interval",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            if field_name in overrides:
                continue
            parsed = _env_float(env, env_key)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        # Comma separated, e.g. "scour_monthly,scour_yearly"
        products_env = env.get("SCOUR_PRODUCT_IDS")
        if products_env is not None and "product_ids" not in overrides:
            config_kwargs["product_ids"] = tuple(p.strip() for p in products_env.split(",") if p.strip())

        storage_env = env.get("SCOUR_STORAGE_PATH")
        if storage_env and "storage_path" not in overrides:
            config_kwargs["storage_path"] = Path(storage_env).expanduser()

        config_kwargs.update(overrides)

        for required in ("credential", "base_url"):
            if not config_kwargs.get(required):
                raise ScourConfigError(f"Missing required setting: {required} (SCOUR_{required.upper()})")

        return cls(**config_kwargs)
