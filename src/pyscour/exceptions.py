"""Custom exception hierarchy for pyscour."""

from __future__ import annotations


class ScourError(Exception):
    """Base exception for all pyscour errors."""


class ScourConfigError(ScourError):
    """Invalid or missing configuration."""


class ScourTransportError(ScourError):
    """HTTP-level failure (network, timeout, non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ScourDecodeError(ScourError):
    """Response body was not valid JSON or did not match the expected shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class EmptyResultError(ScourError):
    """The search succeeded but matched no registrants."""


class UnsupportedJurisdictionError(ScourError):
    """The query reference lies in a jurisdiction the registry cannot search.

    Raised before any search request is issued.
    """

    def __init__(self, jurisdiction: str, display_name: str | None = None) -> None:
        self.jurisdiction = jurisdiction
        self.display_name = display_name or jurisdiction
        super().__init__(f"Jurisdiction not supported: {self.display_name}")


class GeocodeError(ScourError):
    """No usable placemark could be resolved for a query."""


class PurchaseError(ScourError):
    """Base for purchase and restore failures."""


class PurchaseVerificationError(PurchaseError):
    """The ledger returned a transaction that failed verification."""


class ProductNotFoundError(PurchaseError):
    """No configured product or matching transaction was found."""


class EntitlementRequiredError(ScourError):
    """A protected action was attempted without an active entitlement."""
