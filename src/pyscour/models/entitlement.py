"""Purchase ledger and entitlement models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class EntitlementState(StrEnum):
    UNKNOWN = "unknown"
    ACTIVE = "active"
    INACTIVE = "inactive"


class PurchaseStatus(StrEnum):
    """Raw result of a ledger purchase call."""

    SUCCESS = "success"
    USER_CANCELLED = "user_cancelled"
    PENDING = "pending"


class PurchaseOutcome(StrEnum):
    """What :meth:`EntitlementManager.purchase` reports to the caller."""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    PENDING = "pending"
    VERIFICATION_FAILED = "verification_failed"


class LedgerTransaction(BaseModel):
    """A transaction as enumerated by the purchase ledger.

    Parameters
    ----------
    transaction_id : str
        Ledger identifier, passed back to ``finish``.
    product_id : str
        Purchased product.
    verified : bool
        Whether the ledger's signature check passed.
    expiration_date : datetime or None
        Subscription expiry; ``None`` for non-expiring purchases.
    revocation_date : datetime or None
        Set when the purchase was refunded or revoked.
    is_upgraded : bool
        ``True`` when superseded by a higher subscription tier.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    transaction_id: str
    product_id: str
    verified: bool = True
    expiration_date: datetime | None = None
    revocation_date: datetime | None = None
    is_upgraded: bool = False

    @field_validator("expiration_date", "revocation_date")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def grants_access(self, product_ids: frozenset[str], now: datetime) -> bool:
        if not self.verified or self.product_id not in product_ids:
            return False
        if self.is_upgraded or self.revocation_date is not None:
            return False
        return self.expiration_date is None or self.expiration_date > now


class LedgerPurchaseResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    status: PurchaseStatus
    transaction: LedgerTransaction | None = None


class StoreProduct(BaseModel):
    """A purchasable product as listed by the ledger."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    product_id: str
    display_name: str = ""
    display_price: str = ""
    subscription_period: str | None = None
