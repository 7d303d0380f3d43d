"""Purchase entitlement tracking against a purchase ledger."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Protocol

from pyscour._constants import ENTITLEMENT_HINT_KEY
from pyscour.exceptions import ProductNotFoundError, PurchaseError, PurchaseVerificationError
from pyscour.models.entitlement import (
    EntitlementState,
    LedgerPurchaseResult,
    LedgerTransaction,
    PurchaseOutcome,
    PurchaseStatus,
    StoreProduct,
)
from pyscour.storage import KeyValueStorage

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PurchaseLedger(Protocol):
    """Platform store / receipt ledger."""

    async def current_entitlements(self) -> Sequence[LedgerTransaction]:
        """Transactions that currently entitle the user, verified or not."""
        ...

    async def purchase(self, product_id: str) -> LedgerPurchaseResult:
        ...

    def updates(self) -> AsyncIterator[LedgerTransaction]:
        """Transactions arriving outside a purchase call (renewals, refunds...)."""
        ...

    async def products(self, product_ids: Iterable[str]) -> Sequence[StoreProduct]:
        ...

    async def finish(self, transaction: LedgerTransaction) -> None:
        ...


class EntitlementManager:
    """Keep a locally readable entitlement state in sync with the ledger.

    Verification runs on :meth:`start`, on :meth:`on_foreground`, every
    ``interval`` seconds, on every ledger update and whenever a caller
    awaits :meth:`verify`. Each verification fully overwrites the state.
    :meth:`check_entitlement` only reads the last verified state.

    Usage::

        manager = EntitlementManager(ledger, product_ids=("pro_monthly", "pro_yearly"))
        await manager.start()
        ...
        await manager.verify()
        if manager.check_entitlement():
            ...
        await manager.stop()
    """

    def __init__(
        self,
        ledger: PurchaseLedger,
        *,
        product_ids: Iterable[str],
        storage: KeyValueStorage | None = None,
        interval: float = 3600.0,
        clock: Callable[[], datetime] = _utcnow,
        on_change: Callable[[EntitlementState], None] | None = None,
    ) -> None:
        self._ledger = ledger
        self._product_ids = frozenset(product_ids)
        if not self._product_ids:
            raise ValueError("product_ids must not be empty")
        self._storage = storage
        self._interval = interval
        self._clock = clock
        self._on_change = on_change
        self._state = EntitlementState.UNKNOWN
        self._cached_hint: bool | None = None
        self._issued = 0
        self._applied = 0
        self._periodic_task: asyncio.Task[None] | None = None
        self._updates_task: asyncio.Task[None] | None = None
        self._starting = False
        self._products: tuple[StoreProduct, ...] = ()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> EntitlementState:
        return self._state

    @property
    def product_ids(self) -> frozenset[str]:
        return self._product_ids

    @property
    def products(self) -> tuple[StoreProduct, ...]:
        return self._products

    @property
    def cached_hint(self) -> bool | None:
        """Entitlement persisted by a previous run, for display before verification.

        Never consulted by :meth:`check_entitlement`.
        """
        return self._cached_hint

    @property
    def is_running(self) -> bool:
        return self._periodic_task is not None and not self._periodic_task.done()

    def check_entitlement(self) -> bool:
        """Last verified result; ``UNKNOWN`` counts as not entitled."""
        return self._state == EntitlementState.ACTIVE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> EntitlementState:
        """Load the cached hint, verify once, then start background tasks."""
        if self.is_running or self._starting:
            return self._state
        self._starting = True
        try:
            await self._load_hint()
            state = await self.verify()
            loop = asyncio.get_running_loop()
            self._periodic_task = loop.create_task(self._periodic_loop())
            self._updates_task = loop.create_task(self._listen_for_updates())
        finally:
            self._starting = False
        return state

    async def stop(self) -> None:
        """Cancel the periodic loop and update listener and wait for them."""
        tasks = [t for t in (self._periodic_task, self._updates_task) if t is not None]
        self._periodic_task = None
        self._updates_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def on_foreground(self) -> EntitlementState:
        """App returned to the foreground."""
        return await self.verify()

    async def _periodic_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.verify()
            except Exception:
                _logger.warning("Periodic entitlement verification failed", exc_info=True)

    async def _listen_for_updates(self) -> None:
        try:
            async for transaction in self._ledger.updates():
                await self._handle_update(transaction)
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.warning("Ledger update stream ended with an error", exc_info=True)

    async def _handle_update(self, transaction: LedgerTransaction) -> None:
        if not transaction.verified:
            _logger.debug("Ignoring unverified ledger update product=%s", transaction.product_id)
            return
        if transaction.product_id in self._product_ids:
            await self.verify()
        try:
            await self._ledger.finish(transaction)
        except Exception:
            _logger.debug("Could not finish transaction %s", transaction.transaction_id, exc_info=True)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    async def verify(self) -> EntitlementState:
        """Enumerate current entitlements and overwrite the state.

        When the ledger cannot be read the previous state is kept.
        A verification that finishes after a later-started one does not
        overwrite the newer result.
        """
        self._issued += 1
        ticket = self._issued
        try:
            transactions = await self._ledger.current_entitlements()
        except Exception:
            _logger.warning("Could not enumerate entitlements; keeping state=%s", self._state, exc_info=True)
            return self._state

        now = self._clock()
        active = any(tx.grants_access(self._product_ids, now) for tx in transactions)
        if ticket < self._applied:
            _logger.debug("Discarding stale verification ticket=%d applied=%d", ticket, self._applied)
            return self._state
        self._applied = ticket
        await self._set_state(EntitlementState.ACTIVE if active else EntitlementState.INACTIVE)
        return self._state

    async def _set_state(self, state: EntitlementState) -> None:
        changed = state != self._state
        self._state = state
        _logger.debug("Entitlement state=%s", state)
        if changed and self._on_change is not None:
            try:
                self._on_change(state)
            except Exception:
                _logger.debug("on_change callback failed", exc_info=True)
        await self._store_hint(state == EntitlementState.ACTIVE)

    async def _load_hint(self) -> None:
        if self._storage is None:
            return
        try:
            value = await self._storage.get(ENTITLEMENT_HINT_KEY)
        except OSError:
            _logger.debug("Could not read entitlement hint", exc_info=True)
            return
        self._cached_hint = value if isinstance(value, bool) else None

    async def _store_hint(self, active: bool) -> None:
        self._cached_hint = active
        if self._storage is None:
            return
        try:
            await self._storage.set(ENTITLEMENT_HINT_KEY, active)
        except OSError:
            _logger.warning("Could not persist entitlement hint", exc_info=True)

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------

    async def load_products(self) -> tuple[StoreProduct, ...]:
        """Fetch display metadata for the configured products."""
        try:
            products = await self._ledger.products(sorted(self._product_ids))
        except Exception:
            _logger.warning("Failed to load products", exc_info=True)
            return self._products
        self._products = tuple(products)
        return self._products

    async def purchase(self, product_id: str) -> PurchaseOutcome:
        """Buy *product_id* and re-verify on verified success.

        Raises
        ------
        ProductNotFoundError
            If *product_id* is not one of the configured products.
        PurchaseError
            If the ledger fails before returning a result.
        """
        if product_id not in self._product_ids:
            raise ProductNotFoundError(f"Unknown product: {product_id}")

        try:
            result = await self._ledger.purchase(product_id)
        except PurchaseError:
            raise
        except Exception as exc:
            raise PurchaseError(f"Purchase of {product_id} failed") from exc

        if result.status == PurchaseStatus.USER_CANCELLED:
            return PurchaseOutcome.CANCELLED
        if result.status == PurchaseStatus.PENDING:
            return PurchaseOutcome.PENDING

        transaction = result.transaction
        if transaction is None or not transaction.verified:
            _logger.warning("Purchase of %s returned an unverified transaction", product_id)
            return PurchaseOutcome.VERIFICATION_FAILED

        try:
            await self._ledger.finish(transaction)
        except Exception:
            _logger.warning("Could not finish transaction %s", transaction.transaction_id, exc_info=True)
        await self.verify()
        return PurchaseOutcome.SUCCESS

    async def restore_purchases(self) -> EntitlementState:
        """Re-check the ledger for a prior purchase of a configured product.

        Raises
        ------
        PurchaseVerificationError
            If a matching transaction fails verification.
        ProductNotFoundError
            If no matching transaction exists.
        """
        transactions = await self._ledger.current_entitlements()
        matching = [tx for tx in transactions if tx.product_id in self._product_ids]
        if not matching:
            raise ProductNotFoundError("No purchase found")
        if not any(tx.verified for tx in matching):
            raise PurchaseVerificationError("Restored purchase failed verification")
        return await self.verify()
