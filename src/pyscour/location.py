"""Device location stream with distance/time filtering."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from pyscour.geo import Coordinate, distance_meters

_logger = logging.getLogger(__name__)


class LocationAuthorization(StrEnum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED = "authorized"


@dataclass(frozen=True, slots=True)
class LocationFix:
    """A single platform location reading."""

    coordinate: Coordinate
    accuracy_m: float | None = None
    timestamp: float = field(default_factory=time.monotonic)


class PlatformLocationSource(Protocol):
    """Platform location API.

    Callbacks may be invoked from any thread.
    """

    def start(
        self,
        on_fix: Callable[[LocationFix], None],
        on_authorization: Callable[[LocationAuthorization], None],
    ) -> None:
        ...

    def stop(self) -> None:
        ...


class LocationProvider:
    """Filter platform fixes and deliver them on the owning event loop.

    A fix is delivered when the device moved at least ``distance_filter_m``
    since the last delivered fix, or ``min_interval_s`` has elapsed.
    """

    def __init__(
        self,
        source: PlatformLocationSource,
        *,
        distance_filter_m: float = 10.0,
        min_interval_s: float = 60.0,
        on_location: Callable[[LocationFix], None] | None = None,
    ) -> None:
        self._source = source
        self._distance_filter_m = distance_filter_m
        self._min_interval_s = min_interval_s
        self._on_location = on_location
        self._loop: asyncio.AbstractEventLoop | None = None
        self._location: LocationFix | None = None
        self._authorization = LocationAuthorization.NOT_DETERMINED
        self._waiters: list[asyncio.Future[LocationFix]] = []
        self._running = False

    @property
    def location(self) -> LocationFix | None:
        return self._location

    @property
    def coordinate(self) -> Coordinate | None:
        return self._location.coordinate if self._location is not None else None

    @property
    def authorization(self) -> LocationAuthorization:
        return self._authorization

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Begin receiving fixes; must be called on the owning loop."""
        if self._running:
            return
        self._loop = asyncio.get_running_loop()
        self._running = True
        self._source.start(self._post_fix, self._post_authorization)
        _logger.debug("Location updates started")

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._source.stop()
        for waiter in self._waiters:
            if not waiter.done():
                waiter.cancel()
        self._waiters.clear()
        _logger.debug("Location updates stopped")

    # Platform threads → owner loop

    def _post_fix(self, fix: LocationFix) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._on_fix, fix)

    def _post_authorization(self, status: LocationAuthorization) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._on_authorization, status)

    # Owner loop only

    def _should_deliver(self, fix: LocationFix) -> bool:
        last = self._location
        if last is None:
            return True
        if distance_meters(last.coordinate, fix.coordinate) >= self._distance_filter_m:
            return True
        return fix.timestamp - last.timestamp >= self._min_interval_s

    def _on_fix(self, fix: LocationFix) -> None:
        if not self._running or not self._should_deliver(fix):
            return
        self._location = fix
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(fix)
        if self._on_location is not None:
            try:
                self._on_location(fix)
            except Exception:
                _logger.debug("on_location callback failed", exc_info=True)

    def _on_authorization(self, status: LocationAuthorization) -> None:
        _logger.debug("Location authorization=%s", status)
        self._authorization = status

    async def wait_for_fix(self, timeout: float | None = None) -> LocationFix | None:
        """Current fix, or the next delivered one; ``None`` on timeout."""
        if self._location is not None:
            return self._location
        loop = self._loop or asyncio.get_running_loop()
        future: asyncio.Future[LocationFix] = loop.create_future()
        self._waiters.append(future)
        try:
            return await asyncio.wait_for(future, timeout)
        except TimeoutError:
            return None
        finally:
            if future in self._waiters:
                self._waiters.remove(future)
