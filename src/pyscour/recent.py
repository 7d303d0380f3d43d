"""Bounded, deduplicated list of recent address searches."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pyscour._constants import MAX_RECENT_SEARCHES, RECENT_SEARCHES_KEY
from pyscour.models.recent import RecentSearchEntry
from pyscour.storage import KeyValueStorage

_logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(list[RecentSearchEntry])


class RecentSearchStore:
    """Most-recent-first list of resolved searches, persisted on every change.

    The store is the only writer of its list; callers receive immutable
    tuples. Use :meth:`open` to restore persisted state.
    """

    def __init__(self, storage: KeyValueStorage, *, capacity: int = MAX_RECENT_SEARCHES) -> None:
        self._storage = storage
        self._capacity = capacity
        self._entries: list[RecentSearchEntry] = []

    @classmethod
    async def open(cls, storage: KeyValueStorage, *, capacity: int = MAX_RECENT_SEARCHES) -> RecentSearchStore:
        store = cls(storage, capacity=capacity)
        await store.load()
        return store

    @property
    def entries(self) -> tuple[RecentSearchEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    async def load(self) -> None:
        """Restore persisted entries; missing or corrupt data yields an empty list."""
        try:
            raw: Any = await self._storage.get(RECENT_SEARCHES_KEY)
        except OSError:
            _logger.warning("Could not read recent searches", exc_info=True)
            raw = None
        if raw is None:
            self._entries = []
            return
        try:
            entries = _ENTRY_LIST.validate_python(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable recent searches")
            entries = []
        self._entries = entries[: self._capacity]
        _logger.debug("Loaded %d recent searches", len(self._entries))

    async def add(
        self,
        main_text: str,
        sub_text: str,
        jurisdiction: str | None = None,
        postal_code: str | None = None,
    ) -> RecentSearchEntry:
        """Insert at the front, replacing an entry with the same texts."""
        entry = RecentSearchEntry(
            main_text=main_text,
            sub_text=sub_text,
            jurisdiction=jurisdiction,
            postal_code=postal_code,
        )
        entries = [e for e in self._entries if e.key != entry.key]
        entries.insert(0, entry)
        self._entries = entries[: self._capacity]
        await self._persist()
        return entry

    async def clear(self) -> None:
        self._entries = []
        await self._persist()

    async def _persist(self) -> None:
        data = _ENTRY_LIST.dump_python(self._entries, mode="json", by_alias=True)
        try:
            await self._storage.set(RECENT_SEARCHES_KEY, data)
        except OSError:
            _logger.warning("Could not persist recent searches", exc_info=True)
