from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from pyscour._constants import RECENT_SEARCHES_KEY
from pyscour.recent import RecentSearchStore
from pyscour.storage import JsonFileStorage, MemoryStorage


@pytest.mark.asyncio
async def test_add_inserts_most_recent_first() -> None:
    store = await RecentSearchStore.open(MemoryStorage())

    await store.add("100 Main St", "Boise, ID", "ID", "83702")
    await store.add("200 Oak Ave", "Meridian, ID", "ID", "83642")

    assert [e.main_text for e in store.entries] == ["200 Oak Ave", "100 Main St"]
    assert store.entries[1].postal_code == "83702"


@pytest.mark.asyncio
async def test_duplicate_moves_to_front_without_growing() -> None:
    store = await RecentSearchStore.open(MemoryStorage())
    await store.add("100 Main St", "Boise, ID")
    await store.add("200 Oak Ave", "Meridian, ID")

    await store.add("100 Main St", "Boise, ID")

    assert len(store) == 2
    assert [e.main_text for e in store.entries] == ["100 Main St", "200 Oak Ave"]


@pytest.mark.asyncio
async def test_same_main_text_with_different_sub_text_is_distinct() -> None:
    store = await RecentSearchStore.open(MemoryStorage())
    await store.add("100 Main St", "Boise, ID")
    await store.add("100 Main St", "Nampa, ID")

    assert len(store) == 2


@pytest.mark.asyncio
async def test_capacity_drops_oldest_entry() -> None:
    store = await RecentSearchStore.open(MemoryStorage())

    for i in range(11):
        await store.add(f"Place {i}", "Boise, ID")

    assert len(store) == 10
    assert store.entries[0].main_text == "Place 10"
    assert "Place 0" not in [e.main_text for e in store.entries]


@pytest.mark.asyncio
async def test_entries_persist_with_camel_case_keys() -> None:
    storage = MemoryStorage()
    store = await RecentSearchStore.open(storage)
    entry = await store.add("100 Main St", "Boise, ID", "ID", "83702")

    stored = await storage.get(RECENT_SEARCHES_KEY)
    assert stored[0]["mainText"] == "100 Main St"
    assert stored[0]["subText"] == "Boise, ID"
    assert stored[0]["postalCode"] == "83702"

    reopened = await RecentSearchStore.open(storage)
    assert reopened.entries == (entry,)


@pytest.mark.asyncio
async def test_entries_without_region_from_older_versions_load() -> None:
    storage = MemoryStorage({RECENT_SEARCHES_KEY: [{"id": "a1", "mainText": "100 Main St", "subText": "Boise, ID"}]})

    store = await RecentSearchStore.open(storage)

    assert len(store) == 1
    assert store.entries[0].jurisdiction is None
    assert store.entries[0].text == "Boise, ID"


@pytest.mark.asyncio
@pytest.mark.parametrize("blob", ["not a list", [{"unexpected": 1}], 42])
async def test_corrupt_blob_loads_as_empty(blob: object) -> None:
    store = await RecentSearchStore.open(MemoryStorage({RECENT_SEARCHES_KEY: blob}))

    assert store.entries == ()


@pytest.mark.asyncio
async def test_clear_persists_empty_list() -> None:
    storage = MemoryStorage()
    store = await RecentSearchStore.open(storage)
    await store.add("100 Main St", "Boise, ID")

    await store.clear()

    assert len(store) == 0
    assert await storage.get(RECENT_SEARCHES_KEY) == []


@pytest.mark.asyncio
async def test_json_file_storage_round_trips_and_ignores_corruption(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    store = await RecentSearchStore.open(storage)
    assert store.entries == ()

    await store.add("100 Main St", "Boise, ID", "ID", "83702")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data[RECENT_SEARCHES_KEY][0]["mainText"] == "100 Main St"

    reopened = await RecentSearchStore.open(JsonFileStorage(path))
    assert [e.main_text for e in reopened.entries] == ["100 Main St"]


class _ReadOnlyStorage(MemoryStorage):
    async def set(self, key: str, value: object) -> None:
        raise OSError(30, "Read-only file system")


@pytest.mark.asyncio
async def test_failed_persist_keeps_entries_in_memory() -> None:
    store = await RecentSearchStore.open(_ReadOnlyStorage())

    entry = await store.add("100 Main St", "Boise, ID", "ID", "83702")
    await store.add("200 Oak Ave", "Meridian, ID")

    assert [e.main_text for e in store.entries] == ["200 Oak Ave", entry.main_text]


@pytest.mark.asyncio
async def test_json_file_storage_concurrent_sets_keep_every_key(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "state.json")
    keys = [f"key-{i}" for i in range(20)]

    await asyncio.gather(*(storage.set(key, i) for i, key in enumerate(keys)))

    data = json.loads(storage.path.read_text(encoding="utf-8"))
    assert data == {key: i for i, key in enumerate(keys)}
    assert await storage.get("key-7") == 7
