"""Outfit of the day cache: once-per-day generation and stale entry handling."""

from __future__ import annotations

import asyncio
import threading
from datetime import date
from pathlib import Path
from typing import List, Sequence

import pytest

from conftest import FakeBackend, make_item
from memory.local_storage import LocalStorage
from memory.outfit_of_the_day import STORAGE_KEY, OutfitOfTheDayCache
from memory.wardrobe_state import WardrobeState
from models.clothing_item import ClothingItem
from models.errors import ServiceUnavailable
from models.outfit import OutfitOfTheDaySuggestion

TODAY = date(2026, 10, 19)


class CountingAdvisor:
    def __init__(self, item_ids: Sequence[str] = ("1", "2"), error: Exception | None = None) -> None:
        self.item_ids = list(item_ids)
        self.error = error
        self.calls: List[tuple] = []

    def generate_outfit_of_the_day(
        self, items: Sequence[ClothingItem], weather: str, calendar_events: str
    ) -> OutfitOfTheDaySuggestion:
        self.calls.append((len(items), weather, calendar_events))
        if self.error is not None:
            raise self.error
        return OutfitOfTheDaySuggestion(item_ids=list(self.item_ids), reasoning=f"Suggestion {len(self.calls)}")


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "profile")


@pytest.fixture
def wardrobe() -> WardrobeState:
    return WardrobeState(FakeBackend())


def test_same_day_requests_call_the_advisor_once(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    advisor = CountingAdvisor()
    cache = OutfitOfTheDayCache(storage, advisor, today=lambda: TODAY)

    first = asyncio.run(cache.get_suggestion(wardrobe))
    second = asyncio.run(cache.get_suggestion(wardrobe))

    assert len(advisor.calls) == 1
    assert first.source == "generated"
    assert second.source == "cache"
    assert second.reasoning == "Suggestion 1"
    assert [item.id for item in second.items] == ["1", "2"]


def test_entry_from_an_earlier_day_is_regenerated(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    storage.set_json(STORAGE_KEY, {"itemIds": ["4"], "reasoning": "Yesterday", "date": "2026-10-18"})
    advisor = CountingAdvisor(item_ids=["3"])
    cache = OutfitOfTheDayCache(storage, advisor, today=lambda: TODAY)

    result = asyncio.run(cache.get_suggestion(wardrobe, "Rainy, 12°C", "Dentist at 3pm"))

    assert len(advisor.calls) == 1
    assert advisor.calls[0] == (4, "Rainy, 12°C", "Dentist at 3pm")
    assert result.source == "generated"
    assert storage.get_json(STORAGE_KEY) == {"itemIds": ["3"], "reasoning": "Suggestion 1", "date": "2026-10-19"}


def test_empty_wardrobe_never_calls_the_advisor(storage: LocalStorage) -> None:
    advisor = CountingAdvisor()
    cache = OutfitOfTheDayCache(storage, advisor, today=lambda: TODAY)
    empty = WardrobeState(FakeBackend(), seed=[])

    result = asyncio.run(cache.get_suggestion(empty))

    assert result.source == "empty"
    assert result.is_empty
    assert advisor.calls == []
    assert storage.get_item(STORAGE_KEY) is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        '{"itemIds": "1", "reasoning": "bad", "date": "2026-10-19"}',
        '{"reasoning": "missing ids", "date": "2026-10-19"}',
        "[1, 2, 3]",
    ],
)
def test_malformed_entries_count_as_a_miss(storage: LocalStorage, wardrobe: WardrobeState, raw: str) -> None:
    storage.set_item(STORAGE_KEY, raw)
    advisor = CountingAdvisor()
    cache = OutfitOfTheDayCache(storage, advisor, today=lambda: TODAY)

    result = asyncio.run(cache.get_suggestion(wardrobe))

    assert result.source == "generated"
    assert len(advisor.calls) == 1


def test_cached_ids_of_deleted_items_are_dropped(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    storage.set_json(STORAGE_KEY, {"itemIds": [1, "2", "99"], "reasoning": "Layers", "date": "2026-10-19"})
    cache = OutfitOfTheDayCache(storage, CountingAdvisor(), today=lambda: TODAY)
    wardrobe.delete("2")

    result = asyncio.run(cache.get_suggestion(wardrobe))

    assert result.source == "cache"
    assert [item.id for item in result.items] == ["1"]


def test_regenerate_overwrites_todays_entry(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    advisor = CountingAdvisor()
    cache = OutfitOfTheDayCache(storage, advisor, today=lambda: TODAY)

    asyncio.run(cache.get_suggestion(wardrobe))
    result = asyncio.run(cache.regenerate(wardrobe))

    assert len(advisor.calls) == 2
    assert result.source == "generated"
    assert cache.cached_for_today().reasoning == "Suggestion 2"


def test_advisor_failure_propagates_and_leaves_cache_alone(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    cache = OutfitOfTheDayCache(storage, CountingAdvisor(error=ServiceUnavailable("quota")), today=lambda: TODAY)

    with pytest.raises(ServiceUnavailable):
        asyncio.run(cache.get_suggestion(wardrobe))
    assert storage.get_item(STORAGE_KEY) is None


def test_only_the_latest_generation_writes_the_slot(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    gate = threading.Event()

    class GatedAdvisor:
        def generate_outfit_of_the_day(self, items, weather, calendar_events):
            if weather == "first":
                gate.wait(5)
            return OutfitOfTheDaySuggestion(item_ids=["1"], reasoning=weather)

    cache = OutfitOfTheDayCache(storage, GatedAdvisor(), today=lambda: TODAY)

    async def scenario() -> tuple:
        first = asyncio.create_task(cache.regenerate(wardrobe, weather="first"))
        await asyncio.sleep(0)
        second = await cache.regenerate(wardrobe, weather="second")
        gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first.reasoning == "first"
    assert second.reasoning == "second"
    assert cache.cached_for_today().reasoning == "second"


def test_clear_removes_the_entry(storage: LocalStorage, wardrobe: WardrobeState) -> None:
    cache = OutfitOfTheDayCache(storage, CountingAdvisor(), today=lambda: TODAY)
    asyncio.run(cache.get_suggestion(wardrobe))

    cache.clear()

    assert cache.read() is None
