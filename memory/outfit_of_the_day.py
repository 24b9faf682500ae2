"""Daily cache for the AI-composed outfit of the day.

One entry lives in local storage under a fixed key and is rewritten wholesale
on every generation. An entry only counts as a hit when it is well shaped and
was written for today's UTC calendar day. Item ids are resolved against the
wardrobe when the result is built, so items deleted since caching simply drop
out of the rendered set.

Overlapping generations (for example two quick regenerate clicks) are ordered
by a write sequence: only the most recently issued request may write the slot.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, List, Literal, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, ValidationError

from aura_app.logging_config import get_logger, log_event
from memory.local_storage import LocalStorage
from memory.wardrobe_state import WardrobeState
from models.clothing_item import ClothingItem
from models.outfit import OutfitOfTheDay, OutfitOfTheDaySuggestion

logger = get_logger(__name__)

STORAGE_KEY = "outfitOfTheDay"
DEFAULT_WEATHER = "Sunny, 22°C"
DEFAULT_CALENDAR = "Team Lunch at Noon"


class OutfitOfTheDayAdvisor(Protocol):
    def generate_outfit_of_the_day(
        self, items: Sequence[ClothingItem], weather: str, calendar_events: str
    ) -> OutfitOfTheDaySuggestion: ...


class _StoredOutfitOfTheDay(BaseModel):
    """Shape check for whatever is found in local storage."""

    itemIds: List[Union[str, int]]
    reasoning: str
    date: str


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class OutfitOfTheDayResult:
    source: Literal["cache", "generated", "empty"]
    entry: Optional[OutfitOfTheDay] = None
    items: List[ClothingItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def reasoning(self) -> str:
        return self.entry.reasoning if self.entry else ""


class OutfitOfTheDayCache:
    """Serve one suggestion per day, generating it at most once unless forced."""

    def __init__(
        self,
        storage: LocalStorage,
        advisor: OutfitOfTheDayAdvisor,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.storage = storage
        self.advisor = advisor
        self._today = today
        self._issued = 0

    def today_key(self) -> str:
        return self._today().isoformat()

    def read(self) -> Optional[OutfitOfTheDay]:
        """Return the stored entry if it is well shaped, whatever its date."""

        raw = self.storage.get_json(STORAGE_KEY)
        if raw is None:
            return None
        try:
            stored = _StoredOutfitOfTheDay.model_validate(raw)
        except ValidationError:
            log_event(logger, logging.INFO, "ootd_cache_malformed")
            return None
        return OutfitOfTheDay(
            item_ids=[str(item_id) for item_id in stored.itemIds],
            reasoning=stored.reasoning,
            date=stored.date,
        )

    def cached_for_today(self) -> Optional[OutfitOfTheDay]:
        entry = self.read()
        if entry is None or entry.date != self.today_key():
            return None
        return entry

    def clear(self) -> None:
        self.storage.remove_item(STORAGE_KEY)

    async def get_suggestion(
        self,
        wardrobe: WardrobeState,
        weather: str = DEFAULT_WEATHER,
        calendar_events: str = DEFAULT_CALENDAR,
    ) -> OutfitOfTheDayResult:
        """Serve today's cached suggestion or generate a new one.

        An empty wardrobe short-circuits to an empty result without touching
        the advisor or the cache. Advisory failures propagate to the caller.
        """

        if len(wardrobe) == 0:
            return OutfitOfTheDayResult(source="empty")

        cached = self.cached_for_today()
        if cached is not None:
            log_event(logger, logging.DEBUG, "ootd_cache_hit", date=cached.date)
            return OutfitOfTheDayResult(source="cache", entry=cached, items=wardrobe.resolve(cached.item_ids))

        return await self._generate(wardrobe, weather, calendar_events)

    async def regenerate(
        self,
        wardrobe: WardrobeState,
        weather: str = DEFAULT_WEATHER,
        calendar_events: str = DEFAULT_CALENDAR,
    ) -> OutfitOfTheDayResult:
        """Always ask the advisor again and overwrite today's slot."""

        if len(wardrobe) == 0:
            return OutfitOfTheDayResult(source="empty")
        return await self._generate(wardrobe, weather, calendar_events)

    async def _generate(self, wardrobe: WardrobeState, weather: str, calendar_events: str) -> OutfitOfTheDayResult:
        self._issued += 1
        ticket = self._issued
        day_key = self.today_key()

        suggestion = await asyncio.to_thread(
            self.advisor.generate_outfit_of_the_day, list(wardrobe.items), weather, calendar_events
        )
        entry = OutfitOfTheDay(item_ids=list(suggestion.item_ids), reasoning=suggestion.reasoning, date=day_key)

        if ticket == self._issued:
            self.storage.set_json(STORAGE_KEY, entry.to_storage())
            log_event(logger, logging.INFO, "ootd_cache_written", date=day_key, item_count=len(entry.item_ids))
        else:
            log_event(logger, logging.INFO, "ootd_result_superseded", ticket=ticket, latest=self._issued)

        return OutfitOfTheDayResult(source="generated", entry=entry, items=wardrobe.resolve(entry.item_ids))


__all__ = [
    "STORAGE_KEY",
    "OutfitOfTheDayCache",
    "OutfitOfTheDayResult",
    "utc_today",
]
