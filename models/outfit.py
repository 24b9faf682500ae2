"""Outfit, critique and chat payloads produced by the advisory service.

None of these are persisted by the gateway; they only travel between the
advisory calls and whatever renders them. ``OutfitOfTheDay`` is the one
exception and lives in local storage, see :mod:`memory.outfit_of_the_day`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional


def _ids(values: Any) -> List[str]:
    return [str(value) for value in (values or [])]


def _strings(values: Any) -> List[str]:
    return [str(value) for value in (values or []) if str(value).strip()]


@dataclass
class Outfit:
    name: str
    item_ids: List[str]
    reasoning: str = ""
    styling_tips: str = ""
    accessories: str = ""
    vibe: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Outfit":
        return cls(
            name=str(payload.get("name", "")),
            item_ids=_ids(payload.get("itemIds")),
            reasoning=str(payload.get("reasoning", "")),
            styling_tips=str(payload.get("stylingTips", "")),
            accessories=str(payload.get("accessories", "")),
            vibe=str(payload.get("vibe", "")),
        )


@dataclass
class GeneratedOutfits:
    outfits: List[Outfit] = field(default_factory=list)
    must_haves: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GeneratedOutfits":
        return cls(
            outfits=[Outfit.from_payload(raw) for raw in payload.get("outfits") or []],
            must_haves=_strings(payload.get("mustHaves")),
        )


@dataclass
class OutfitOfTheDaySuggestion:
    item_ids: List[str]
    reasoning: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OutfitOfTheDaySuggestion":
        return cls(item_ids=_ids(payload.get("itemIds")), reasoning=str(payload.get("reasoning", "")))


@dataclass
class OutfitOfTheDay(OutfitOfTheDaySuggestion):
    """A suggestion tagged with the calendar day (``YYYY-MM-DD``) it was made for."""

    date: str = ""

    def to_storage(self) -> Dict[str, Any]:
        return {"itemIds": list(self.item_ids), "reasoning": self.reasoning, "date": self.date}


@dataclass
class OutfitCritique:
    headline: str
    overall_rating: float
    what_works: List[str] = field(default_factory=list)
    what_to_improve: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OutfitCritique":
        return cls(
            headline=str(payload.get("headline", "")),
            overall_rating=float(payload.get("overall_rating", 0.0)),
            what_works=_strings(payload.get("what_works")),
            what_to_improve=_strings(payload.get("what_to_improve")),
        )


@dataclass
class ChatMessage:
    sender: Literal["user", "aura"]
    text: str
    error: Optional[str] = None


__all__ = [
    "Outfit",
    "GeneratedOutfits",
    "OutfitOfTheDaySuggestion",
    "OutfitOfTheDay",
    "OutfitCritique",
    "ChatMessage",
]
