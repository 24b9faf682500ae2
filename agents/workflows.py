"""User-triggered workflows that sit between a front end and the wardrobe state.

Each workflow is what one screen of the app does when the user acts: add an
item from a photo, ask the stylist for an occasion, rate an outfit photo, chat,
or open the dashboard. Blocking gateway and model calls run off the event loop
via ``asyncio.to_thread``. Errors propagate to the caller, except where the
screen itself degrades (chat replies with an apology, the dashboard shows an
empty outfit of the day).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from agents.style_advisor import StyleAdvisor
from aura_app.logging_config import get_logger, log_event, operation_context
from memory.outfit_of_the_day import DEFAULT_CALENDAR, DEFAULT_WEATHER, OutfitOfTheDayCache, OutfitOfTheDayResult
from memory.wardrobe_state import WardrobeState
from models.clothing_item import ClothingDraft, ClothingItem, ItemAnalysis
from models.errors import ValidationError, WardrobeError
from models.outfit import ChatMessage, GeneratedOutfits, Outfit, OutfitCritique
from tools.wardrobe_api import WardrobeApiClient, encode_image_file

logger = get_logger(__name__)

CHAT_GREETING = "Hi! I'm Aura, your personal stylist. Ask me anything about fashion or what to wear!"
CHAT_APOLOGY = "Sorry, I'm having a little trouble right now. Please try again in a moment."


@dataclass
class StylistResult:
    occasion: str
    outfits: List[Outfit]
    must_haves: List[str] = field(default_factory=list)

    def items_for(self, outfit: Outfit, wardrobe: WardrobeState) -> List[ClothingItem]:
        """Resolve an outfit against the wardrobe as it is now."""

        return wardrobe.resolve(outfit.item_ids)


@dataclass
class DashboardView:
    recently_added: List[ClothingItem]
    outfit_of_the_day: OutfitOfTheDayResult
    weather: str
    calendar_events: str
    error: Optional[str] = None


class StyleWorkflows:
    """Composes the wardrobe state, gateway client, advisor and daily cache."""

    def __init__(
        self,
        wardrobe: WardrobeState,
        client: WardrobeApiClient,
        advisor: StyleAdvisor,
        outfit_of_the_day: OutfitOfTheDayCache,
    ) -> None:
        self.wardrobe = wardrobe
        self.client = client
        self.advisor = advisor
        self.outfit_of_the_day = outfit_of_the_day
        self.chat_history: List[ChatMessage] = [ChatMessage(sender="aura", text=CHAT_GREETING)]

    async def analyze_image(self, image_base64: str, mime_type: str) -> ItemAnalysis:
        """Classify through the gateway, falling back to the model directly.

        A rejected payload is not retried on the fallback path.
        """

        try:
            return await asyncio.to_thread(self.client.analyze, image_base64, mime_type)
        except ValidationError:
            raise
        except WardrobeError as exc:
            log_event(
                logger,
                logging.WARNING,
                "gateway_analyze_unavailable",
                error_type=type(exc).__name__,
                error=str(exc),
            )
        return await asyncio.to_thread(self.advisor.analyze_clothing_image, image_base64, mime_type)

    async def save_item(self, draft: ClothingDraft) -> ClothingItem:
        """Persist remotely first; only a persisted item reaches the local state."""

        self.wardrobe.loading = True
        try:
            created = await asyncio.to_thread(self.client.create, draft)
        finally:
            self.wardrobe.loading = False
        self.wardrobe.add(created)
        return created

    async def add_item_from_image(self, image_base64: str, mime_type: str, **overrides: Any) -> ClothingItem:
        """Analyze a photo, apply any user corrections, then save it.

        ``overrides`` are classification fields the user filled in by hand;
        ``None`` values are ignored.
        """

        with operation_context("workflow:add_item"):
            self.wardrobe.loading = True
            try:
                analysis = await self.analyze_image(image_base64, mime_type)
            finally:
                self.wardrobe.loading = False
            try:
                draft = ClothingDraft.from_analysis(analysis, image_base64, mime_type, **overrides)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            return await self.save_item(draft)

    async def add_item_from_file(self, path: str | Path, **overrides: Any) -> ClothingItem:
        image_base64, mime_type = encode_image_file(path)
        return await self.add_item_from_image(image_base64, mime_type, **overrides)

    def delete_item(self, item_id: str | int) -> Optional[asyncio.Task]:
        return self.wardrobe.delete(item_id)

    async def style_for_occasion(self, occasion: str, constraints: str = "") -> StylistResult:
        if not occasion.strip():
            raise ValidationError("Please describe the occasion.")
        with operation_context("workflow:style_for_occasion"):
            generated: GeneratedOutfits = await asyncio.to_thread(
                self.advisor.generate_outfits, list(self.wardrobe.items), occasion.strip(), constraints
            )
        return StylistResult(occasion=occasion.strip(), outfits=generated.outfits, must_haves=generated.must_haves)

    async def suggest_must_haves(self, occasion: str) -> List[str]:
        return await asyncio.to_thread(self.advisor.enhance_outfits, list(self.wardrobe.items), occasion)

    async def styleboard(self, outfit: Outfit) -> str:
        items = self.wardrobe.resolve(outfit.item_ids)
        if not items:
            raise ValidationError("None of this outfit's items are in the wardrobe anymore.")
        return await asyncio.to_thread(self.advisor.generate_styleboard, items)

    async def rate_outfit(self, image_base64: str, mime_type: str) -> OutfitCritique:
        return await asyncio.to_thread(self.advisor.rate_outfit, image_base64, mime_type)

    async def rate_outfit_file(self, path: str | Path) -> OutfitCritique:
        image_base64, mime_type = encode_image_file(path)
        return await self.rate_outfit(image_base64, mime_type)

    async def chat(self, message: str) -> ChatMessage:
        """Append a user turn and Aura's reply; failures become an apology turn."""

        if not message.strip():
            raise ValidationError("Message is empty.")
        self.chat_history.append(ChatMessage(sender="user", text=message.strip()))
        try:
            text = await asyncio.to_thread(self.advisor.chat, message.strip(), list(self.wardrobe.items))
            reply = ChatMessage(sender="aura", text=text)
        except WardrobeError as exc:
            reply = ChatMessage(sender="aura", text=CHAT_APOLOGY, error=str(exc))
        self.chat_history.append(reply)
        return reply

    async def dashboard(
        self,
        weather: str = DEFAULT_WEATHER,
        calendar_events: str = DEFAULT_CALENDAR,
        regenerate: bool = False,
    ) -> DashboardView:
        recent = self.wardrobe.recently_added(5)
        try:
            if regenerate:
                result = await self.outfit_of_the_day.regenerate(self.wardrobe, weather, calendar_events)
            else:
                result = await self.outfit_of_the_day.get_suggestion(self.wardrobe, weather, calendar_events)
        except WardrobeError as exc:
            log_event(logger, logging.ERROR, "ootd_generation_failed", error=str(exc))
            return DashboardView(
                recently_added=recent,
                outfit_of_the_day=OutfitOfTheDayResult(source="empty"),
                weather=weather,
                calendar_events=calendar_events,
                error=str(exc),
            )
        return DashboardView(
            recently_added=recent,
            outfit_of_the_day=result,
            weather=weather,
            calendar_events=calendar_events,
        )


__all__ = ["StyleWorkflows", "StylistResult", "DashboardView", "CHAT_GREETING", "CHAT_APOLOGY"]
