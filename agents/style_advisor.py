"""Gemini-backed advisory service: classification, styling, critique and chat.

Every operation is a single ``generate_content`` call. Structured operations
pin the response to a JSON schema built from :mod:`models.taxonomy`, and the
decoded payload is turned into the matching model class. Anything that goes
wrong on the model side (missing key, SDK error, unparsable output) surfaces as
:class:`models.errors.ServiceUnavailable`.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import google.generativeai as genai
import requests

from aura_app.config import AuraConfig
from aura_app.logging_config import get_logger, log_event
from logic.safety import chat_persona, system_instruction
from models.clothing_item import ClothingItem, ItemAnalysis
from models.errors import ServiceUnavailable, ValidationError
from models.outfit import GeneratedOutfits, OutfitCritique, OutfitOfTheDaySuggestion
from models.taxonomy import CATEGORIES, NULL_PATTERN, PATTERNS, SEASONS, STYLES
from tools.observability import instrument_call

logger = get_logger(__name__)

ModelFactory = Callable[..., Any]


def _string(description: str | None = None, enum: Sequence[str] | None = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "STRING"}
    if description:
        schema["description"] = description
    if enum:
        schema["format"] = "enum"
        schema["enum"] = list(enum)
    return schema


def _string_list(description: str) -> Dict[str, Any]:
    return {"type": "ARRAY", "items": {"type": "STRING"}, "description": description}


ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "category": _string(enum=CATEGORIES),
        "color": _string("The dominant color of the item (e.g., 'Navy Blue', 'Red', 'Beige')"),
        "pattern": _string(enum=PATTERNS + [NULL_PATTERN]),
        "style": _string(enum=STYLES),
        "season": _string(enum=SEASONS),
        "description": _string("A 2-5 word description (e.g., 'Blue Denim Jeans', 'Floral Off-Shoulder Top')"),
    },
    "required": ["category", "color", "pattern", "style", "season", "description"],
}

OUTFITS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "outfits": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": _string("distinct outfit name"),
                    "itemIds": _string_list("IDs of the wardrobe items in this outfit"),
                    "reasoning": _string("how color, culture or tradition fit the occasion"),
                    "stylingTips": _string("concise, actionable advice for wearing and combining pieces"),
                    "accessories": _string("specific accessories to elevate the look"),
                    "vibe": _string("clear description of the overall effect"),
                },
                "required": ["name", "itemIds", "reasoning", "stylingTips", "accessories", "vibe"],
            },
        },
        "mustHaves": _string_list("essential wardrobe items if the current wardrobe is lacking"),
    },
    "required": ["outfits"],
}

MUST_HAVES_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"mustHaves": _string_list("Essential wardrobe items to purchase.")},
    "required": ["mustHaves"],
}

OUTFIT_OF_THE_DAY_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "itemIds": _string_list("IDs of the clothing items that make up the outfit."),
        "reasoning": _string("A 1-2 sentence explanation of why this outfit suits today's weather and events."),
    },
    "required": ["itemIds", "reasoning"],
}

CRITIQUE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "headline": _string("A catchy, descriptive headline for the outfit review."),
        "overall_rating": {"type": "NUMBER", "description": "A numerical rating for the outfit out of 10."},
        "what_works": _string_list("Positive aspects of the outfit."),
        "what_to_improve": _string_list("Constructive suggestions for improvement."),
    },
    "required": ["headline", "overall_rating", "what_works", "what_to_improve"],
}


def describe_items(items: Sequence[ClothingItem], with_ids: bool = True) -> str:
    lines = []
    for item in items:
        summary = f"{item.description} ({item.category}, {item.color}, {item.style})"
        lines.append(f"ID {item.id}: {summary}" if with_ids else f"- {summary}")
    return "\n".join(lines)


def _strip_fences(text: str) -> str:
    return text.strip().replace("```json", "").replace("```", "").strip()


class StyleAdvisor:
    """Thin wrapper around the Gemini SDK for every advisory workflow."""

    def __init__(self, config: AuraConfig, model_factory: Optional[ModelFactory] = None) -> None:
        self.config = config
        self._model_factory = model_factory
        self._configured = False

    @property
    def available(self) -> bool:
        return bool(self.config.gemini_api_key)

    def _model(self, model_name: str, instruction: Optional[str] = None) -> Any:
        if not self.config.gemini_api_key:
            raise ServiceUnavailable("Server missing GEMINI_API_KEY environment variable")
        if self._model_factory is not None:
            return self._model_factory(model_name, system_instruction=instruction)
        if not self._configured:
            genai.configure(api_key=self.config.gemini_api_key)
            self._configured = True
        return genai.GenerativeModel(model_name, system_instruction=instruction)

    def _generate_text(self, operation: str, contents: Any, instruction: Optional[str] = None, **kwargs: Any) -> str:
        model = self._model(self.config.model, instruction)
        try:
            response = model.generate_content(contents, **kwargs)
            return response.text
        except Exception as exc:
            log_event(logger, logging.ERROR, "advisor_call_failed", operation=operation, error=str(exc))
            raise ServiceUnavailable(f"{operation} failed: {exc}") from exc

    def _generate_json(
        self, operation: str, contents: Any, schema: Dict[str, Any], instruction: Optional[str] = None
    ) -> Dict[str, Any]:
        text = self._generate_text(
            operation,
            contents,
            instruction,
            generation_config={"response_mime_type": "application/json", "response_schema": schema},
        )
        try:
            payload = json.loads(_strip_fences(text))
        except (TypeError, ValueError) as exc:
            raise ServiceUnavailable(f"{operation} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise ServiceUnavailable(f"{operation} returned {type(payload).__name__}, expected an object")
        return payload

    @staticmethod
    def _inline_image(image_base64: str, mime_type: str) -> Dict[str, Any]:
        try:
            data = base64.b64decode(image_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("Image payload is not valid base64") from exc
        return {"mime_type": mime_type, "data": data}

    def _item_image(self, item: ClothingItem) -> Dict[str, Any]:
        if not item.image_is_url:
            return self._inline_image(item.image_ref, item.mime_type)
        try:
            response = requests.get(item.image_ref, timeout=self.config.request_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ServiceUnavailable(f"Could not load image for item {item.id}: {exc}") from exc
        mime_type = response.headers.get("Content-Type", item.mime_type).split(";")[0]
        return {"mime_type": mime_type, "data": response.content}

    @instrument_call("advisor.analyze_clothing_image")
    def analyze_clothing_image(self, image_base64: str, mime_type: str) -> ItemAnalysis:
        prompt = (
            "You are an expert fashion cataloging AI. Analyze the provided image of a clothing item "
            "and return a single JSON object with the specified schema. Return *only* the JSON object."
        )
        payload = self._generate_json(
            "Analyze image", [prompt, self._inline_image(image_base64, mime_type)], ANALYSIS_SCHEMA
        )
        try:
            return ItemAnalysis.from_payload(payload)
        except ValueError as exc:
            raise ServiceUnavailable(f"Analyze image returned an unusable classification: {exc}") from exc

    @instrument_call("advisor.generate_outfits")
    def generate_outfits(self, items: Sequence[ClothingItem], occasion: str, constraints: str = "") -> GeneratedOutfits:
        prompt = (
            "You are a creative professional fashion stylist with deep knowledge of color theory, cultural "
            "backgrounds and traditional attire. Given the available wardrobe, suggest outfits suitable "
            f'for "{occasion}".\n\n'
            f"Available wardrobe items:\n{describe_items(items)}\n\n"
            f"{'Constraints: ' + constraints if constraints else ''}\n\n"
            "Create exactly 2 outfit suggestions, choosing *only* from the items above."
        )
        payload = self._generate_json(
            "Generate outfits", prompt, OUTFITS_SCHEMA, system_instruction("outfit stylist")
        )
        return GeneratedOutfits.from_payload(payload)

    @instrument_call("advisor.enhance_outfits")
    def enhance_outfits(self, items: Sequence[ClothingItem], occasion: str) -> List[str]:
        """Suggest up to three purchases that would round out the wardrobe for an occasion."""

        prompt = (
            f'A user needs outfit ideas for "{occasion}".\n\n'
            f"Their current wardrobe contains:\n{describe_items(items, with_ids=False)}\n\n"
            'Suggest up to 3 specific "must-have" items they could purchase to enhance their wardrobe '
            "for this and similar occasions."
        )
        payload = self._generate_json(
            "Enhance outfits", prompt, MUST_HAVES_SCHEMA, system_instruction("personal shopper")
        )
        return [str(entry) for entry in payload.get("mustHaves") or []][:3]

    @instrument_call("advisor.generate_outfit_of_the_day")
    def generate_outfit_of_the_day(
        self, items: Sequence[ClothingItem], weather: str, calendar_events: str
    ) -> OutfitOfTheDaySuggestion:
        prompt = (
            'Suggest a single, complete and stylish "Outfit of the Day".\n\n'
            f"**Today's Weather:**\n{weather}\n\n"
            f"**Today's Schedule:**\n{calendar_events}\n\n"
            f"**User's Wardrobe:**\n{describe_items(items)}\n\n"
            "The reasoning should be a short, encouraging sentence explaining why this outfit is a great "
            "choice for today."
        )
        payload = self._generate_json(
            "Generate Outfit of the Day",
            prompt,
            OUTFIT_OF_THE_DAY_SCHEMA,
            system_instruction("proactive personal stylist"),
        )
        return OutfitOfTheDaySuggestion.from_payload(payload)

    @instrument_call("advisor.rate_outfit")
    def rate_outfit(self, image_base64: str, mime_type: str) -> OutfitCritique:
        prompt = (
            "You are a professional, constructive and encouraging fashion critic. Analyze the outfit in the "
            "image and return a critique with a catchy headline, an overall rating out of 10 (decimals "
            "allowed), a list of things that work well and a list of actionable improvements."
        )
        payload = self._generate_json(
            "Rate outfit", [prompt, self._inline_image(image_base64, mime_type)], CRITIQUE_SCHEMA
        )
        try:
            return OutfitCritique.from_payload(payload)
        except (TypeError, ValueError) as exc:
            raise ServiceUnavailable(f"Rate outfit returned an unusable critique: {exc}") from exc

    @instrument_call("advisor.chat")
    def chat(self, message: str, wardrobe: Sequence[ClothingItem] = ()) -> str:
        context = ""
        if wardrobe:
            owned = ", ".join(f"{item.description} ({item.category} in {item.color})" for item in wardrobe)
            context = f"\n\nUser's wardrobe includes: {owned}"
        prompt = f"{chat_persona()}{context}\n\n**CONVERSATION:**\nUser: {message}\nAura:"
        return self._generate_text("Chat", prompt).strip()

    @instrument_call("advisor.generate_styleboard")
    def generate_styleboard(self, items: Sequence[ClothingItem]) -> str:
        """Render a mannequin wearing the given items; returns a base64 image."""

        contents: List[Any] = [
            "You are an AI fashion art director. Generate one clean, photorealistic, full-body image of a "
            "synthetic mannequin or model wearing all the clothing items provided, on a plain white studio "
            "background. Do not use a real person."
        ]
        for item in items:
            contents.append(f"Here is a clothing item ({item.description or 'item'}):")
            contents.append(self._item_image(item))
        contents.append("Now generate the single, complete image of the model wearing all of these items.")

        model = self._model(self.config.image_model)
        try:
            response = model.generate_content(contents)
            parts = response.candidates[0].content.parts
        except Exception as exc:
            raise ServiceUnavailable(f"Failed to generate Styleboard: {exc}") from exc

        for part in parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and str(getattr(inline, "mime_type", "")).startswith("image/"):
                data = inline.data
                return data if isinstance(data, str) else base64.b64encode(data).decode("ascii")
        raise ServiceUnavailable("Failed to generate Styleboard: no image part found in the response")


__all__ = ["StyleAdvisor", "describe_items", "ANALYSIS_SCHEMA"]
