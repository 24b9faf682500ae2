"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.clothing_item import ClothingDraft, ClothingItem, ItemAnalysis, from_remote_record
from models.errors import (
    AuthError,
    RemoteError,
    ServiceUnavailable,
    TransportError,
    ValidationError,
    WardrobeError,
)
from models.outfit import (
    ChatMessage,
    GeneratedOutfits,
    Outfit,
    OutfitCritique,
    OutfitOfTheDay,
    OutfitOfTheDaySuggestion,
)

__all__ = [
    "ClothingDraft",
    "ClothingItem",
    "ItemAnalysis",
    "from_remote_record",
    "AuthError",
    "RemoteError",
    "ServiceUnavailable",
    "TransportError",
    "ValidationError",
    "WardrobeError",
    "ChatMessage",
    "GeneratedOutfits",
    "Outfit",
    "OutfitCritique",
    "OutfitOfTheDay",
    "OutfitOfTheDaySuggestion",
]
