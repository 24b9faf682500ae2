"""Canonical taxonomy definitions for clothing items.

This module centralises the closed enumerations used to classify garments.
The same lists feed item validation, the advisory response schemas and the
gateway request models so every layer agrees on the allowed labels.
"""

from typing import List, Optional

CATEGORIES: List[str] = ["tops", "bottoms", "dress", "shoes", "accessories", "outerwear"]
PATTERNS: List[str] = ["solid", "striped", "floral", "plaid", "graphic", "polka dot"]
STYLES: List[str] = ["casual", "formal", "business", "athletic", "streetwear", "bohemian", "minimalist"]
SEASONS: List[str] = ["spring", "summer", "fall", "winter", "all-season"]

# The classifier reports "no pattern" as the literal string "null".
NULL_PATTERN = "null"


def _normalize_key(value: str) -> str:
    """Normalise a free-form label for comparison against the taxonomy."""

    return " ".join(str(value).strip().lower().replace("_", " ").split())


def _validate(value: str, allowed: List[str], label: str) -> str:
    key = _normalize_key(value)
    if label == "season" and key == "all season":
        key = "all-season"
    if key not in allowed:
        raise ValueError(f"Unsupported {label} '{value}'. Allowed: {allowed}")
    return key


def validate_category(value: str) -> str:
    """Validate and normalise a category value.

    Raises a :class:`ValueError` if the category is not part of the canonical
    taxonomy.
    """

    return _validate(value, CATEGORIES, "category")


def validate_pattern(value: Optional[str]) -> Optional[str]:
    """Validate a pattern, mapping empty values and ``"null"`` to ``None``."""

    if value is None:
        return None
    key = _normalize_key(value)
    if not key or key in {NULL_PATTERN, "none"}:
        return None
    return _validate(key, PATTERNS, "pattern")


def validate_style(value: str) -> str:
    return _validate(value, STYLES, "style")


def validate_season(value: str) -> str:
    return _validate(value, SEASONS, "season")


__all__ = [
    "CATEGORIES",
    "PATTERNS",
    "STYLES",
    "SEASONS",
    "NULL_PATTERN",
    "validate_category",
    "validate_pattern",
    "validate_style",
    "validate_season",
]
