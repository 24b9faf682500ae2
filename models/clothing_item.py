"""Clothing item data model and helpers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from models.taxonomy import (
    validate_category,
    validate_pattern,
    validate_season,
    validate_style,
)

# Gateways disagree on how the image location is spelled; first match wins.
IMAGE_REF_KEYS = ("imageRef", "image_ref", "imageurl", "image_url", "imageUrl", "imageData", "image_data")
MIME_TYPE_KEYS = ("mimeType", "mime_type", "mimetype")


def _first_present(record: Mapping[str, Any], keys: tuple) -> Optional[Any]:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def _require_mapping(value: Any, label: str) -> None:
    if not isinstance(value, Mapping):
        raise TypeError(f"{label} must be an object, got {type(value).__name__}")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class ItemAttributes:
    """The six classification fields shared by items, drafts and analyses."""

    category: str
    color: str
    pattern: Optional[str]
    style: str
    season: str
    description: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", validate_category(self.category))
        object.__setattr__(self, "pattern", validate_pattern(self.pattern))
        object.__setattr__(self, "style", validate_style(self.style))
        object.__setattr__(self, "season", validate_season(self.season))
        object.__setattr__(self, "color", _text(self.color))
        object.__setattr__(self, "description", _text(self.description))

    def attributes(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "color": self.color,
            "pattern": self.pattern,
            "style": self.style,
            "season": self.season,
            "description": self.description,
        }


@dataclass(frozen=True)
class ItemAnalysis(ItemAttributes):
    """Structured classification returned for a single garment photo."""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ItemAnalysis":
        _require_mapping(payload, "Classification")
        missing = [key for key in ("category", "style", "season") if not payload.get(key)]
        if missing:
            raise ValueError(f"Classification is missing fields: {missing}")
        return cls(
            category=str(payload["category"]),
            color=_text(payload.get("color")),
            pattern=payload.get("pattern"),
            style=str(payload["style"]),
            season=str(payload["season"]),
            description=_text(payload.get("description")),
        )


@dataclass(frozen=True)
class ClothingItem(ItemAttributes):
    """A catalogued garment as held by the wardrobe state.

    ``image_ref`` is either an inline base64 payload or a URL and is only ever
    forwarded, never inspected. Items are replaced rather than edited.
    """

    id: str = ""
    image_ref: str = ""
    mime_type: str = "image/jpeg"

    def __post_init__(self) -> None:
        super().__post_init__()
        if not _text(self.id):
            raise ValueError("ClothingItem requires a server-assigned id")
        object.__setattr__(self, "id", _text(self.id))

    @property
    def image_is_url(self) -> bool:
        return self.image_ref.startswith("http")

    def image_src(self) -> str:
        """Return something an image consumer can load directly."""

        if self.image_is_url:
            return self.image_ref
        return f"data:{self.mime_type};base64,{self.image_ref}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ClothingDraft(ItemAttributes):
    """A not yet persisted item, carrying the raw base64 image payload."""

    image_data: str = ""
    mime_type: str = ""

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.image_data or not self.mime_type:
            raise ValueError("A draft needs both image data and a mime type")

    @classmethod
    def from_analysis(
        cls, analysis: ItemAttributes, image_data: str, mime_type: str, **overrides: Any
    ) -> "ClothingDraft":
        fields = {**analysis.attributes(), **{k: v for k, v in overrides.items() if v is not None}}
        return cls(image_data=image_data, mime_type=mime_type, **fields)

    def to_payload(self) -> Dict[str, Any]:
        """Request body expected by ``POST /items``."""

        return {"imageData": self.image_data, "mimeType": self.mime_type, **self.attributes()}


def from_remote_record(record: Mapping[str, Any]) -> ClothingItem:
    """Build a :class:`ClothingItem` from whatever shape the gateway returned.

    Ids are coerced to strings and the image location is read from any of the
    known spellings. A record without an image yields an empty ``image_ref``.
    """

    _require_mapping(record, "Remote record")
    if record.get("id") in (None, ""):
        raise ValueError("Remote record has no id")

    return ClothingItem(
        id=str(record["id"]),
        image_ref=str(_first_present(record, IMAGE_REF_KEYS) or ""),
        mime_type=str(_first_present(record, MIME_TYPE_KEYS) or "image/jpeg"),
        category=str(record.get("category") or ""),
        color=_text(record.get("color")),
        pattern=record.get("pattern"),
        style=str(record.get("style") or ""),
        season=str(record.get("season") or ""),
        description=_text(record.get("description")),
    )


__all__ = [
    "ItemAttributes",
    "ItemAnalysis",
    "ClothingItem",
    "ClothingDraft",
    "from_remote_record",
    "IMAGE_REF_KEYS",
]
