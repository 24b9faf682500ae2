"""Taxonomy validation and clothing item model tests."""

from __future__ import annotations

import pytest

from conftest import make_item
from models.clothing_item import ClothingDraft, ClothingItem, ItemAnalysis, from_remote_record
from models.outfit import GeneratedOutfits, OutfitCritique, OutfitOfTheDay
from models.taxonomy import validate_category, validate_pattern, validate_season, validate_style


def test_taxonomy_normalises_labels() -> None:
    assert validate_category(" Tops ") == "tops"
    assert validate_style("STREETWEAR") == "streetwear"
    assert validate_season("All Season") == "all-season"
    assert validate_season("all_season") == "all-season"
    assert validate_pattern("Polka_Dot") == "polka dot"


@pytest.mark.parametrize("raw", [None, "", "null", "None"])
def test_missing_pattern_becomes_none(raw) -> None:
    assert validate_pattern(raw) is None


def test_unknown_labels_are_rejected() -> None:
    with pytest.raises(ValueError):
        validate_category("hats")
    with pytest.raises(ValueError):
        validate_pattern("paisley")
    with pytest.raises(ValueError):
        validate_season("monsoon")


def test_clothing_item_requires_an_id() -> None:
    with pytest.raises(ValueError):
        ClothingItem(
            category="tops",
            color="Red",
            pattern=None,
            style="casual",
            season="summer",
            description="Red Tank",
        )


def test_image_src_handles_urls_and_inline_payloads() -> None:
    remote = make_item("1")
    inline = make_item("2", image_ref="aGVsbG8=", mime_type="image/png")

    assert remote.image_is_url
    assert remote.image_src() == "https://example.com/1.jpg"
    assert not inline.image_is_url
    assert inline.image_src() == "data:image/png;base64,aGVsbG8="


def test_from_remote_record_normalises_gateway_shape() -> None:
    record = {
        "id": 42,
        "user_id": "user-1",
        "imageurl": "http://localhost:3002/images/42.jpg",
        "mimetype": "image/jpeg",
        "category": "Bottoms",
        "color": "Navy",
        "pattern": "null",
        "style": "business",
        "season": "winter",
        "description": "Wool Trousers",
    }

    item = from_remote_record(record)

    assert item.id == "42"
    assert item.image_ref == "http://localhost:3002/images/42.jpg"
    assert item.category == "bottoms"
    assert item.pattern is None


def test_from_remote_record_prefers_first_image_spelling() -> None:
    record = {
        "id": "7",
        "image_url": "https://cdn.example.com/7.png",
        "imageData": "ignored",
        "category": "shoes",
        "style": "casual",
        "season": "summer",
    }

    assert from_remote_record(record).image_ref == "https://cdn.example.com/7.png"


def test_from_remote_record_without_id_is_rejected() -> None:
    with pytest.raises(ValueError):
        from_remote_record({"category": "tops", "style": "casual", "season": "summer"})


@pytest.mark.parametrize("payload", [None, ["tops"], "tops", 3])
def test_non_object_payloads_raise_type_error(payload) -> None:
    with pytest.raises(TypeError):
        from_remote_record(payload)
    with pytest.raises(TypeError):
        ItemAnalysis.from_payload(payload)


def test_draft_from_analysis_applies_user_overrides() -> None:
    analysis = ItemAnalysis.from_payload(
        {
            "category": "tops",
            "color": "Red",
            "pattern": "striped",
            "style": "casual",
            "season": "summer",
            "description": "Striped Tee",
        }
    )

    draft = ClothingDraft.from_analysis(analysis, "aGVsbG8=", "image/png", color="Crimson", description=None)
    payload = draft.to_payload()

    assert payload["imageData"] == "aGVsbG8="
    assert payload["mimeType"] == "image/png"
    assert payload["color"] == "Crimson"
    assert payload["description"] == "Striped Tee"


def test_draft_needs_image_payload() -> None:
    analysis = ItemAnalysis.from_payload({"category": "tops", "style": "casual", "season": "summer"})
    with pytest.raises(ValueError):
        ClothingDraft.from_analysis(analysis, "", "image/png")


def test_analysis_requires_core_fields() -> None:
    with pytest.raises(ValueError):
        ItemAnalysis.from_payload({"category": "tops", "color": "Red"})


def test_outfit_payloads_read_camel_case_keys() -> None:
    generated = GeneratedOutfits.from_payload(
        {
            "outfits": [{"name": "Brunch", "itemIds": [1, "2"], "stylingTips": "Cuff the jeans"}],
            "mustHaves": ["Loafers", " "],
        }
    )

    assert generated.outfits[0].item_ids == ["1", "2"]
    assert generated.outfits[0].styling_tips == "Cuff the jeans"
    assert generated.must_haves == ["Loafers"]


def test_critique_and_daily_outfit_shapes() -> None:
    critique = OutfitCritique.from_payload({"headline": "Sharp", "overall_rating": "8.5", "what_works": ["fit"]})
    entry = OutfitOfTheDay(item_ids=["1", "3"], reasoning="Sunny day", date="2026-10-19")

    assert critique.overall_rating == 8.5
    assert critique.what_to_improve == []
    assert entry.to_storage() == {"itemIds": ["1", "3"], "reasoning": "Sunny day", "date": "2026-10-19"}
