"""Shared fakes for the wardrobe tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List, Optional

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.clothing_item import ClothingItem


def make_item(item_id: str, description: str = "Plain Tee", **overrides) -> ClothingItem:
    fields = {
        "category": "tops",
        "color": "White",
        "pattern": "solid",
        "style": "casual",
        "season": "all-season",
        "description": description,
        "image_ref": f"https://example.com/{item_id}.jpg",
    }
    fields.update(overrides)
    return ClothingItem(id=item_id, **fields)


class FakeBackend:
    """In-memory stand-in for the gateway client used by the wardrobe state."""

    def __init__(
        self,
        items: Optional[Iterable[ClothingItem]] = None,
        fetch_error: Optional[Exception] = None,
        delete_error: Optional[Exception] = None,
    ) -> None:
        self.items = list(items or [])
        self.fetch_error = fetch_error
        self.delete_error = delete_error
        self.fetch_calls = 0
        self.deleted: List[str] = []

    def fetch_all(self) -> List[ClothingItem]:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.items)

    def delete(self, item_id: str) -> dict:
        self.deleted.append(item_id)
        if self.delete_error is not None:
            raise self.delete_error
        return {"message": "Item deleted successfully"}


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
