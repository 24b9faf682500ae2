"""Session-scoped wardrobe state reconciled with the remote gateway.

The state is created once per session and handed by reference to whatever
renders it. Local changes are applied synchronously; remote work happens at
two suspension points only, the initial fetch and the follow-up delete. Both
absorb their failures so the local view is always usable:

* ``initialize`` keeps the built-in seed when the fetch fails or is empty.
* ``delete`` never rolls back. A rejected remote delete leaves the item gone
  locally and present remotely until the next full fetch, an accepted
  eventual-consistency gap.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from aura_app.logging_config import get_logger, log_event
from models.clothing_item import ClothingItem

logger = get_logger(__name__)

DEFAULT_WARDROBE: Tuple[ClothingItem, ...] = (
    ClothingItem(
        id="1",
        image_ref="https://images.unsplash.com/photo-1583743814966-8936f5b7be1a?q=80&w=464&auto=format&fit=crop",
        mime_type="image/jpeg",
        category="tops",
        color="Black",
        pattern="graphic",
        style="streetwear",
        season="all-season",
        description="Black Graphic T-Shirt",
    ),
    ClothingItem(
        id="2",
        image_ref="https://images.unsplash.com/photo-1602293589914-9e19577a756b?q=80&w=387&auto=format&fit=crop",
        mime_type="image/jpeg",
        category="bottoms",
        color="Blue",
        pattern="solid",
        style="casual",
        season="all-season",
        description="Blue Denim Jeans",
    ),
    ClothingItem(
        id="3",
        image_ref="https://images.unsplash.com/photo-1595950653106-6c9ebd614d3a?q=80&w=387&auto=format&fit=crop",
        mime_type="image/jpeg",
        category="shoes",
        color="White",
        pattern="solid",
        style="casual",
        season="all-season",
        description="White Sneakers",
    ),
    ClothingItem(
        id="4",
        image_ref="https://images.unsplash.com/photo-1551028719-00167b16eac5?q=80&w=435&auto=format&fit=crop",
        mime_type="image/jpeg",
        category="outerwear",
        color="Brown",
        pattern="solid",
        style="casual",
        season="fall",
        description="Brown Leather Jacket",
    ),
)


class WardrobeBackend(Protocol):
    """The slice of the gateway client the state depends on."""

    def fetch_all(self) -> List[ClothingItem]: ...

    def delete(self, item_id: str) -> object: ...


@dataclass(frozen=True)
class WardrobeSnapshot:
    """Immutable view handed to listeners after every change."""

    items: Tuple[ClothingItem, ...]
    loading: bool


Listener = Callable[[WardrobeSnapshot], None]


class WardrobeState:
    """Single source of truth for the garments of the signed-in user."""

    def __init__(self, backend: WardrobeBackend, seed: Optional[Iterable[ClothingItem]] = None) -> None:
        self._backend = backend
        self._items: List[ClothingItem] = []
        for item in DEFAULT_WARDROBE if seed is None else seed:
            self._put(item)
        self._loading = False
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def items(self) -> Tuple[ClothingItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def loading(self) -> bool:
        return self._loading

    @loading.setter
    def loading(self, value: bool) -> None:
        # Plain overwrite: overlapping operations do not count each other.
        self._loading = bool(value)
        self._notify()

    def set_loading(self, value: bool) -> None:
        self.loading = value

    def snapshot(self) -> WardrobeSnapshot:
        return WardrobeSnapshot(items=self.items, loading=self._loading)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _put(self, item: ClothingItem) -> None:
        # A repeated id replaces the earlier entry; the newer copy goes last.
        self._items = [existing for existing in self._items if existing.id != item.id]
        self._items.append(item)

    async def initialize(self) -> bool:
        """Replace the seed with the remote collection when one is available.

        Returns ``True`` when the remote collection was adopted. Failures and
        empty collections are logged and leave the current items untouched.
        """

        self.loading = True
        try:
            fetched = await asyncio.to_thread(self._backend.fetch_all)
        except Exception as exc:  # any failure keeps the current items
            log_event(
                logger,
                logging.WARNING,
                "wardrobe_fetch_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False
        finally:
            if self._closed:
                # listeners are already gone; clear the flag silently
                self._loading = False
            else:
                self.loading = False

        if self._closed:
            return False
        if not fetched:
            log_event(logger, logging.INFO, "wardrobe_fetch_empty", kept=len(self._items))
            return False

        self._items = []
        for item in fetched:
            self._put(item)
        log_event(logger, logging.INFO, "wardrobe_loaded", count=len(self._items))
        self._notify()
        return True

    def add(self, item: ClothingItem) -> None:
        """Append an item the caller has already persisted remotely."""

        self._put(item)
        self._notify()

    def delete(self, item_id: str | int) -> Optional[asyncio.Task]:
        """Drop the item locally, then ask the gateway to delete it.

        The remote call is scheduled on the running loop and its outcome is
        only logged. Outside an event loop the call is made inline, still
        after the local removal and still without raising.
        """

        key = str(item_id)
        remaining = [item for item in self._items if item.id != key]
        if len(remaining) != len(self._items):
            self._items = remaining
            self._notify()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._delete_remote_blocking(key)
            return None

        task = loop.create_task(self._delete_remote(key))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _delete_remote(self, item_id: str) -> None:
        await asyncio.to_thread(self._delete_remote_blocking, item_id)

    def _delete_remote_blocking(self, item_id: str) -> None:
        try:
            self._backend.delete(item_id)
        except Exception as exc:  # remote failures never roll back local state
            log_event(
                logger,
                logging.WARNING,
                "wardrobe_remote_delete_failed",
                item_id=item_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        else:
            log_event(logger, logging.INFO, "wardrobe_remote_delete_completed", item_id=item_id)

    def get_by_id(self, item_id: str | int) -> Optional[ClothingItem]:
        key = str(item_id)
        for item in self._items:
            if item.id == key:
                return item
        return None

    def resolve(self, item_ids: Sequence[str | int]) -> List[ClothingItem]:
        """Map outfit ids to current items, silently dropping unknown ones."""

        resolved = []
        for item_id in item_ids:
            item = self.get_by_id(item_id)
            if item is not None:
                resolved.append(item)
        return resolved

    def search(self, text: str = "", category: Optional[str] = None, style: Optional[str] = None) -> List[ClothingItem]:
        """Filter by free text (description or color), category and style."""

        needle = text.strip().lower()

        def matches(item: ClothingItem) -> bool:
            if needle and needle not in item.description.lower() and needle not in item.color.lower():
                return False
            if category and item.category != category:
                return False
            if style and item.style != style:
                return False
            return True

        return [item for item in self._items if matches(item)]

    def recently_added(self, limit: int = 5) -> List[ClothingItem]:
        if limit <= 0:
            return []
        return list(reversed(self._items[-limit:]))

    async def close(self) -> None:
        """Session teardown: wait for in-flight remote deletes, drop listeners."""

        self._closed = True
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        self._listeners.clear()


__all__ = ["DEFAULT_WARDROBE", "WardrobeBackend", "WardrobeSnapshot", "WardrobeState"]
