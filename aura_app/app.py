"""Session bootstrap: builds and tears down everything one signed-in user needs."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from agents.style_advisor import StyleAdvisor
from agents.workflows import StyleWorkflows
from aura_app.config import AuraConfig
from aura_app.logging_config import configure_logging, get_logger, log_event
from memory.local_storage import LocalStorage
from memory.outfit_of_the_day import OutfitOfTheDayCache
from memory.wardrobe_state import WardrobeState
from models.clothing_item import ClothingItem
from tools.wardrobe_api import SessionCredentials, WardrobeApiClient

LOGGER = get_logger(__name__)


class AuraSession:
    """Owns the wardrobe state and its collaborators for one session.

    Construction seeds the wardrobe so it is usable immediately; ``start``
    performs the remote load and ``close`` waits for in-flight deletes. The
    session is meant to be passed explicitly to whatever renders it.
    """

    def __init__(
        self,
        config: AuraConfig | None = None,
        *,
        client: Optional[WardrobeApiClient] = None,
        advisor: Optional[StyleAdvisor] = None,
        storage: Optional[LocalStorage] = None,
        seed: Optional[Iterable[ClothingItem]] = None,
    ) -> None:
        self.config = config or AuraConfig.from_env()
        configure_logging()

        self.credentials = SessionCredentials(self.config.access_token)
        self.client = client or WardrobeApiClient(
            self.config.api_base_url,
            credentials=self.credentials,
            timeout=self.config.request_timeout,
        )
        self.advisor = advisor or StyleAdvisor(self.config)
        self.storage = storage or LocalStorage(self.config.local_storage_dir)
        self.wardrobe = WardrobeState(self.client, seed=seed)
        self.outfit_of_the_day = OutfitOfTheDayCache(self.storage, self.advisor)
        self.workflows = StyleWorkflows(self.wardrobe, self.client, self.advisor, self.outfit_of_the_day)

    async def start(self) -> "AuraSession":
        """Load the remote wardrobe; failures keep the seeded items."""

        loaded = await self.wardrobe.initialize()
        log_event(
            LOGGER,
            logging.INFO,
            "session_started",
            remote_loaded=loaded,
            item_count=len(self.wardrobe),
        )
        return self

    async def close(self) -> None:
        await self.wardrobe.close()
        log_event(LOGGER, logging.INFO, "session_closed", item_count=len(self.wardrobe))

    async def __aenter__(self) -> "AuraSession":
        return await self.start()

    async def __aexit__(self, *_: object) -> None:
        await self.close()


__all__ = ["AuraSession"]
