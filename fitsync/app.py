"""
Application shell: wires storage, session, API client and controllers.

Controllers are built inside a running event loop so their initial refresh is
scheduled immediately; use `await FitSyncApp.create()` (or `create_app`).
"""

from __future__ import annotations

from pathlib import Path

from fitsync.infrastructure.api.client import ApiClient
from fitsync.infrastructure.storage.backends import StorageBackend, get_storage
from fitsync.infrastructure.storage.ttl_cache import TTLCache
from fitsync.services.controllers import (
    FriendsController,
    LibraryController,
    QuestsController,
    RoutinesController,
)
from fitsync.services.onboarding import OnboardingWizard
from fitsync.services.session import SessionGate
from fitsync.utils.config import library_cache_days, log_level
from fitsync.utils.logger import get_logger, setup_logger

logger = get_logger()


class FitSyncApp:
    def __init__(
        self,
        storage: StorageBackend,
        client: ApiClient,
        session: SessionGate,
        library_cache: TTLCache,
    ) -> None:
        self.storage = storage
        self.client = client
        self.session = session
        self.library = LibraryController(session, client, cache=library_cache)
        self.quests = QuestsController(session, client)
        self.friends = FriendsController(session, client)
        self.routines = RoutinesController(session, client)

    @property
    def controllers(self) -> list:
        return [self.library, self.quests, self.friends, self.routines]

    @classmethod
    async def create(
        cls,
        storage: StorageBackend | None = None,
        client: ApiClient | None = None,
        *,
        platform: str | None = None,
        storage_root: Path | None = None,
        cache_days: int | None = None,
    ) -> "FitSyncApp":
        storage = storage or get_storage(platform, storage_root)
        session = SessionGate(storage)
        if client is None:
            client = ApiClient(token_provider=session.token, on_unauthorized=session.logout)
        else:
            client.set_token_provider(session.token)
            client.set_unauthorized_handler(session.logout)
        days = cache_days if cache_days is not None else library_cache_days()
        cache = TTLCache.days(storage, days)
        return cls(storage, client, session, cache)

    async def start(self) -> None:
        """Restore a stored session and wait for the first round of refreshes."""
        await self.session.restore()
        await self.settle()

    async def settle(self) -> None:
        for controller in self.controllers:
            await controller.settle()

    def onboarding(self, default_class_id: int | None = None) -> OnboardingWizard:
        """A fresh wizard bound to this app's client and session."""
        return OnboardingWizard(self.client, self.session, default_class_id=default_class_id)

    def close(self) -> None:
        for controller in self.controllers:
            controller.close()


async def create_app(**kwargs) -> FitSyncApp:
    """Configure logging from the environment and build a started app."""
    setup_logger(level=log_level())
    app = await FitSyncApp.create(**kwargs)
    await app.start()
    logger.info("fitsync started against %s", app.client.base_url)
    return app
