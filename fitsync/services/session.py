"""
Session gate: the authenticated identity every controller keys off.

The access token and onboarding flag persist in storage so a restarted client
can log back in without credentials (`restore`). Listeners are notified
synchronously on every change of the identity value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from fitsync.infrastructure.storage.backends import StorageBackend
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.session")

TOKEN_KEY = "accessToken"
ONBOARDED_KEY = "onboarded"

SessionListener = Callable[["UserRef | None"], None]


@dataclass(frozen=True)
class UserRef:
    onboarded: bool = False


class SessionGate:
    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage
        self._identity: UserRef | None = None
        self._listeners: list[SessionListener] = []

    @property
    def identity(self) -> UserRef | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_identity(self, identity: UserRef | None) -> None:
        self._identity = identity
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception:
                logger.exception("Session listener failed")

    async def token(self) -> str | None:
        return await self._storage.get(TOKEN_KEY)

    async def restore(self) -> UserRef | None:
        """Log back in from a stored token, if there is one."""
        token = await self._storage.get(TOKEN_KEY)
        if not token:
            return None
        onboarded = await self._storage.get(ONBOARDED_KEY)
        self._set_identity(UserRef(onboarded=onboarded == "true"))
        logger.info("Session restored (onboarded=%s)", self._identity.onboarded)
        return self._identity

    async def login(self, token: str, onboarded: bool) -> UserRef:
        await self._storage.set(TOKEN_KEY, token)
        await self._storage.set(ONBOARDED_KEY, "true" if onboarded else "false")
        identity = UserRef(onboarded=onboarded)
        self._set_identity(identity)
        logger.info("Logged in (onboarded=%s)", onboarded)
        return identity

    async def logout(self) -> None:
        logger.info("Logging out user")
        await self._storage.delete(TOKEN_KEY)
        await self._storage.delete(ONBOARDED_KEY)
        self._set_identity(None)

    async def complete_onboarding(self) -> None:
        await self._storage.set(ONBOARDED_KEY, "true")
        if self._identity is not None:
            self._set_identity(replace(self._identity, onboarded=True))
