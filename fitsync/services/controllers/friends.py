"""
Friends controller.

The friend list is written as a whole: add/remove compute the complete new id
list client-side and send it in one PUT, then resync from the server. Friend
requests (incoming/outgoing) are tracked alongside as a second, uncached list.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fitsync.domains.errors import FitSyncError, describe_error
from fitsync.domains.models import FriendRequest, FriendSummary
from fitsync.infrastructure.api import endpoints
from fitsync.services.controllers.base import DomainStateController
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.controllers")


class FriendsController(DomainStateController[FriendSummary]):
    domain = "friends"
    fallback_error = "Failed to load friends"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.incoming: list[FriendRequest] = []
        self.outgoing: list[FriendRequest] = []
        self.requests_error: str | None = None
        self._req_seq = 0
        super().__init__(*args, **kwargs)

    async def _fetch_raw(self) -> Any:
        return await endpoints.fetch_friends(self._client)

    def _parse(self, raw: Any) -> list[FriendSummary]:
        return [FriendSummary.from_dict(d) for d in raw or []]

    def _schedule_refresh(self) -> asyncio.Task[Any] | None:
        task = super()._schedule_refresh()
        self._spawn(self.refresh_requests)
        return task

    # --- derived views ---

    def friend_ids(self) -> list[int]:
        return [f.user_id for f in self._state.items]

    def get_friend(self, user_id: int) -> FriendSummary | None:
        for f in self._state.items:
            if f.user_id == user_id:
                return f
        return None

    # --- friend list mutations ---

    async def _known_friend_ids(self) -> list[int]:
        """
        Friend ids as last confirmed by the server.

        The list is written as a whole, so an unloaded or failed list is
        refreshed first; if it still cannot be loaded the write is refused.
        """
        if not self.synced or self.error is not None:
            state = await self.refresh()
            if not self.synced:
                raise FitSyncError(state.error or "Friend list is not loaded")
        return self.friend_ids()

    async def add_friend(self, user_id: int) -> bool:
        """
        Add `user_id` to the friend list.

        Returns False without contacting the server when already a friend.
        """
        current = await self._known_friend_ids()
        if user_id in current:
            logger.debug("User %s is already a friend, nothing to write", user_id)
            return False
        new_ids = current + [user_id]
        await self._mutate(
            f"add friend {user_id}",
            lambda: endpoints.set_friends(self._client, new_ids),
        )
        return True

    async def remove_friend(self, user_id: int) -> bool:
        """Remove `user_id` from the friend list. Returns False when it was not a friend."""
        current = await self._known_friend_ids()
        if user_id not in current:
            logger.debug("User %s is not a friend, nothing to write", user_id)
            return False
        new_ids = [i for i in current if i != user_id]
        await self._mutate(
            f"remove friend {user_id}",
            lambda: endpoints.set_friends(self._client, new_ids),
        )
        return True

    # --- friend requests ---

    async def refresh_requests(self) -> None:
        """Reload incoming and outgoing requests. Failures set `requests_error`."""
        self._req_seq += 1
        seq = self._req_seq
        if not self._session.is_authenticated:
            self.incoming, self.outgoing, self.requests_error = [], [], None
            return
        try:
            incoming, outgoing = await self._with_timeout(
                asyncio.gather(
                    endpoints.fetch_incoming_requests(self._client),
                    endpoints.fetch_outgoing_requests(self._client),
                )
            )
        except Exception as e:
            if seq != self._req_seq:
                return
            if not isinstance(e, FitSyncError):
                logger.exception("Unexpected error loading friend requests")
            else:
                logger.warning("Failed to load friend requests: %s", e)
            self.requests_error = describe_error(e, "Failed to load friend requests")
            return
        if seq != self._req_seq:
            return
        self.incoming = [FriendRequest.from_dict(d) for d in incoming]
        self.outgoing = [FriendRequest.from_dict(d) for d in outgoing]
        self.requests_error = None

    async def send_request(self, recipient_id: int) -> None:
        try:
            await self._with_timeout(endpoints.send_friend_request(self._client, recipient_id))
        except Exception as e:
            logger.warning("Failed to send friend request to %s: %s", recipient_id, e)
            raise
        await self.refresh_requests()

    async def accept_request(self, request_id: int) -> None:
        await self._respond(request_id, accept=True)
        await asyncio.gather(self.refresh(), self.refresh_requests())

    async def decline_request(self, request_id: int) -> None:
        await self._respond(request_id, accept=False)
        await self.refresh_requests()

    async def _respond(self, request_id: int, accept: bool) -> None:
        try:
            await self._with_timeout(
                endpoints.respond_to_friend_request(self._client, request_id, accept)
            )
        except Exception as e:
            logger.warning("Failed to respond to friend request %s: %s", request_id, e)
            raise
