"""
Generic domain-state controller.

A controller owns one `DomainState` (loading / failed / ready), refreshes it
from the remote API (optionally through a TTLCache), and re-runs the refresh
whenever the session identity changes. Mutations write to the server and then
force a full refresh instead of merging local predictions.

Each refresh takes a sequence number; only the latest one may publish its
result, so a slow response can never overwrite a newer state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from fitsync.domains.errors import FitSyncError, TransientNetworkError, describe_error
from fitsync.infrastructure.api.client import ApiClient
from fitsync.infrastructure.storage.ttl_cache import TTLCache
from fitsync.services.session import SessionGate
from fitsync.utils.config import keep_items_on_error as _keep_items_default
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.controllers")

T = TypeVar("T")

StateListener = Callable[["DomainState[Any]"], None]


@dataclass(frozen=True)
class DomainState(Generic[T]):
    """Immutable snapshot of a controller's value."""
    items: tuple[T, ...] = ()
    loading: bool = False
    error: str | None = None

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error is not None:
            return "failed"
        return "ready"


class DomainStateController(Generic[T]):
    """
    Base class for the per-domain controllers.

    Subclasses set `domain` and `fallback_error`, implement `_fetch_raw`
    and `_parse`, and may set `cache_key` to serve reads through a TTLCache.
    """

    domain = "items"
    fallback_error = "Failed to load items"
    cache_key: str | None = None

    def __init__(
        self,
        session: SessionGate,
        client: ApiClient,
        *,
        cache: TTLCache | None = None,
        keep_items_on_error: bool | None = None,
        timeout: float | None = None,
    ) -> None:
        self._session = session
        self._client = client
        self._cache = cache if self.cache_key else None
        self._keep_items_on_error = (
            keep_items_on_error if keep_items_on_error is not None else _keep_items_default()
        )
        self._timeout = timeout if timeout is not None else client.timeout * 2
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._seq = 0
        self._synced = False
        self._state: DomainState[T] = DomainState()
        self._unsubscribe_session = session.subscribe(self._on_session_change)
        if self._schedule_refresh() is not None:
            self._state = DomainState(loading=True)

    # --- state access ---

    @property
    def state(self) -> DomainState[T]:
        return self._state

    @property
    def items(self) -> list[T]:
        return list(self._state.items)

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def synced(self) -> bool:
        """True when `items` come from the last refresh and that refresh succeeded."""
        return self._synced

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call `listener(state)` on every transition; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: DomainState[T]) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("%s state listener failed", self.domain)

    # --- lifecycle ---

    def _on_session_change(self, identity: Any) -> None:
        self._schedule_refresh()

    def _schedule_refresh(self) -> asyncio.Task[Any] | None:
        return self._spawn(self.refresh)

    def _spawn(self, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task[Any] | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, %s refresh not scheduled", self.domain)
            return None
        task = loop.create_task(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def settle(self) -> None:
        """Wait until every scheduled refresh has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Stop reacting to session changes and cancel scheduled refreshes."""
        self._unsubscribe_session()
        for task in list(self._tasks):
            task.cancel()

    # --- fetching ---

    async def _fetch_raw(self) -> Any:
        """Fetch the domain's raw JSON from the server."""
        raise NotImplementedError

    def _parse(self, raw: Any) -> list[T]:
        """Turn raw JSON (from the server or the cache) into items."""
        raise NotImplementedError

    async def _with_timeout(self, coro: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise TransientNetworkError(f"{self.domain} request timed out", timed_out=True) from e

    async def refresh(self) -> DomainState[T]:
        """
        Reload items from the cache or the server.

        Logged out: ready with no items. Failure: `error` set and items cleared
        (or kept when keep_items_on_error is on). Returns the published state,
        which is the newer state when this call was superseded.
        """
        self._seq += 1
        seq = self._seq

        if not self._session.is_authenticated:
            self._synced = False
            self._set_state(DomainState())
            return self._state

        self._set_state(DomainState(items=self._state.items, loading=True))

        try:
            items = await self._load(seq)
        except Exception as e:
            if seq != self._seq:
                logger.debug("Discarding superseded %s failure (seq %d < %d)", self.domain, seq, self._seq)
                return self._state
            if isinstance(e, FitSyncError):
                logger.warning("Failed to load %s: %s", self.domain, e)
            else:
                logger.exception("Unexpected error loading %s", self.domain)
            message = describe_error(e, self.fallback_error)
            self._synced = False
            kept = self._state.items if self._keep_items_on_error else ()
            self._set_state(DomainState(items=kept, error=message))
            return self._state

        if items is None:
            logger.debug("Discarding superseded %s response (seq %d < %d)", self.domain, seq, self._seq)
            return self._state
        self._synced = True
        self._set_state(DomainState(items=tuple(items)))
        return self._state

    async def _load(self, seq: int) -> list[T] | None:
        """Items for refresh number `seq`, or None when a newer refresh started."""
        if self._cache is not None and self.cache_key:
            cached = await self._cache.read(self.cache_key)
            if cached is not None:
                if seq != self._seq:
                    return None
                return self._parse(cached)

        raw = await self._with_timeout(self._fetch_raw())
        if seq != self._seq:
            return None
        items = self._parse(raw)
        if self._cache is not None and self.cache_key and self._cacheable(raw):
            await self._cache.write(self.cache_key, raw)
        return items

    def _cacheable(self, raw: Any) -> bool:
        return raw is not None

    # --- mutations ---

    async def _mutate(self, action: str, write: Callable[[], Awaitable[Any]]) -> None:
        """Run one remote write, then refresh. Write errors propagate; state is untouched."""
        try:
            await self._with_timeout(write())
        except Exception as e:
            logger.warning("Failed to %s: %s", action, e)
            raise
        logger.info("%s succeeded, resyncing %s", action, self.domain)
        await self.refresh()
