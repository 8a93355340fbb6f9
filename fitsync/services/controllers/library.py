"""
Exercise library controller.

The only cached domain: the library is large, identical for every user and
changes rarely, so it is served from a TTLCache (7 days by default) and the
server is contacted only on a miss.
"""

from __future__ import annotations

from typing import Any

from fitsync.domains.models import Exercise
from fitsync.infrastructure.api import endpoints
from fitsync.services.controllers.base import DomainStateController

LIBRARY_CACHE_KEY = "workout_library_cache"


class LibraryController(DomainStateController[Exercise]):
    domain = "exercise library"
    fallback_error = "Failed to load exercises. Please try again."
    cache_key = LIBRARY_CACHE_KEY

    async def _fetch_raw(self) -> Any:
        return await endpoints.fetch_library(self._client)

    def _parse(self, raw: Any) -> list[Exercise]:
        if not isinstance(raw, list):
            return []
        return [Exercise.from_dict(d) for d in raw if isinstance(d, dict)]

    def _cacheable(self, raw: Any) -> bool:
        return isinstance(raw, list)

    async def reload(self):
        """Drop the cached copy and fetch the library from the server."""
        if self._cache is not None:
            await self._cache.invalidate(self.cache_key)
        return await self.refresh()

    # --- derived views ---

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        for ex in self._state.items:
            if ex.id == exercise_id:
                return ex
        return None

    def filter_by_muscle(self, muscle: str) -> list[Exercise]:
        m = muscle.strip().lower()
        return [ex for ex in self._state.items if m in (p.lower() for p in ex.primary_muscles)]

    def filter_by_level(self, level: str) -> list[Exercise]:
        lv = level.strip().lower()
        return [ex for ex in self._state.items if (ex.level or "").lower() == lv]

    def search(self, text: str) -> list[Exercise]:
        """Case-insensitive substring match on exercise names, in library order."""
        q = text.strip().lower()
        if not q:
            return list(self._state.items)
        return [ex for ex in self._state.items if q in ex.name.lower()]
