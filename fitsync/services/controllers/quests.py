"""Quest controller: fetch, create, and progress/description helpers."""

from __future__ import annotations

from typing import Any

from fitsync.domains.models import Quest, QuestDifficulty, QuestStatus
from fitsync.infrastructure.api import endpoints
from fitsync.services.controllers.base import DomainStateController


def calculate_progress(quest: Quest) -> float:
    """Percent of required workouts done, clamped to [0, 100]; 0 when none are needed."""
    needed = quest.number_of_workouts_needed
    if needed <= 0:
        return 0.0
    progress = quest.number_of_workouts_completed / needed * 100
    return max(0.0, min(progress, 100.0))


def describe_quest(quest: Quest) -> str:
    """
    Human-readable requirement, e.g.
    "Complete 3 workouts of at least 30 minutes that include cardio targeting legs".
    """
    n = quest.number_of_workouts_needed
    description = f"Complete {n} workout{'s' if n > 1 else ''}"
    if quest.workout_duration:
        description += f" of at least {quest.workout_duration} minutes"
    if quest.exercise_category:
        description += f" that include {quest.exercise_category}"
    if quest.exercise_muscle:
        description += f" targeting {quest.exercise_muscle}"
    return description


class QuestsController(DomainStateController[Quest]):
    domain = "quests"
    fallback_error = "Failed to load quests"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.creating = False

    async def _fetch_raw(self) -> Any:
        return await endpoints.fetch_quests(self._client)

    def _parse(self, raw: Any) -> list[Quest]:
        return [Quest.from_dict(d) for d in raw or []]

    # --- derived views ---

    def in_progress(self) -> list[Quest]:
        return [q for q in self._state.items if q.status is QuestStatus.INCOMPLETE]

    def completed(self) -> list[Quest]:
        return [q for q in self._state.items if q.status is QuestStatus.COMPLETE]

    def get_quest(self, quest_id: int) -> Quest | None:
        for q in self._state.items:
            if q.id == quest_id:
                return q
        return None

    calculate_progress = staticmethod(calculate_progress)
    describe_quest = staticmethod(describe_quest)

    # --- mutations ---

    async def create_quest(self, difficulty: QuestDifficulty | str) -> None:
        """
        Ask the server for a new quest of the given difficulty, then resync.

        Raises:
            ValueError: Unknown difficulty (no request is sent).
            FitSyncError: The remote write failed.
        """
        level = difficulty if isinstance(difficulty, QuestDifficulty) else QuestDifficulty(difficulty)
        self.creating = True
        try:
            await self._mutate(
                f"create {level.value} quest",
                lambda: endpoints.create_quest(self._client, level.value),
            )
        finally:
            self.creating = False
