"""Workout routine controller: list plus create/update/delete with resync."""

from __future__ import annotations

from typing import Any

from fitsync.domains.models import Routine, RoutineExercise
from fitsync.infrastructure.api import endpoints
from fitsync.services.controllers.base import DomainStateController


def _exercise_payload(exercises: list[RoutineExercise | dict[str, Any]]) -> list[dict[str, Any]]:
    return [e.to_dict() if isinstance(e, RoutineExercise) else dict(e) for e in exercises]


class RoutinesController(DomainStateController[Routine]):
    domain = "routines"
    fallback_error = "Failed to fetch routines"

    async def _fetch_raw(self) -> Any:
        return await endpoints.fetch_routines(self._client)

    def _parse(self, raw: Any) -> list[Routine]:
        return [Routine.from_dict(d) for d in (raw or {}).get("routines", [])]

    def get_routine(self, routine_id: int) -> Routine | None:
        for r in self._state.items:
            if r.id == routine_id:
                return r
        return None

    async def create_routine(self, name: str, exercises: list[RoutineExercise | dict[str, Any]]) -> None:
        payload = _exercise_payload(exercises)
        await self._mutate(
            f"create routine {name!r}",
            lambda: endpoints.create_routine(self._client, name, payload),
        )

    async def update_routine(
        self,
        routine_id: int,
        name: str,
        exercises: list[RoutineExercise | dict[str, Any]],
    ) -> None:
        payload = _exercise_payload(exercises)
        await self._mutate(
            f"update routine {routine_id}",
            lambda: endpoints.update_routine(self._client, routine_id, name, payload),
        )

    async def delete_routine(self, routine_id: int) -> None:
        await self._mutate(
            f"delete routine {routine_id}",
            lambda: endpoints.delete_routine(self._client, routine_id),
        )
