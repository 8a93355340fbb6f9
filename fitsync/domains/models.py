"""
Domain records exchanged with the remote API.

Each record parses from the server's JSON shape (`from_dict`) and serializes
back to it (`to_dict`). Unknown server fields are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DAYS_PER_WEEK = 7


class QuestStatus(Enum):
    INCOMPLETE = "Incomplete"
    COMPLETE = "Complete"


class QuestDifficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


def _opt_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _opt_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Exercise:
    """One entry of the exercise library."""
    id: str
    name: str
    category: str = ""
    level: str | None = None
    primary_muscles: list[str] = field(default_factory=list)
    secondary_muscles: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    equipment: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Exercise":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            category=str(data.get("category") or ""),
            level=_opt_str(data.get("level")),
            primary_muscles=_str_list(data.get("primaryMuscles")),
            secondary_muscles=_str_list(data.get("secondaryMuscles")),
            images=_str_list(data.get("images")),
            instructions=_str_list(data.get("instructions")),
            equipment=_opt_str(data.get("equipment")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "level": self.level,
            "primaryMuscles": list(self.primary_muscles),
            "secondaryMuscles": list(self.secondary_muscles),
            "images": list(self.images),
            "instructions": list(self.instructions),
            "equipment": self.equipment,
        }


@dataclass
class Quest:
    """A workout challenge with a completion target."""
    id: int
    status: QuestStatus = QuestStatus.INCOMPLETE
    name: str = ""
    difficulty: str = ""
    number_of_workouts_needed: int = 0
    number_of_workouts_completed: int = 0
    workout_duration: int | None = None  # minutes
    exercise_category: str | None = None
    exercise_muscle: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quest":
        try:
            status = QuestStatus(data.get("status", QuestStatus.INCOMPLETE.value))
        except ValueError:
            status = QuestStatus.INCOMPLETE
        return cls(
            id=int(data.get("id", 0)),
            status=status,
            name=str(data.get("name") or ""),
            difficulty=str(data.get("difficulty") or ""),
            number_of_workouts_needed=max(0, int(data.get("number_of_workouts_needed") or 0)),
            number_of_workouts_completed=max(0, int(data.get("number_of_workouts_completed") or 0)),
            workout_duration=_opt_int(data.get("workout_duration")),
            exercise_category=_opt_str(data.get("exercise_category")),
            exercise_muscle=_opt_str(data.get("exercise_muscle")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "name": self.name,
            "difficulty": self.difficulty,
            "number_of_workouts_needed": self.number_of_workouts_needed,
            "number_of_workouts_completed": self.number_of_workouts_completed,
            "workout_duration": self.workout_duration,
            "exercise_category": self.exercise_category,
            "exercise_muscle": self.exercise_muscle,
        }


@dataclass
class FriendSummary:
    user_id: int
    username: str = ""
    level: int = 0
    class_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FriendSummary":
        klass = data.get("class") or {}
        return cls(
            user_id=int(data.get("user_id", 0)),
            username=str(data.get("username") or ""),
            level=int(data.get("level") or 0),
            class_name=str(klass.get("name") or "") if isinstance(klass, dict) else "",
        )


@dataclass
class FriendRequest:
    request_id: int
    sender_id: int
    sender_username: str = ""
    sender_level: int = 0
    created: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FriendRequest":
        return cls(
            request_id=int(data.get("request_id", 0)),
            sender_id=int(data.get("sender_id", 0)),
            sender_username=str(data.get("sender_username") or ""),
            sender_level=int(data.get("sender_level") or 0),
            created=str(data.get("created") or ""),
        )


@dataclass
class RoutineExercise:
    id: str
    sets: int = 0
    reps: int = 0
    weight: float = 0
    distance: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoutineExercise":
        return cls(
            id=str(data.get("id", "")),
            sets=int(data.get("sets") or 0),
            reps=int(data.get("reps") or 0),
            weight=data.get("weight") or 0,
            distance=data.get("distance") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sets": self.sets,
            "reps": self.reps,
            "weight": self.weight,
            "distance": self.distance,
        }


@dataclass
class Routine:
    name: str
    id: int | None = None
    exercises: list[RoutineExercise] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Routine":
        return cls(
            name=str(data.get("name") or ""),
            id=_opt_int(data.get("id")),
            exercises=[RoutineExercise.from_dict(e) for e in data.get("exercises") or [] if isinstance(e, dict)],
        )


@dataclass
class CharacterClass:
    id: int
    name: str
    strength: int = 0
    endurance: int = 0
    flexibility: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CharacterClass":
        stats = data.get("stats") or {}
        return cls(
            id=int(data.get("id", 0)),
            name=str(data.get("name") or ""),
            strength=int(stats.get("strength") or 0),
            endurance=int(stats.get("endurance") or 0),
            flexibility=int(stats.get("flexibility") or 0),
        )


def empty_schedule() -> list[bool]:
    return [False] * DAYS_PER_WEEK


@dataclass
class OnboardingRecord:
    """
    Registration data accumulated across the onboarding steps.

    workout_schedule is indexed Sunday=0 .. Saturday=6.
    """
    first_name: str = ""
    last_name: str = ""
    class_id: int | None = None
    workout_schedule: list[bool] = field(default_factory=empty_schedule)
    username: str = ""

    def to_payload(self) -> dict[str, Any]:
        """Request body for POST /onboarding."""
        return {
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "class_id": self.class_id,
            "workout_schedule": list(self.workout_schedule),
            "username": self.username.strip(),
        }
