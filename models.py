from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from tools import MathTools


class LiftCategory(str, Enum):
    """Tracked lift a catalog exercise counts towards."""

    BENCH_PRESS = "benchPress"
    SQUAT = "squat"
    DEADLIFT = "deadlift"
    NONE = "none"


class DocumentModel(BaseModel):
    """Base for values persisted as documents (camelCase keys on disk)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, data: dict):
        return cls.model_validate(data)


class ExerciseDetail(DocumentModel):
    model_config = ConfigDict(frozen=True)

    name: str
    sets: int = Field(gt=0)
    reps: str
    rir: int = Field(ge=0)
    notes: Optional[str] = None
    category: LiftCategory = LiftCategory.NONE


class MovementPattern(DocumentModel):
    model_config = ConfigDict(frozen=True)

    name: str
    standard: ExerciseDetail
    alternatives: tuple[ExerciseDetail, ...] = ()

    @model_validator(mode="after")
    def _standard_not_repeated(self) -> "MovementPattern":
        if any(alt.name == self.standard.name for alt in self.alternatives):
            raise ValueError(
                f"{self.name}: standard exercise listed as an alternative"
            )
        return self

    def options(self) -> list[ExerciseDetail]:
        """Return the standard exercise followed by the alternatives."""
        return [self.standard, *self.alternatives]


class PlannedSlot(DocumentModel):
    pattern_name: str = Field(alias="name")
    sets: int = Field(gt=0)
    reps: int = Field(gt=0)


class PlanDay(DocumentModel):
    id: str
    name: str
    slots: list[PlannedSlot] = Field(default_factory=list, alias="exercises")


class TrainingPlan(DocumentModel):
    id: str
    name: str
    description: str = ""
    days: list[PlanDay] = Field(default_factory=list)

    def find_day(self, day_id: str | None) -> PlanDay | None:
        for day in self.days:
            if day.id == day_id:
                return day
        return None


class SetEntry(DocumentModel):
    weight: float = Field(default=0.0, ge=0)
    reps: int = Field(default=0, ge=0)
    rir: int = Field(default=0, ge=0)


class LoggedExercise(DocumentModel):
    name: str
    sets: int = Field(gt=0)
    reps: int = Field(gt=0)
    logged_sets: list[SetEntry] = Field(default_factory=list)
    movement_pattern_name: Optional[str] = None


class ProgressEntry(DocumentModel):
    date: datetime.date
    body_weight: float = Field(default=0.0, ge=0)
    selected_plan_id: Optional[str] = None
    selected_plan_day_id: Optional[str] = None
    logged_exercises: list[LoggedExercise] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return self.date.isoformat()


class PersonalBests(DocumentModel):
    bench_press: float = Field(default=0.0, ge=0)
    squat: float = Field(default=0.0, ge=0)
    deadlift: float = Field(default=0.0, ge=0)

    def get(self, category: LiftCategory) -> float:
        return getattr(self, _PB_FIELDS[category])

    def raised(self, category: LiftCategory, value: float) -> "PersonalBests":
        """Return a copy with ``category`` set to ``value`` if that is higher."""
        if value <= self.get(category):
            return self
        return self.model_copy(update={_PB_FIELDS[category]: value})


_PB_FIELDS = {
    LiftCategory.BENCH_PRESS: "bench_press",
    LiftCategory.SQUAT: "squat",
    LiftCategory.DEADLIFT: "deadlift",
}


class UserStats(DocumentModel):
    experience: int = Field(default=0, ge=0)
    workouts_completed: int = Field(default=0, ge=0)
    streak_days: int = Field(default=0, ge=0)
    personal_bests: PersonalBests = Field(default_factory=PersonalBests)
    weekly_availability: int = 3
    exercise_preferences: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def level(self) -> int:
        return MathTools.level_for_experience(self.experience)


class LevelProgress(BaseModel):
    level: int
    experience: int
    floor: int
    next_floor: int
    fraction: float


class Achievement(BaseModel):
    id: str
    title: str
    description: str
    progress: float
    target: float

    @computed_field
    @property
    def completed(self) -> bool:
        return self.progress >= self.target


class SplitDay(BaseModel):
    """One generated training day: muscle group -> movement patterns."""

    name: str
    muscle_groups: dict[str, list[MovementPattern]]

    def patterns(self) -> list[MovementPattern]:
        return [p for group in self.muscle_groups.values() for p in group]


class GeneratedPlan(BaseModel):
    weekly_availability: int
    split: list[SplitDay]

    def day_names(self) -> list[str]:
        return [day.name for day in self.split]


class SessionDraft(DocumentModel):
    """Editable session being prepared for submission."""

    plan_id: Optional[str] = None
    day_id: Optional[str] = None
    date: Optional[datetime.date] = None
    body_weight: Optional[float] = None
    exercises: list[LoggedExercise] = Field(default_factory=list)
    targets: list[ExerciseDetail] = Field(default_factory=list)
    active_view: str = "log"
    warnings: list[str] = Field(default_factory=list)

    def add_set(self, exercise_index: int) -> SetEntry:
        """Append an empty set to the exercise at ``exercise_index``."""
        entry = SetEntry()
        self._exercise(exercise_index).logged_sets.append(entry)
        return entry

    def update_set(self, exercise_index: int, set_index: int, **fields) -> SetEntry:
        exercise = self._exercise(exercise_index)
        if not 0 <= set_index < len(exercise.logged_sets):
            raise ValueError("set not found")
        current = exercise.logged_sets[set_index]
        updated = SetEntry(**{**current.model_dump(), **fields})
        exercise.logged_sets[set_index] = updated
        return updated

    def _exercise(self, index: int) -> LoggedExercise:
        if not 0 <= index < len(self.exercises):
            raise ValueError("exercise not found")
        return self.exercises[index]


class SessionReward(DocumentModel):
    base: int
    bonus: int
    experience_gained: int
    improved: list[LiftCategory] = Field(default_factory=list)


class SubmissionResult(DocumentModel):
    entry: ProgressEntry
    stats: UserStats
    reward: SessionReward
