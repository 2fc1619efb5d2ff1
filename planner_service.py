from __future__ import annotations

import copy
import datetime
import logging
from typing import Iterable, Mapping, Optional

from catalog import (
    EXERCISES,
    MUSCLE_GROUP_PLANS,
    PATTERNS,
    PLAN_FOR_AVAILABILITY,
    SPLITS,
)
from errors import ReferenceNotFound
from models import (
    ExerciseDetail,
    GeneratedPlan,
    LoggedExercise,
    MovementPattern,
    PlanDay,
    PlannedSlot,
    ProgressEntry,
    SessionDraft,
    SetEntry,
    SplitDay,
    TrainingPlan,
)

logger = logging.getLogger(__name__)

HISTORY_CONTEXT_UNAVAILABLE = "historical plan context unavailable"
UNKNOWN_DAY_NAME = "Unknown training day"


class SplitGenerator:
    """Turns a weekly availability into an ordered training split."""

    def __init__(self, fallback_availability: int = 4) -> None:
        if fallback_availability not in SPLITS:
            raise ValueError(
                f"fallback availability must be one of {sorted(SPLITS)}"
            )
        self.fallback_availability = fallback_availability

    def effective_availability(self, weekly_availability: int | None) -> int:
        """Return ``weekly_availability`` or the fallback when unsupported."""
        if weekly_availability in SPLITS:
            return weekly_availability
        logger.warning(
            "weekly availability %r not supported, using the %d day split",
            weekly_availability,
            self.fallback_availability,
        )
        return self.fallback_availability

    def generate(self, weekly_availability: int | None) -> GeneratedPlan:
        days = self.effective_availability(weekly_availability)
        split = [
            SplitDay(
                name=day_name,
                muscle_groups={
                    group: [PATTERNS[name] for name in names]
                    for group, names in MUSCLE_GROUP_PLANS[day_name].items()
                },
            )
            for day_name in SPLITS[days]
        ]
        return GeneratedPlan(weekly_availability=days, split=split)

    @staticmethod
    def to_training_plan(plan: GeneratedPlan) -> TrainingPlan:
        """Express a generated split as a loggable plan.

        Each slot takes the standard exercise's set count and the low end of
        its rep range.
        """
        days = []
        for index, split_day in enumerate(plan.split, start=1):
            slots = [
                PlannedSlot(
                    pattern_name=p.name,
                    sets=p.standard.sets,
                    reps=_low_rep_target(p.standard.reps),
                )
                for p in split_day.patterns()
            ]
            days.append(
                PlanDay(id=f"day{index}", name=f"Day {index}: {split_day.name}", slots=slots)
            )
        return TrainingPlan(
            id=f"split{plan.weekly_availability}",
            name=f"{plan.weekly_availability} day split",
            description=" / ".join(plan.day_names()),
            days=days,
        )


def _low_rep_target(reps: str) -> int:
    head = reps.split("-", 1)[0].strip()
    return int(head) if head.isdigit() and int(head) > 0 else 1


class PreferenceResolver:
    """Resolves movement patterns to the user's chosen exercises."""

    @staticmethod
    def resolve(
        pattern: MovementPattern, prefs: Mapping[str, str]
    ) -> ExerciseDetail:
        """Return the preferred exercise for ``pattern``.

        Missing or stale preferences resolve to the standard exercise. This is
        the intended fallback for catalog changes, not an error.
        """
        chosen = prefs.get(pattern.name)
        if chosen is None or chosen == pattern.standard.name:
            return pattern.standard
        for alt in pattern.alternatives:
            if alt.name == chosen:
                return alt
        logger.debug(
            "preference %r for %s not in catalog, using %s",
            chosen,
            pattern.name,
            pattern.standard.name,
        )
        return pattern.standard

    @staticmethod
    def unique_patterns(plan: GeneratedPlan) -> list[MovementPattern]:
        """Return every pattern of ``plan`` once, in first-seen order."""
        seen: dict[str, MovementPattern] = {}
        for day in plan.split:
            for pattern in day.patterns():
                if pattern.name not in seen:
                    seen[pattern.name] = pattern
        return list(seen.values())

    @classmethod
    def initial_selection(
        cls, plan: GeneratedPlan, prefs: Mapping[str, str]
    ) -> dict[str, str]:
        """Return pattern name -> exercise name for the preference editor."""
        return {
            p.name: cls.resolve(p, prefs).name for p in cls.unique_patterns(plan)
        }

    @classmethod
    def day_exercises(
        cls, day: SplitDay, prefs: Mapping[str, str]
    ) -> list[ExerciseDetail]:
        return [cls.resolve(p, prefs) for p in day.patterns()]


class SessionBuilder:
    """Builds loggable sessions from plan days or past sessions."""

    def __init__(
        self,
        patterns: Mapping[str, MovementPattern] = PATTERNS,
        resolver: PreferenceResolver | None = None,
    ) -> None:
        self.patterns = patterns
        self.resolver = resolver or PreferenceResolver()

    def target(self, slot: PlannedSlot, prefs: Mapping[str, str]) -> ExerciseDetail:
        """Return the concrete exercise a slot resolves to."""
        pattern = self.patterns.get(slot.pattern_name)
        if pattern is not None:
            return self.resolver.resolve(pattern, prefs)
        return ExerciseDetail(
            name=slot.pattern_name,
            sets=slot.sets,
            reps=str(slot.reps),
            rir=0,
        )

    def build(self, day: PlanDay, prefs: Mapping[str, str]) -> list[LoggedExercise]:
        exercises = []
        for slot in day.slots:
            detail = self.target(slot, prefs)
            exercises.append(
                LoggedExercise(
                    name=detail.name,
                    sets=slot.sets,
                    reps=slot.reps,
                    logged_sets=[SetEntry() for _ in range(slot.sets)],
                    movement_pattern_name=slot.pattern_name,
                )
            )
        return exercises

    def draft(
        self,
        plan: TrainingPlan,
        day_id: str,
        prefs: Mapping[str, str],
        date: datetime.date | None = None,
    ) -> SessionDraft:
        day = plan.find_day(day_id)
        if day is None:
            raise ReferenceNotFound("plan day", day_id)
        return SessionDraft(
            plan_id=plan.id,
            day_id=day.id,
            date=date or datetime.date.today(),
            exercises=self.build(day, prefs),
            targets=[self.target(slot, prefs) for slot in day.slots],
        )

    def from_history(
        self,
        entry: ProgressEntry,
        plans: Iterable[TrainingPlan],
        today: datetime.date | None = None,
    ) -> SessionDraft:
        """Use a past session as the template for a new one.

        The logged exercises are self-contained, so a plan or day that no
        longer exists only adds a warning to the draft.
        """
        warnings = []
        try:
            find_day(plans, entry.selected_plan_id, entry.selected_plan_day_id)
        except ReferenceNotFound as e:
            logger.warning("%s for %s: %s", HISTORY_CONTEXT_UNAVAILABLE, entry.key, e)
            warnings.append(HISTORY_CONTEXT_UNAVAILABLE)
        exercises = copy.deepcopy(entry.logged_exercises)
        targets = []
        for ex in exercises:
            detail = EXERCISES.get(ex.name)
            if detail is None:
                detail = ExerciseDetail(
                    name=ex.name, sets=ex.sets, reps=str(ex.reps), rir=0
                )
            targets.append(detail)
        return SessionDraft(
            plan_id=entry.selected_plan_id,
            day_id=entry.selected_plan_day_id,
            date=today or datetime.date.today(),
            body_weight=entry.body_weight or None,
            exercises=exercises,
            targets=targets,
            warnings=warnings,
        )


def find_plan(plans: Iterable[TrainingPlan], plan_id: str | None) -> TrainingPlan:
    for plan in plans:
        if plan.id == plan_id:
            return plan
    raise ReferenceNotFound("plan", plan_id)


def find_day(
    plans: Iterable[TrainingPlan], plan_id: str | None, day_id: str | None
) -> PlanDay:
    day = find_plan(plans, plan_id).find_day(day_id)
    if day is None:
        raise ReferenceNotFound("plan day", day_id)
    return day


def plan_day_name(
    plans: Iterable[TrainingPlan], plan_id: str | None, day_id: str | None
) -> str:
    try:
        return find_day(plans, plan_id, day_id).name
    except ReferenceNotFound:
        return UNKNOWN_DAY_NAME


def select_plan(
    plans: list[TrainingPlan],
    weekly_availability: int | None,
    fallback_availability: int = 4,
) -> Optional[TrainingPlan]:
    """Pick the predefined plan matching the user's weekly availability."""
    if weekly_availability not in PLAN_FOR_AVAILABILITY:
        weekly_availability = fallback_availability
    plan_id = PLAN_FOR_AVAILABILITY.get(weekly_availability)
    for plan in plans:
        if plan.id == plan_id:
            return plan
    return plans[0] if plans else None
