from __future__ import annotations

import datetime
from typing import Iterable, Optional

from catalog import TRACKED_LIFTS, lift_category
from db import ProgressRepository
from models import LiftCategory, LoggedExercise, ProgressEntry, SetEntry
from tools import MathTools


def best_of(sets: Iterable[SetEntry]) -> SetEntry:
    """Return the heaviest set, the first one seen on ties.

    The running maximum starts from an empty zero-weight set, so a list whose
    weights are all zero yields that empty set.
    """
    best = SetEntry()
    for entry in sets:
        if entry.weight > best.weight:
            best = entry
    return best


def best_set(
    exercises: Iterable[LoggedExercise], exercise_name: str
) -> Optional[SetEntry]:
    """Return the best set logged for ``exercise_name`` or ``None``."""
    for ex in exercises:
        if ex.name == exercise_name:
            if not ex.logged_sets:
                return None
            return best_of(ex.logged_sets)
    return None


def session_bests(exercises: Iterable[LoggedExercise]) -> dict[LiftCategory, float]:
    """Return the heaviest weight per tracked lift within one session."""
    bests = {category: 0.0 for category in TRACKED_LIFTS}
    for ex in exercises:
        category = lift_category(ex.name)
        if category is LiftCategory.NONE or not ex.logged_sets:
            continue
        bests[category] = max(bests[category], best_of(ex.logged_sets).weight)
    return bests


def workout_streak(
    dates: Iterable[datetime.date], today: datetime.date | None = None
) -> dict[str, int]:
    """Return current and record streaks of consecutive training days.

    ``current`` is the run ending at the latest date. When ``today`` is given
    and the latest date is older than yesterday, ``current`` is 0.
    """
    days = sorted(set(dates))
    if not days:
        return {"current": 0, "record": 0}
    record = 1
    current = 1
    for i in range(1, len(days)):
        gap = (days[i] - days[i - 1]).days
        if gap == 1:
            current += 1
        else:
            record = max(record, current)
            current = 1
    record = max(record, current)
    if today is not None and (today - days[-1]).days > 1:
        current = 0
    return {"current": current, "record": record}


def entry_volume(entry: ProgressEntry) -> float:
    return MathTools.volume(
        [(s.reps, s.weight) for ex in entry.logged_exercises for s in ex.logged_sets]
    )


class StatisticsService:
    """Compute progress statistics from the ledger."""

    def __init__(self, progress_repo: ProgressRepository) -> None:
        self.progress = progress_repo

    def exercise_history(self, exercise_name: str) -> list[dict]:
        """Return the best set of ``exercise_name`` per session, oldest first."""
        rows = []
        for entry in reversed(self.progress.history()):
            best = best_set(entry.logged_exercises, exercise_name)
            if best is None:
                continue
            rows.append(
                {
                    "date": entry.key,
                    "weight": best.weight,
                    "reps": best.reps,
                    "rir": best.rir,
                    "est_1rm": round(MathTools.epley_1rm(best.weight, best.reps), 2),
                }
            )
        return rows

    def overview(self, today: datetime.date | None = None) -> dict:
        entries = self.progress.history()
        streak = workout_streak((e.date for e in entries), today)
        return {
            "workouts": len(entries),
            "last_workout": entries[0].key if entries else None,
            "total_volume": round(sum(entry_volume(e) for e in entries), 2),
            "current_streak": streak["current"],
            "record_streak": streak["record"],
        }
