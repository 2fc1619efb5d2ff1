from __future__ import annotations

from typing import Iterable, Optional

from catalog import TRACKED_LIFTS
from models import (
    Achievement,
    LevelProgress,
    LiftCategory,
    LoggedExercise,
    SessionReward,
    UserStats,
)
from stats_service import session_bests
from tools import MathTools


class GamificationService:
    """Experience, levels, personal bests and achievements."""

    BASE_EXPERIENCE = 100
    PERSONAL_BEST_BONUS = 50
    STREAK_TARGET = 7
    BENCH_PRESS_TARGET = 100
    WORKOUTS_TARGET = 50

    @staticmethod
    def level(experience: int) -> int:
        return MathTools.level_for_experience(experience)

    @staticmethod
    def xp_floor(level: int) -> int:
        return MathTools.experience_for_level(level)

    @classmethod
    def level_progress(cls, stats: UserStats) -> LevelProgress:
        """Return the data needed to draw a progress bar to the next level."""
        level = cls.level(stats.experience)
        floor = cls.xp_floor(level)
        next_floor = cls.xp_floor(level + 1)
        return LevelProgress(
            level=level,
            experience=stats.experience,
            floor=floor,
            next_floor=next_floor,
            fraction=(stats.experience - floor) / (next_floor - floor),
        )

    @classmethod
    def apply_session(
        cls,
        stats: UserStats,
        exercises: Iterable[LoggedExercise],
        streak_days: Optional[int] = None,
    ) -> tuple[UserStats, SessionReward]:
        """Return the stats after completing a session, and the reward.

        ``stats`` is not modified. Each tracked lift whose best weight in this
        session beats the stored personal best is raised and earns a bonus.
        Exercise preferences are carried over untouched.
        """
        bests = session_bests(exercises)
        personal_bests = stats.personal_bests
        improved: list[LiftCategory] = []
        for category in TRACKED_LIFTS:
            if bests[category] > personal_bests.get(category):
                personal_bests = personal_bests.raised(category, bests[category])
                improved.append(category)
        bonus = cls.PERSONAL_BEST_BONUS * len(improved)
        gained = cls.BASE_EXPERIENCE + bonus
        update = {
            "experience": stats.experience + gained,
            "workouts_completed": stats.workouts_completed + 1,
            "personal_bests": personal_bests,
            "exercise_preferences": dict(stats.exercise_preferences),
        }
        if streak_days is not None:
            update["streak_days"] = streak_days
        reward = SessionReward(
            base=cls.BASE_EXPERIENCE,
            bonus=bonus,
            experience_gained=gained,
            improved=improved,
        )
        return stats.model_copy(update=update), reward

    @classmethod
    def achievements(cls, stats: UserStats) -> list[Achievement]:
        return [
            Achievement(
                id="workout-streak",
                title="Consistency King",
                description=f"Train {cls.STREAK_TARGET} days in a row",
                progress=stats.streak_days,
                target=cls.STREAK_TARGET,
            ),
            Achievement(
                id="bench-press",
                title="Bench Press Master",
                description=f"Reach {cls.BENCH_PRESS_TARGET} kg on the bench press",
                progress=stats.personal_bests.bench_press,
                target=cls.BENCH_PRESS_TARGET,
            ),
            Achievement(
                id="workouts-completed",
                title="Dedicated Athlete",
                description=f"Complete {cls.WORKOUTS_TARGET} workouts",
                progress=stats.workouts_completed,
                target=cls.WORKOUTS_TARGET,
            ),
        ]

    @staticmethod
    def merge_stats(
        profile: Optional[dict],
        stats_record: Optional[dict],
        default_availability: int = 3,
    ) -> UserStats:
        """Combine the profile and stats records into one snapshot.

        Availability and preferences come from the profile when set there (an
        empty preference mapping counts as unset), then from the stats record,
        then from the defaults.
        """
        profile = profile or {}
        data = dict(stats_record or {})
        availability = profile.get("weeklyAvailability")
        if availability is None:
            availability = data.get("weeklyAvailability")
        if availability is None:
            availability = default_availability
        data["weeklyAvailability"] = availability
        data["exercisePreferences"] = (
            profile.get("exercisePreferences")
            or data.get("exercisePreferences")
            or {}
        )
        return UserStats.from_document(data)
