from __future__ import annotations

import copy
import datetime
import logging
import threading
from typing import Mapping, Optional, Protocol

from pydantic import ValidationError

from catalog import PREDEFINED_PLANS, SUPPORTED_AVAILABILITY
from db import (
    ProfileRepository,
    ProgressRepository,
    StatsRepository,
    TrainingPlanRepository,
)
from errors import (
    NotAuthenticatedError,
    PersistenceError,
    ReferenceNotFound,
    SubmissionValidationError,
)
from gamification_service import GamificationService
from models import (
    Achievement,
    GeneratedPlan,
    LevelProgress,
    ProgressEntry,
    SessionDraft,
    SubmissionResult,
    TrainingPlan,
    UserStats,
)
from planner_service import (
    PreferenceResolver,
    SessionBuilder,
    SplitGenerator,
    find_plan,
    plan_day_name,
    select_plan,
)
from settings_schema import SettingsSchema
from stats_service import workout_streak

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    def current_user_id(self) -> Optional[str]: ...


class StaticAuthProvider:
    """Auth provider returning a fixed user id (``None`` when signed out)."""

    def __init__(self, user_id: Optional[str] = None) -> None:
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id


class ProgressService:
    """Coordinates plan selection, session logging and stats for one user.

    In-memory state (``stats``, ``history``, ``plans``) is only replaced once
    every store call of an operation has succeeded.
    """

    def __init__(
        self,
        auth: AuthProvider,
        settings: SettingsSchema | None = None,
        progress_repo: ProgressRepository | None = None,
        stats_repo: StatsRepository | None = None,
        profile_repo: ProfileRepository | None = None,
        plan_repo: TrainingPlanRepository | None = None,
    ) -> None:
        self.auth = auth
        self.settings = settings or SettingsSchema()
        user_id = self._require_user()
        db_path = self.settings.db_path
        self.progress = progress_repo or ProgressRepository(db_path, user_id)
        self.stats_repo = stats_repo or StatsRepository(db_path, user_id)
        self.profiles = profile_repo or ProfileRepository(db_path, user_id)
        self.plan_repo = plan_repo or TrainingPlanRepository(db_path)
        self.splits = SplitGenerator(self.settings.fallback_weekly_availability)
        self.sessions = SessionBuilder()
        self.stats = UserStats(
            weekly_availability=self.settings.default_weekly_availability
        )
        self.history: list[ProgressEntry] = []
        self.plans: list[TrainingPlan] = []
        self.selected_plan: TrainingPlan | None = None
        self._lock = threading.Lock()

    def _require_user(self) -> str:
        user_id = self.auth.current_user_id()
        if not user_id:
            raise NotAuthenticatedError()
        return user_id

    def load(self) -> "ProgressService":
        """Read history, stats and plans, seeding the plans on first use."""
        self._require_user()
        history = self.progress.history()
        stats = self._read_stats()
        plans = self.plan_repo.ensure_defaults(PREDEFINED_PLANS)
        self.history = history
        self.stats = stats
        self.plans = plans
        self.selected_plan = self._select_plan(stats)
        return self

    def _read_stats(self) -> UserStats:
        profile = self.profiles.fetch_raw()
        stats_record = self.stats_repo.fetch_raw()
        try:
            return GamificationService.merge_stats(
                profile, stats_record, self.settings.default_weekly_availability
            )
        except ValidationError as e:
            raise PersistenceError("decode", self.stats_repo.path, e) from e

    def _select_plan(self, stats: UserStats) -> TrainingPlan | None:
        return select_plan(
            self.plans,
            stats.weekly_availability,
            self.settings.fallback_weekly_availability,
        )

    def generated_plan(self) -> GeneratedPlan:
        return self.splits.generate(self.stats.weekly_availability)

    def preference_editor(self) -> dict[str, str]:
        """Return the current choice for every pattern of the generated plan."""
        return PreferenceResolver.initial_selection(
            self.generated_plan(), self.stats.exercise_preferences
        )

    def start_session(
        self,
        day_id: str,
        plan_id: str | None = None,
        date: datetime.date | None = None,
    ) -> SessionDraft:
        """Build a new draft for a predefined plan day."""
        self._require_user()
        if plan_id is None:
            if self.selected_plan is None:
                raise ReferenceNotFound("plan", None)
            plan_id = self.selected_plan.id
        plan = find_plan(self.plans, plan_id)
        return self.sessions.draft(
            plan, day_id, self.stats.exercise_preferences, date
        )

    def start_split_session(
        self, day_number: int, date: datetime.date | None = None
    ) -> SessionDraft:
        """Build a draft for "Day N" of the generated split (1-based)."""
        self._require_user()
        plan = self.splits.to_training_plan(self.generated_plan())
        if not 1 <= day_number <= len(plan.days):
            raise ReferenceNotFound("split day", str(day_number))
        return self.sessions.draft(
            plan, plan.days[day_number - 1].id, self.stats.exercise_preferences, date
        )

    def start_from_history(
        self, date_key: str, today: datetime.date | None = None
    ) -> SessionDraft:
        """Build a draft from a logged session."""
        self._require_user()
        for entry in self.history:
            if entry.key == date_key:
                return self.sessions.from_history(entry, self.plans, today)
        raise ReferenceNotFound("progress entry", date_key)

    @staticmethod
    def validate(draft: SessionDraft) -> list[str]:
        reasons = []
        if not draft.plan_id:
            reasons.append("no training plan selected")
        if not draft.day_id:
            reasons.append("no training day selected")
        if draft.date is None:
            reasons.append("no date selected")
        if not draft.exercises:
            reasons.append("no exercises to log")
        if draft.body_weight is not None and draft.body_weight < 0:
            reasons.append("body weight must not be negative")
        return reasons

    def submit(self, draft: SessionDraft) -> SubmissionResult:
        """Record a session and update the stats.

        Stats and history are re-read from the store under the service lock,
        so concurrent submissions and writes from other processes are counted.
        The ledger write and the stats write are separate; if the second fails
        the session is recorded but the stats are not. Callers reload before
        retrying.
        """
        self._require_user()
        reasons = self.validate(draft)
        if reasons:
            raise SubmissionValidationError(reasons)
        entry = ProgressEntry(
            date=draft.date,
            body_weight=draft.body_weight or 0.0,
            selected_plan_id=draft.plan_id,
            selected_plan_day_id=draft.day_id,
            logged_exercises=copy.deepcopy(draft.exercises),
        )
        with self._lock:
            current = self._read_stats()
            dates = [e.date for e in self.progress.history() if e.date != entry.date]
            streak = workout_streak([*dates, entry.date])["current"]
            stats, reward = GamificationService.apply_session(
                current, entry.logged_exercises, streak
            )
            self.progress.record(entry)
            self.stats_repo.save(stats)
            history = self.progress.history()
            self.stats = stats
            self.history = history
        logger.info(
            "recorded session %s: +%d XP, level %d",
            entry.key,
            reward.experience_gained,
            stats.level,
        )
        return SubmissionResult(entry=entry, stats=stats, reward=reward)

    def save_preferences(self, prefs: Mapping[str, str]) -> UserStats:
        """Persist the global pattern -> exercise choices."""
        self._require_user()
        prefs = dict(prefs)
        with self._lock:
            self.profiles.save_preferences(prefs)
            self.stats = self.stats.model_copy(
                update={"exercise_preferences": prefs}
            )
            return self.stats

    def set_weekly_availability(self, days: int) -> UserStats:
        self._require_user()
        if days not in SUPPORTED_AVAILABILITY:
            raise SubmissionValidationError(
                [f"weekly availability must be one of {list(SUPPORTED_AVAILABILITY)}"]
            )
        with self._lock:
            self.profiles.set_weekly_availability(days)
            self.stats = self.stats.model_copy(update={"weekly_availability": days})
            self.selected_plan = self._select_plan(self.stats)
            return self.stats

    def plan_day_name(self, entry: ProgressEntry) -> str:
        """Return the name of the plan day ``entry`` was logged against."""
        return plan_day_name(
            self.plans, entry.selected_plan_id, entry.selected_plan_day_id
        )

    def achievements(self) -> list[Achievement]:
        return GamificationService.achievements(self.stats)

    def level_progress(self) -> LevelProgress:
        return GamificationService.level_progress(self.stats)
