import datetime
import os
import sys
import unittest
from unittest import mock

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ProfileRepository, StatsRepository
from errors import (
    NotAuthenticatedError,
    PersistenceError,
    ReferenceNotFound,
    SubmissionValidationError,
)
from models import SessionDraft
from planner_service import HISTORY_CONTEXT_UNAVAILABLE
from progress_service import ProgressService, StaticAuthProvider
from settings_schema import SettingsSchema


class ProgressServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_progress_service.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.settings = SettingsSchema(db_path=self.db_path)
        self.auth = StaticAuthProvider("u1")
        self.service = ProgressService(self.auth, self.settings).load()

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def _bench_draft(self, day: int, weight: float) -> SessionDraft:
        draft = self.service.start_session("push", date=datetime.date(2024, 3, day))
        draft.body_weight = 80.0
        draft.update_set(0, 0, weight=weight, reps=8, rir=1)
        return draft

    def test_requires_user(self) -> None:
        with self.assertRaises(NotAuthenticatedError):
            ProgressService(StaticAuthProvider(None), self.settings)
        self.auth.user_id = None
        with self.assertRaises(NotAuthenticatedError):
            self.service.start_session("push")
        with self.assertRaises(NotAuthenticatedError):
            self.service.save_preferences({})

    def test_first_load_seeds_plans(self) -> None:
        self.assertEqual(len(self.service.plans), 5)
        self.assertEqual(self.service.selected_plan.id, "pushPullLegs")
        self.assertEqual(self.service.stats.weekly_availability, 3)
        self.assertEqual(self.service.history, [])
        self.assertEqual(self.service.generated_plan().day_names(), ["Push", "Pull", "Legs"])

    def test_plan_order_stable_across_loads(self) -> None:
        reloaded = ProgressService(StaticAuthProvider("u1"), self.settings).load()
        self.assertEqual(
            [p.id for p in reloaded.plans], [p.id for p in self.service.plans]
        )

    def test_load_prefers_profile_values(self) -> None:
        ProfileRepository(self.db_path, "u2").set_weekly_availability(6)
        StatsRepository(self.db_path, "u2").set_document(
            "users/u2/stats/overview",
            {"weeklyAvailability": 2, "experience": 300, "exercisePreferences": {"Hip Hinge": "Glute Ham Raises"}},
        )
        service = ProgressService(StaticAuthProvider("u2"), self.settings).load()
        self.assertEqual(service.stats.weekly_availability, 6)
        self.assertEqual(service.stats.experience, 300)
        self.assertEqual(service.stats.exercise_preferences, {"Hip Hinge": "Glute Ham Raises"})
        self.assertEqual(service.selected_plan.id, "sixDaySplit")

    def test_submit_updates_ledger_and_stats(self) -> None:
        result = self.service.submit(self._bench_draft(1, 60.0))
        self.assertEqual(result.reward.experience_gained, 150)
        self.assertEqual(result.stats.experience, 150)
        self.assertEqual(result.stats.personal_bests.bench_press, 60.0)
        self.assertEqual(result.stats.streak_days, 1)
        self.assertEqual(result.entry.selected_plan_day_id, "push")
        self.assertEqual(len(self.service.history), 1)
        self.assertEqual(self.service.stats.workouts_completed, 1)
        stored = StatsRepository(self.db_path, "u1").fetch_raw()
        self.assertEqual(stored["experience"], 150)
        self.assertEqual(self.service.plan_day_name(self.service.history[0]), "Push Day")

        result = self.service.submit(self._bench_draft(2, 55.0))
        self.assertEqual(result.reward.experience_gained, 100)
        self.assertEqual(result.stats.experience, 250)
        self.assertEqual(result.stats.streak_days, 2)
        self.assertEqual(result.stats.level, 2)
        self.assertEqual([e.key for e in self.service.history], ["2024-03-02", "2024-03-01"])

    def test_submit_counts_stats_written_elsewhere(self) -> None:
        self.service.submit(self._bench_draft(1, 60.0))
        other = ProgressService(StaticAuthProvider("u1"), self.settings).load()
        other.submit(self._bench_draft(2, 50.0))
        result = self.service.submit(self._bench_draft(3, 50.0))
        self.assertEqual(result.stats.workouts_completed, 3)
        self.assertEqual(result.stats.experience, 350)
        self.assertEqual(result.stats.streak_days, 3)
        self.assertEqual(len(self.service.history), 3)

    def test_resubmitting_a_date_replaces_entry(self) -> None:
        self.service.submit(self._bench_draft(1, 60.0))
        self.service.submit(self._bench_draft(1, 70.0))
        self.assertEqual(len(self.service.history), 1)
        self.assertEqual(self.service.stats.workouts_completed, 2)
        self.assertEqual(self.service.stats.streak_days, 1)

    def test_submit_validation(self) -> None:
        draft = SessionDraft(body_weight=-1.0)
        with self.assertRaises(SubmissionValidationError) as ctx:
            self.service.submit(draft)
        self.assertEqual(len(ctx.exception.reasons), 5)
        self.assertEqual(self.service.progress.history(), [])
        self.assertEqual(self.service.stats.experience, 0)

    def test_failed_stats_write_keeps_memory_state(self) -> None:
        failure = PersistenceError("set", "users/u1/stats/overview")
        with mock.patch.object(self.service.stats_repo, "save", side_effect=failure):
            with self.assertRaises(PersistenceError):
                self.service.submit(self._bench_draft(1, 60.0))
        self.assertEqual(self.service.stats.experience, 0)
        self.assertEqual(self.service.history, [])
        # the ledger write already happened
        self.assertEqual(len(self.service.progress.history()), 1)

    def test_save_preferences(self) -> None:
        self.service.save_preferences({"Horizontal Push": "Dumbbell Bench Press"})
        self.assertEqual(
            self.service.stats.exercise_preferences,
            {"Horizontal Push": "Dumbbell Bench Press"},
        )
        self.assertEqual(
            self.service.preference_editor()["Horizontal Push"], "Dumbbell Bench Press"
        )
        draft = self.service.start_session("push")
        self.assertEqual(draft.exercises[0].name, "Dumbbell Bench Press")
        profile = ProfileRepository(self.db_path, "u1").fetch_raw()
        self.assertEqual(
            profile["exercisePreferences"], {"Horizontal Push": "Dumbbell Bench Press"}
        )

    def test_failed_preference_write_keeps_memory_state(self) -> None:
        failure = PersistenceError("set", "users/u1")
        with mock.patch.object(
            self.service.profiles, "save_preferences", side_effect=failure
        ):
            with self.assertRaises(PersistenceError):
                self.service.save_preferences({"Hip Hinge": "Glute Ham Raises"})
        self.assertEqual(self.service.stats.exercise_preferences, {})

    def test_preferences_survive_submission(self) -> None:
        self.service.save_preferences({"Hip Hinge": "Glute Ham Raises"})
        self.service.submit(self._bench_draft(1, 60.0))
        reloaded = ProgressService(StaticAuthProvider("u1"), self.settings).load()
        self.assertEqual(
            reloaded.stats.exercise_preferences, {"Hip Hinge": "Glute Ham Raises"}
        )
        self.assertEqual(reloaded.stats.experience, 150)

    def test_set_weekly_availability(self) -> None:
        self.service.set_weekly_availability(5)
        self.assertEqual(self.service.selected_plan.id, "fiveDaySplit")
        self.assertEqual(len(self.service.generated_plan().split), 5)
        with self.assertRaises(SubmissionValidationError):
            self.service.set_weekly_availability(7)
        self.assertEqual(self.service.stats.weekly_availability, 5)

    def test_start_session_unknown_references(self) -> None:
        with self.assertRaises(ReferenceNotFound):
            self.service.start_session("push", plan_id="retired")
        with self.assertRaises(ReferenceNotFound):
            self.service.start_session("arms")

    def test_split_session(self) -> None:
        draft = self.service.start_split_session(3)
        self.assertEqual((draft.plan_id, draft.day_id), ("split3", "day3"))
        self.assertEqual(draft.exercises[0].name, "Squats")
        with self.assertRaises(ReferenceNotFound):
            self.service.start_split_session(4)

    def test_start_from_history(self) -> None:
        self.service.submit(self._bench_draft(1, 60.0))
        today = datetime.date(2024, 3, 9)
        draft = self.service.start_from_history("2024-03-01", today)
        self.assertEqual(draft.date, today)
        self.assertEqual(draft.body_weight, 80.0)
        self.assertEqual(draft.exercises[0].logged_sets[0].weight, 60.0)
        self.assertEqual(draft.warnings, [])
        with self.assertRaises(ReferenceNotFound):
            self.service.start_from_history("2020-01-01")

    def test_history_with_retired_plan(self) -> None:
        draft = self._bench_draft(1, 60.0)
        draft.plan_id = "retired"
        self.service.submit(draft)
        draft = self.service.start_from_history("2024-03-01")
        self.assertEqual(draft.warnings, [HISTORY_CONTEXT_UNAVAILABLE])
        self.assertEqual(
            self.service.plan_day_name(self.service.history[0]), "Unknown training day"
        )

    def test_achievements_and_level_progress(self) -> None:
        self.service.submit(self._bench_draft(1, 60.0))
        progress = self.service.level_progress()
        self.assertEqual((progress.level, progress.floor, progress.next_floor), (2, 100, 400))
        ids = [a.id for a in self.service.achievements()]
        self.assertEqual(ids, ["workout-streak", "bench-press", "workouts-completed"])


if __name__ == "__main__":
    unittest.main()
