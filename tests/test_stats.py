import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ProgressRepository
from models import LiftCategory, LoggedExercise, ProgressEntry, SetEntry
from stats_service import (
    StatisticsService,
    best_set,
    entry_volume,
    session_bests,
    workout_streak,
)


def _exercise(name: str, *sets: tuple) -> LoggedExercise:
    return LoggedExercise(
        name=name,
        sets=max(len(sets), 1),
        reps=8,
        logged_sets=[SetEntry(weight=w, reps=r, rir=i) for w, r, i in sets],
    )


class BestSetTestCase(unittest.TestCase):
    def test_heaviest_set_wins(self) -> None:
        exercises = [_exercise("Bench Press", (80, 8, 2), (90, 6, 1), (85, 7, 1))]
        self.assertEqual(
            best_set(exercises, "Bench Press"), SetEntry(weight=90, reps=6, rir=1)
        )

    def test_first_seen_maximum(self) -> None:
        exercises = [_exercise("Bench Press", (80, 5, 1), (85, 5, 1), (85, 8, 0))]
        self.assertEqual(
            best_set(exercises, "Bench Press"), SetEntry(weight=85, reps=5, rir=1)
        )

    def test_ties_keep_first(self) -> None:
        exercises = [_exercise("Squats", (100, 5, 2), (100, 8, 0))]
        self.assertEqual(best_set(exercises, "Squats").reps, 5)

    def test_missing_exercise_or_no_sets(self) -> None:
        exercises = [_exercise("Squats"), _exercise("Bench Press", (50, 5, 1))]
        self.assertIsNone(best_set(exercises, "Deadlift"))
        self.assertIsNone(best_set(exercises, "Squats"))
        self.assertIsNone(best_set([], "Squats"))

    def test_all_zero_weights(self) -> None:
        exercises = [_exercise("Leg Press", (0, 10, 2), (0, 12, 1))]
        self.assertEqual(best_set(exercises, "Leg Press"), SetEntry())

    def test_session_bests(self) -> None:
        bests = session_bests(
            [
                _exercise("Bench Press", (100, 5, 1)),
                _exercise("Dumbbell Bench Press", (105, 5, 1)),
                _exercise("Supino Inclinado", (70, 5, 1)),
                _exercise("Hack Squats", (140, 8, 1)),
                _exercise("Leg Press", (300, 10, 1)),
                _exercise("Romanian Deadlifts"),
            ]
        )
        self.assertEqual(bests[LiftCategory.BENCH_PRESS], 105)
        self.assertEqual(bests[LiftCategory.SQUAT], 140)
        self.assertEqual(bests[LiftCategory.DEADLIFT], 0.0)
        self.assertNotIn(LiftCategory.NONE, bests)


class StreakTestCase(unittest.TestCase):
    def test_empty(self) -> None:
        self.assertEqual(workout_streak([]), {"current": 0, "record": 0})

    def test_runs(self) -> None:
        d = datetime.date
        dates = [
            d(2024, 1, 1),
            d(2024, 1, 2),
            d(2024, 1, 3),
            d(2024, 1, 10),
            d(2024, 1, 11),
            d(2024, 1, 11),
        ]
        self.assertEqual(workout_streak(dates), {"current": 2, "record": 3})
        self.assertEqual(workout_streak(dates, d(2024, 1, 12))["current"], 2)
        self.assertEqual(workout_streak(dates, d(2024, 1, 13))["current"], 0)

    def test_order_does_not_matter(self) -> None:
        d = datetime.date
        dates = [d(2024, 3, 3), d(2024, 3, 1), d(2024, 3, 2)]
        self.assertEqual(workout_streak(dates), {"current": 3, "record": 3})


class StatisticsServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_stats.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.repo = ProgressRepository(self.db_path, "u1")
        self.repo.record(
            ProgressEntry(
                date=datetime.date(2024, 1, 1),
                logged_exercises=[_exercise("Bench Press", (80, 5, 1), (85, 3, 0))],
            )
        )
        self.repo.record(
            ProgressEntry(
                date=datetime.date(2024, 1, 2),
                logged_exercises=[
                    _exercise("Bench Press", (90, 5, 1)),
                    _exercise("Squats", (100, 5, 2)),
                ],
            )
        )
        self.service = StatisticsService(self.repo)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_entry_volume(self) -> None:
        entry = self.repo.fetch("2024-01-01")
        self.assertEqual(entry_volume(entry), 80 * 5 + 85 * 3)

    def test_exercise_history(self) -> None:
        rows = self.service.exercise_history("Bench Press")
        self.assertEqual([r["date"] for r in rows], ["2024-01-01", "2024-01-02"])
        self.assertEqual(rows[0]["weight"], 85)
        self.assertAlmostEqual(rows[1]["est_1rm"], round(90 * (1 + 0.0333 * 5), 2))
        self.assertEqual(len(self.service.exercise_history("Squats")), 1)
        self.assertEqual(self.service.exercise_history("Deadlift"), [])

    def test_overview(self) -> None:
        overview = self.service.overview(datetime.date(2024, 1, 3))
        self.assertEqual(overview["workouts"], 2)
        self.assertEqual(overview["last_workout"], "2024-01-02")
        self.assertEqual(overview["total_volume"], 80 * 5 + 85 * 3 + 90 * 5 + 100 * 5)
        self.assertEqual(overview["current_streak"], 2)
        self.assertEqual(overview["record_streak"], 2)


if __name__ == "__main__":
    unittest.main()
