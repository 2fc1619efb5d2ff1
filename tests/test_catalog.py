import os
import sys
import unittest

from pydantic import ValidationError

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from catalog import (
    EXERCISES,
    PATTERNS,
    PLAN_FOR_AVAILABILITY,
    PREDEFINED_PLANS,
    SPLITS,
    exercise,
    lift_category,
    pattern,
)
from models import ExerciseDetail, LiftCategory, MovementPattern


class CatalogTestCase(unittest.TestCase):
    def test_exercise_lookup(self) -> None:
        bench = exercise("Bench Press")
        self.assertEqual(bench.sets, 4)
        self.assertEqual(bench.reps, "6-8")
        self.assertEqual(bench.rir, 1)
        self.assertEqual(bench.notes, "Control the eccentric phase")
        self.assertIsNone(exercise("Unknown Lift"))

    def test_pattern_lookup(self) -> None:
        squat = pattern("Squat Pattern")
        self.assertEqual(squat.standard.name, "Squats")
        self.assertEqual(
            [a.name for a in squat.alternatives], ["Hack Squats", "Leg Press"]
        )
        self.assertEqual(squat.options()[0].name, "Squats")
        self.assertIsNone(pattern("Nonexistent"))

    def test_patterns_reference_catalog_exercises(self) -> None:
        for p in PATTERNS.values():
            for option in p.options():
                self.assertIn(option.name, EXERCISES)
            names = [a.name for a in p.alternatives]
            self.assertNotIn(p.standard.name, names)

    def test_catalog_is_read_only(self) -> None:
        with self.assertRaises(TypeError):
            EXERCISES["New"] = EXERCISES["Bench Press"]
        with self.assertRaises(ValidationError):
            EXERCISES["Bench Press"].sets = 10

    def test_pattern_rejects_standard_as_alternative(self) -> None:
        bench = EXERCISES["Bench Press"]
        with self.assertRaises(ValidationError):
            MovementPattern(name="Bad", standard=bench, alternatives=(bench,))

    def test_exercise_requires_positive_sets(self) -> None:
        with self.assertRaises(ValidationError):
            ExerciseDetail(name="X", sets=0, reps="8", rir=1)

    def test_lift_category_uses_tags(self) -> None:
        self.assertEqual(lift_category("Bench Press"), LiftCategory.BENCH_PRESS)
        self.assertEqual(lift_category("Dumbbell Bench Press"), LiftCategory.BENCH_PRESS)
        self.assertEqual(lift_category("Bulgarian Split Squats"), LiftCategory.SQUAT)
        self.assertEqual(lift_category("Romanian Deadlifts"), LiftCategory.DEADLIFT)
        self.assertEqual(lift_category("Leg Press"), LiftCategory.NONE)

    def test_lift_category_keywords_for_unknown_names(self) -> None:
        self.assertEqual(lift_category("Supino Reto"), LiftCategory.BENCH_PRESS)
        self.assertEqual(lift_category("Agachamento Livre"), LiftCategory.SQUAT)
        self.assertEqual(lift_category("Levantamento Terra"), LiftCategory.DEADLIFT)
        self.assertEqual(lift_category("Sumo Deadlift"), LiftCategory.DEADLIFT)
        self.assertEqual(lift_category("Bicep Curl (Scott)"), LiftCategory.NONE)

    def test_splits_match_availability(self) -> None:
        self.assertEqual(sorted(SPLITS), [2, 3, 4, 5, 6])
        for days, names in SPLITS.items():
            self.assertEqual(len(names), days)

    def test_predefined_plans(self) -> None:
        ids = [p.id for p in PREDEFINED_PLANS]
        self.assertEqual(
            ids,
            ["upperLower", "pushPullLegs", "upperLower4Days", "fiveDaySplit", "sixDaySplit"],
        )
        self.assertEqual(set(PLAN_FOR_AVAILABILITY.values()), set(ids))
        ppl = PREDEFINED_PLANS[1]
        self.assertEqual([d.id for d in ppl.days], ["push", "pull", "legs"])
        self.assertIsNone(ppl.find_day("missing"))

    def test_plan_document_keys(self) -> None:
        doc = PREDEFINED_PLANS[0].to_document()
        slot = doc["days"][0]["exercises"][0]
        self.assertEqual(slot, {"name": "Horizontal Push", "sets": 3, "reps": 8})


if __name__ == "__main__":
    unittest.main()
