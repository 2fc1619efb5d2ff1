"""Static exercise, movement pattern and training plan catalogs.

Everything here is built once at import time and exposed through read-only
mappings. Lookups return ``None`` for unknown names instead of raising.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from models import (
    ExerciseDetail,
    LiftCategory,
    MovementPattern,
    PlanDay,
    PlannedSlot,
    TrainingPlan,
)

BENCH = LiftCategory.BENCH_PRESS
SQUAT = LiftCategory.SQUAT
DEADLIFT = LiftCategory.DEADLIFT


def _exercise(
    name: str,
    sets: int,
    reps: str,
    rir: int,
    notes: str | None = None,
    category: LiftCategory = LiftCategory.NONE,
) -> ExerciseDetail:
    return ExerciseDetail(
        name=name, sets=sets, reps=reps, rir=rir, notes=notes, category=category
    )


_EXERCISES = [
    _exercise("Bench Press", 4, "6-8", 1, "Control the eccentric phase", BENCH),
    _exercise("Incline Dumbbell Press", 3, "8-10", 1),
    _exercise("Overhead Press", 3, "8-10", 2),
    _exercise("Lateral Raises", 3, "10-12", 1),
    _exercise("Tricep Pushdowns", 3, "8-10", 1),
    _exercise("Barbell Rows", 4, "6-8", 1, "Focus on scapular retraction"),
    _exercise("Pull-ups/Lat Pulldowns", 3, "8-10", 2),
    _exercise("Face Pulls", 3, "10-12", 1),
    _exercise("Bicep Curls", 3, "8-10", 1),
    _exercise("Hammer Curls", 2, "8-10", 1),
    _exercise("Squats", 4, "6-8", 1, "Break parallel for full ROM", SQUAT),
    _exercise("Romanian Deadlifts", 3, "8-10", 2, category=DEADLIFT),
    _exercise("Leg Press", 3, "8-10", 1),
    _exercise("Leg Extensions", 3, "10-12", 1),
    _exercise("Leg Curls", 3, "10-12", 1),
    _exercise("Standing Calf Raises", 4, "8-10", 1),
    # alternatives
    _exercise("Machine Chest Press", 4, "8-10", 1),
    _exercise("Dumbbell Bench Press", 4, "8-10", 1, category=BENCH),
    _exercise("Cable Crossover (High)", 3, "10-12", 1),
    _exercise("Seated Cable Rows", 4, "8-10", 1),
    _exercise("T-Bar Rows", 4, "6-8", 1),
    _exercise("Machine Shoulder Press", 3, "8-10", 2),
    _exercise("Dumbbell Shoulder Press", 3, "8-10", 2),
    _exercise("Hack Squats", 4, "8-10", 1, category=SQUAT),
    _exercise("Bulgarian Split Squats", 3, "8-10", 1, "Per leg", SQUAT),
    _exercise("Glute Ham Raises", 3, "8-10", 2),
    _exercise("Seated Calf Raises", 4, "10-15", 1),
]

EXERCISES: Mapping[str, ExerciseDetail] = MappingProxyType(
    {ex.name: ex for ex in _EXERCISES}
)


def _pattern(name: str, standard: str, *alternatives: str) -> MovementPattern:
    return MovementPattern(
        name=name,
        standard=EXERCISES[standard],
        alternatives=tuple(EXERCISES[alt] for alt in alternatives),
    )


_PATTERNS = [
    _pattern(
        "Horizontal Push", "Bench Press", "Machine Chest Press", "Dumbbell Bench Press"
    ),
    _pattern("Incline Push", "Incline Dumbbell Press"),
    _pattern("Chest Fly", "Cable Crossover (High)"),
    _pattern(
        "Vertical Push",
        "Overhead Press",
        "Machine Shoulder Press",
        "Dumbbell Shoulder Press",
    ),
    _pattern("Lateral Deltoid", "Lateral Raises"),
    _pattern("Triceps Extension", "Tricep Pushdowns"),
    _pattern("Horizontal Pull", "Barbell Rows", "Seated Cable Rows", "T-Bar Rows"),
    _pattern("Vertical Pull", "Pull-ups/Lat Pulldowns"),
    _pattern("Vertical Pull (Wide)", "Pull-ups/Lat Pulldowns"),
    _pattern("Rear Delt Fly", "Face Pulls"),
    _pattern("Bicep Curl", "Bicep Curls"),
    _pattern("Hammer Curl", "Hammer Curls"),
    _pattern("Squat Pattern", "Squats", "Hack Squats", "Leg Press"),
    _pattern("Quad Isolation", "Leg Extensions"),
    _pattern("Hip Hinge", "Romanian Deadlifts", "Glute Ham Raises"),
    _pattern("Hamstring Curl", "Leg Curls"),
    _pattern("Calf Raise", "Standing Calf Raises", "Seated Calf Raises"),
]

PATTERNS: Mapping[str, MovementPattern] = MappingProxyType(
    {p.name: p for p in _PATTERNS}
)


def exercise(name: str) -> Optional[ExerciseDetail]:
    return EXERCISES.get(name)


def pattern(name: str) -> Optional[MovementPattern]:
    return PATTERNS.get(name)


# day name -> muscle group -> pattern names, in display order
MUSCLE_GROUP_PLANS: Mapping[str, Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "Push": {
            "Chest": ("Horizontal Push", "Incline Push", "Chest Fly"),
            "Shoulders": ("Vertical Push", "Lateral Deltoid"),
            "Triceps": ("Triceps Extension",),
        },
        "Pull": {
            "Back (Thickness)": ("Horizontal Pull", "Vertical Pull"),
            "Back (Width)": ("Vertical Pull (Wide)",),
            "Rear Deltoids": ("Rear Delt Fly",),
            "Biceps": ("Bicep Curl", "Hammer Curl"),
        },
        "Legs": {
            "Quads": ("Squat Pattern", "Quad Isolation"),
            "Hamstrings": ("Hip Hinge", "Hamstring Curl"),
            "Calves": ("Calf Raise",),
        },
        "Upper": {
            "Chest": ("Horizontal Push", "Incline Push"),
            "Back": ("Horizontal Pull", "Vertical Pull"),
            "Shoulders": ("Vertical Push", "Lateral Deltoid", "Rear Delt Fly"),
            "Biceps": ("Bicep Curl",),
            "Triceps": ("Triceps Extension",),
        },
        "Lower": {
            "Quads": ("Squat Pattern", "Quad Isolation"),
            "Hamstrings": ("Hip Hinge", "Hamstring Curl"),
            "Calves": ("Calf Raise",),
        },
    }
)

SPLITS: Mapping[int, tuple[str, ...]] = MappingProxyType(
    {
        2: ("Upper", "Lower"),
        3: ("Push", "Pull", "Legs"),
        4: ("Upper", "Lower", "Upper", "Lower"),
        5: ("Push", "Pull", "Legs", "Upper", "Lower"),
        6: ("Push", "Pull", "Legs", "Push", "Pull", "Legs"),
    }
)

SUPPORTED_AVAILABILITY = tuple(sorted(SPLITS))

# Used only for names outside EXERCISES; catalog entries carry their own tag.
LIFT_KEYWORDS: Mapping[LiftCategory, tuple[str, ...]] = MappingProxyType(
    {
        BENCH: ("supino", "bench press"),
        SQUAT: ("agachamento", "squat"),
        DEADLIFT: ("levantamento terra", "deadlift"),
    }
)

TRACKED_LIFTS = tuple(LIFT_KEYWORDS)


def lift_category(name: str) -> LiftCategory:
    """Return the tracked lift ``name`` counts towards, if any."""
    detail = EXERCISES.get(name)
    if detail is not None:
        return detail.category
    lowered = name.lower()
    for category, keywords in LIFT_KEYWORDS.items():
        if any(k in lowered for k in keywords):
            return category
    return LiftCategory.NONE


def _day(day_id: str, name: str, *slots: tuple[str, int, int]) -> PlanDay:
    return PlanDay(
        id=day_id,
        name=name,
        slots=[PlannedSlot(pattern_name=n, sets=s, reps=r) for n, s, r in slots],
    )


# Slot names are pattern names where a pattern exists, otherwise literal
# exercise names.
PREDEFINED_PLANS: tuple[TrainingPlan, ...] = (
    TrainingPlan(
        id="upperLower",
        name="Upper/Lower (2 days/week)",
        description="Upper and lower body focus.",
        days=[
            _day(
                "upper1",
                "Upper Day A",
                ("Horizontal Push", 3, 8),
                ("Horizontal Pull", 3, 8),
                ("Vertical Push", 3, 10),
                ("Bicep Curl", 3, 12),
                ("Triceps Extension", 3, 12),
            ),
            _day(
                "lower1",
                "Lower Day A",
                ("Squat Pattern", 3, 8),
                ("Hip Hinge", 3, 8),
                ("Leg Press", 3, 10),
                ("Quad Isolation", 3, 12),
                ("Hamstring Curl", 3, 12),
            ),
        ],
    ),
    TrainingPlan(
        id="pushPullLegs",
        name="Push Pull Legs (3 days/week)",
        description="A classic split for muscle growth and strength.",
        days=[
            _day(
                "push",
                "Push Day",
                ("Horizontal Push", 3, 8),
                ("Incline Push", 3, 10),
                ("Vertical Push", 3, 8),
                ("Lateral Deltoid", 3, 12),
                ("Triceps Extension", 3, 10),
            ),
            _day(
                "pull",
                "Pull Day",
                ("Vertical Pull", 3, 8),
                ("Horizontal Pull", 3, 8),
                ("Vertical Pull (Wide)", 3, 10),
                ("Rear Delt Fly", 3, 15),
                ("Bicep Curl", 3, 10),
            ),
            _day(
                "legs",
                "Leg Day",
                ("Squat Pattern", 3, 8),
                ("Hip Hinge", 3, 8),
                ("Leg Press", 3, 10),
                ("Quad Isolation", 3, 12),
                ("Hamstring Curl", 3, 12),
            ),
        ],
    ),
    TrainingPlan(
        id="upperLower4Days",
        name="Upper/Lower (4 days/week)",
        description="Four day split alternating upper and lower body.",
        days=[
            _day(
                "upperA",
                "Upper Day A",
                ("Horizontal Push", 4, 6),
                ("Horizontal Pull", 4, 6),
                ("Vertical Push", 3, 8),
                ("Hammer Curl", 3, 10),
                ("Triceps Extension", 3, 10),
            ),
            _day(
                "lowerA",
                "Lower Day A",
                ("Squat Pattern", 4, 6),
                ("Deadlift Pattern", 3, 5),
                ("Quad Isolation", 3, 12),
                ("Hamstring Curl", 3, 12),
                ("Calf Raise", 4, 15),
            ),
            _day(
                "upperB",
                "Upper Day B",
                ("Incline Push", 4, 8),
                ("Horizontal Pull (Unilateral)", 4, 8),
                ("Lateral Deltoid", 3, 12),
                ("Bicep Curl (Concentrated)", 3, 10),
                ("Triceps Dip", 3, 10),
            ),
            _day(
                "lowerB",
                "Lower Day B",
                ("Leg Press", 4, 10),
                ("Hip Hinge", 3, 8),
                ("Lunge Pattern", 3, 10),
                ("Glute Isolation", 3, 12),
                ("Calf Raise (Seated)", 4, 15),
            ),
        ],
    ),
    TrainingPlan(
        id="fiveDaySplit",
        name="5 Day Split (5 days/week)",
        description="One muscle group focus per day.",
        days=[
            _day(
                "chestTriceps",
                "Chest and Triceps",
                ("Horizontal Push", 4, 8),
                ("Incline Push", 3, 10),
                ("Chest Fly", 3, 12),
                ("Triceps Extension", 4, 10),
                ("Overhead Triceps Extension", 3, 12),
            ),
            _day(
                "backBiceps",
                "Back and Biceps",
                ("Vertical Pull", 4, 8),
                ("Horizontal Pull", 4, 8),
                ("Vertical Pull (Wide)", 3, 10),
                ("Bicep Curl", 4, 10),
                ("Hammer Curl", 3, 12),
            ),
            _day(
                "legsShoulders",
                "Legs and Shoulders",
                ("Squat Pattern", 4, 8),
                ("Leg Press", 3, 10),
                ("Hip Hinge", 3, 10),
                ("Vertical Push", 4, 8),
                ("Lateral Deltoid", 3, 12),
            ),
            _day(
                "upperBodyLight",
                "Light Upper",
                ("Horizontal Push (Machine)", 3, 12),
                ("Horizontal Pull (Low)", 3, 12),
                ("Front Deltoid", 3, 15),
                ("Triceps Rope Pushdown", 3, 15),
                ("Bicep Curl (Scott)", 3, 15),
            ),
            _day(
                "lowerBodyLight",
                "Light Lower",
                ("Adductor Isolation", 3, 15),
                ("Abductor Isolation", 3, 15),
                ("Calf Raise (Seated)", 3, 20),
                ("Quad Isolation", 3, 15),
                ("Hamstring Curl", 3, 15),
            ),
        ],
    ),
    TrainingPlan(
        id="sixDaySplit",
        name="6 Day Split (6 days/week)",
        description="High frequency to maximise growth.",
        days=[
            _day(
                "push1",
                "Push Day 1",
                ("Horizontal Push", 3, 8),
                ("Vertical Push", 3, 10),
                ("Triceps Extension", 3, 12),
            ),
            _day(
                "pull1",
                "Pull Day 1",
                ("Horizontal Pull", 3, 8),
                ("Vertical Pull (Wide)", 3, 10),
                ("Bicep Curl", 3, 12),
            ),
            _day(
                "legs1",
                "Legs Day 1",
                ("Squat Pattern", 3, 8),
                ("Hip Hinge", 3, 10),
                ("Leg Press", 3, 12),
            ),
            _day(
                "push2",
                "Push Day 2",
                ("Incline Push", 3, 8),
                ("Lateral Deltoid", 3, 12),
                ("Overhead Triceps Extension", 3, 12),
            ),
            _day(
                "pull2",
                "Pull Day 2",
                ("Vertical Pull", 3, 8),
                ("Horizontal Pull (Low)", 3, 10),
                ("Hammer Curl", 3, 12),
            ),
            _day(
                "legs2",
                "Legs Day 2",
                ("Deadlift Pattern", 2, 5),
                ("Quad Isolation", 3, 12),
                ("Hamstring Curl", 3, 12),
            ),
        ],
    ),
)

# weekly availability -> predefined plan id
PLAN_FOR_AVAILABILITY: Mapping[int, str] = MappingProxyType(
    {
        2: "upperLower",
        3: "pushPullLegs",
        4: "upperLower4Days",
        5: "fiveDaySplit",
        6: "sixDaySplit",
    }
)
