import math


class MathTools:
    """Provides essential mathematical utilities for workout calculations."""

    EPL_COEFF: float = 0.0333
    XP_PER_LEVEL_STEP: int = 100

    @classmethod
    def epley_1rm(cls, weight: float, reps: int, factor: float = 1.0) -> float:
        """Return the estimated one-rep max using the Epley formula."""
        if reps < 0:
            raise ValueError("reps must be non-negative")
        rep_term = min(reps, 8)
        return weight * (1 + cls.EPL_COEFF * rep_term) * factor

    @staticmethod
    def volume(sets: list[tuple[int, float]]) -> float:
        """Compute training volume as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @classmethod
    def level_for_experience(cls, experience: int) -> int:
        """Return ``floor(sqrt(experience / 100)) + 1``."""
        if experience < 0:
            raise ValueError("experience must be non-negative")
        # isqrt(xp // 100) == floor(sqrt(xp / 100)) for integer xp
        return math.isqrt(experience // cls.XP_PER_LEVEL_STEP) + 1

    @classmethod
    def experience_for_level(cls, level: int) -> int:
        """Return the minimum experience needed to be at ``level``."""
        if level < 1:
            raise ValueError("level must be at least 1")
        return (level - 1) ** 2 * cls.XP_PER_LEVEL_STEP
