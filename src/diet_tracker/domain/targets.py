"""Domain models for daily nutrition targets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BodyProfile:
    """Body metrics used for energy expenditure."""

    height_cm: float | None
    weight_kg: float | None
    age: int | None
    gender: str | None
    activity_level: str | None


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macros for a day or a meal."""

    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class NutritionTargets:
    """Daily calorie target with consumed, remaining and progress amounts.

    ``progress`` holds whole-number percentages of each target eaten so far.
    """

    tdee: int
    consumed: MacroTotals
    remaining: MacroTotals
    progress: MacroTotals
