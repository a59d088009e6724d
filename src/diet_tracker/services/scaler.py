"""Scaling of reference nutrition to a logged portion."""

import math
from decimal import ROUND_HALF_UP, Decimal

from diet_tracker.domain.nutrition import (
    PER_PIECE,
    NutritionProfile,
    Portion,
    ScaledNutrition,
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves away from zero instead of to even."""
    if not math.isfinite(value):
        return 0.0
    exponent = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def scale_profile(profile: NutritionProfile, portion: Portion) -> ScaledNutrition:
    """Scale a reference profile to the portion's size.

    ``per100g`` profiles scale by grams / 100, ``perPiece`` profiles by count.
    """
    if profile.basis == PER_PIECE:
        factor = max(portion.quantity, 0.0)
    else:
        factor = max(portion.grams, 0.0) / 100.0
    return ScaledNutrition(
        calories=int(round_half_up(profile.calories * factor)),
        protein_g=round_half_up(profile.protein_g * factor, 1),
        carbs_g=round_half_up(profile.carbs_g * factor, 1),
        fat_g=round_half_up(profile.fat_g * factor, 1),
    )


def sum_scaled(parts: list[ScaledNutrition]) -> ScaledNutrition:
    """Add scaled portions together."""
    calories = 0
    protein = carbs = fat = 0.0
    for part in parts:
        calories += part.calories
        protein += part.protein_g
        carbs += part.carbs_g
        fat += part.fat_g
    return ScaledNutrition(
        calories=calories,
        protein_g=round_half_up(protein, 1),
        carbs_g=round_half_up(carbs, 1),
        fat_g=round_half_up(fat, 1),
    )
