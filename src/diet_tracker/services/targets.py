"""Daily calorie targets from body metrics and logged meals."""

from collections.abc import Iterable
from types import MappingProxyType

from diet_tracker.domain.targets import BodyProfile, MacroTotals, NutritionTargets
from diet_tracker.services.scaler import round_half_up

ACTIVITY_MULTIPLIERS = MappingProxyType(
    {
        "sedentary": 1.2,
        "light": 1.375,
        "moderate": 1.55,
        "active": 1.725,
        "very_active": 1.9,
    }
)
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

PROTEIN_G_PER_KG = 1.6
CARB_CALORIE_SHARE = 0.45
FAT_CALORIE_SHARE = 0.25


def calculate_tdee(profile: BodyProfile) -> int:
    """Estimate total daily energy expenditure with Mifflin-St Jeor.

    Returns 0 when any body metric is missing.
    """
    if not (
        profile.height_cm
        and profile.weight_kg
        and profile.age
        and profile.gender
        and profile.activity_level
    ):
        return 0
    bmr = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    bmr += 5 if profile.gender.lower() == "male" else -161
    multiplier = ACTIVITY_MULTIPLIERS.get(
        profile.activity_level, DEFAULT_ACTIVITY_MULTIPLIER
    )
    return int(round_half_up(bmr * multiplier))


def summarize_meals(meals: Iterable[MacroTotals]) -> MacroTotals:
    """Sum logged meals into daily totals."""
    total = MacroTotals(calories=0, protein=0, carbs=0, fat=0)
    for meal in meals:
        total = MacroTotals(
            calories=total.calories + meal.calories,
            protein=total.protein + meal.protein,
            carbs=total.carbs + meal.carbs,
            fat=total.fat + meal.fat,
        )
    return MacroTotals(
        calories=total.calories,
        protein=round_half_up(total.protein, 1),
        carbs=round_half_up(total.carbs, 1),
        fat=round_half_up(total.fat, 1),
    )


def daily_targets(
    profile: BodyProfile, meals: Iterable[MacroTotals]
) -> NutritionTargets:
    """Return the calorie target with what has been eaten and what is left."""
    tdee = calculate_tdee(profile)
    consumed = summarize_meals(meals)
    protein_target = (profile.weight_kg or 0) * PROTEIN_G_PER_KG
    carbs_target = tdee * CARB_CALORIE_SHARE / 4
    fat_target = tdee * FAT_CALORIE_SHARE / 9
    remaining = MacroTotals(
        calories=max(0, tdee - consumed.calories),
        protein=max(0.0, round_half_up(protein_target - consumed.protein, 1)),
        carbs=max(0.0, round_half_up(carbs_target - consumed.carbs, 1)),
        fat=max(0.0, round_half_up(fat_target - consumed.fat, 1)),
    )
    progress = MacroTotals(
        calories=_percent_of(consumed.calories, tdee),
        protein=_percent_of(consumed.protein, protein_target),
        carbs=_percent_of(consumed.carbs, carbs_target),
        fat=_percent_of(consumed.fat, fat_target),
    )
    return NutritionTargets(
        tdee=tdee, consumed=consumed, remaining=remaining, progress=progress
    )


def _percent_of(amount: float, target: float) -> int:
    # No target means no progress to report.
    if target <= 0:
        return 0
    return int(round_half_up(amount / target * 100))
