"""Canonical per-100g nutrition for common foods."""

import logging

from diet_tracker.domain.nutrition import NutritionProfile
from diet_tracker.services.scaler import round_half_up

_logger = logging.getLogger(__name__)


def _profile(
    calories: float, protein_g: float, carbs_g: float, fat_g: float
) -> NutritionProfile:
    return NutritionProfile(
        calories=calories, protein_g=protein_g, carbs_g=carbs_g, fat_g=fat_g
    )


# Ordered so that longer names are tested before the generic ones they contain.
CANONICAL_FOODS: tuple[tuple[str, NutritionProfile], ...] = (
    ("margherita pizza", _profile(250, 11, 31, 10)),
    ("pizza margherita", _profile(250, 11, 31, 10)),
    ("margherita", _profile(250, 11, 31, 10)),
    ("pepperoni pizza", _profile(280, 13, 30, 12)),
    ("cheese pizza", _profile(240, 10, 32, 9)),
    ("pasta", _profile(130, 5, 25, 1)),
    ("spaghetti", _profile(130, 5, 25, 1)),
    ("chicken breast", _profile(165, 31, 0, 3.6)),
    ("chicken karahi", _profile(200, 20, 5, 10)),
    ("chicken salad", _profile(120, 15, 8, 4)),
    ("biryani", _profile(250, 12, 35, 8)),
    ("brown rice", _profile(111, 2.6, 23, 0.9)),
    ("white rice", _profile(130, 2.7, 28, 0.3)),
    ("rice", _profile(130, 2.7, 28, 0.3)),
    ("roti", _profile(300, 8, 50, 6)),
    ("pad thai with shrimp", _profile(150, 10, 20, 5)),
    ("pad thai", _profile(150, 10, 20, 5)),
    ("hamburger", _profile(350, 25, 30, 15)),
    ("burger", _profile(350, 25, 30, 15)),
    ("sandwich", _profile(200, 15, 25, 8)),
    ("salad", _profile(50, 3, 8, 2)),
    ("eggs", _profile(155, 13, 1.1, 11)),
    ("egg", _profile(155, 13, 1.1, 11)),
    ("peanut butter", _profile(588, 25, 20, 50)),
    ("butter", _profile(717, 0.9, 0.1, 81)),
    ("bread", _profile(265, 9, 49, 3.2)),
    ("toast", _profile(265, 9, 49, 3.2)),
    ("apple", _profile(52, 0.3, 14, 0.2)),
    ("banana", _profile(89, 1.1, 23, 0.3)),
    ("orange", _profile(47, 0.9, 12, 0.1)),
    ("milk", _profile(42, 3.4, 5, 1)),
    ("yogurt", _profile(59, 10, 3.6, 0.4)),
    ("cheese", _profile(113, 7, 1, 9)),
    ("olive oil", _profile(884, 0, 0, 100)),
    ("avocado", _profile(160, 2, 9, 15)),
    ("almonds", _profile(579, 21, 22, 50)),
)


def canonical_profile(food_name: str) -> NutritionProfile | None:
    """Return the canonical profile whose key appears in the food name."""
    lowered = food_name.lower()
    for key, profile in CANONICAL_FOODS:
        if key in lowered:
            _logger.debug("Using canonical values for %s", key)
            return profile
    return None


def normalize_profile(
    food_name: str, raw_profile: NutritionProfile | None
) -> NutritionProfile | None:
    """Pin well-known foods to canonical values, otherwise round AI values.

    Unknown foods keep the supplied values with calories rounded to the
    nearest 5 and macros to the nearest 0.5. Returns ``None`` when neither
    source is available.
    """
    canonical = canonical_profile(food_name)
    if canonical is not None:
        return canonical
    if raw_profile is None:
        return None
    return NutritionProfile(
        calories=round_half_up(max(raw_profile.calories, 0.0) / 5) * 5,
        protein_g=round_half_up(max(raw_profile.protein_g, 0.0) * 2) / 2,
        carbs_g=round_half_up(max(raw_profile.carbs_g, 0.0) * 2) / 2,
        fat_g=round_half_up(max(raw_profile.fat_g, 0.0) * 2) / 2,
        basis=raw_profile.basis,
    )
