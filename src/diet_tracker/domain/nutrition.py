"""Nutrition domain models."""

from dataclasses import dataclass
from enum import Enum

PER_100G = "per100g"
PER_PIECE = "perPiece"


@dataclass(frozen=True)
class NutritionProfile:
    """Calories and macros for a reference amount of food.

    ``basis`` is ``per100g`` for weight-based values and ``perPiece`` when the
    values describe one countable unit (a slice, a piece).
    """

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    basis: str = PER_100G


@dataclass(frozen=True)
class ParsedQuantity:
    """Leading quantity split from a free-text food description."""

    quantity: float
    unit: str | None
    remainder: str


@dataclass(frozen=True)
class Portion:
    """Resolved amount of food, always carrying a gram equivalent."""

    quantity: float
    unit: str
    grams: float
    weighed: bool = True


@dataclass(frozen=True)
class ScaledNutrition:
    """Absolute nutrition for a logged portion."""

    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float


class RecognitionSource(str, Enum):
    """Provenance of a recognition result."""

    STRUCTURED_AI = "structured-ai"
    LEGACY_AI = "legacy-ai"
    MOCK_MULTI_COMPONENT = "mock-multi-component"
    MOCK_SINGLE = "mock-single"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class FoodComponent:
    """Single item listed by a structured AI response."""

    name: str
    quantity_g: float
    calories: int
    protein: float
    carbs: float
    fat: float
    confidence: int
    assumptions: tuple[str, ...] = ()


@dataclass(frozen=True)
class RecognitionResult:
    """Nutrition record returned for one food description."""

    name: str
    calories: int
    protein: float
    carbs: float
    fat: float
    quantity: float
    unit: str
    confidence: int
    source: RecognitionSource
    components: tuple[FoodComponent, ...] = ()


@dataclass(frozen=True)
class RecognizedFood:
    """Food detected in an image, with per-100g values."""

    name: str
    calories_per_100g: int
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float
    quantity: float
    unit: str
    confidence: int
    source: str
