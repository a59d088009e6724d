"""Models for nutrition JSON returned by the language model."""

from dataclasses import dataclass

from pydantic import BaseModel, Field


class FlatNutrition(BaseModel):
    """Flat per-100g nutrition block shared by several response shapes."""

    name: str | None = None
    calories_per_100g: float | None = None
    protein_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fat_per_100g: float | None = None
    estimated_quantity: float | None = None
    unit: str | None = None
    confidence: float | None = None


class BackcompatBlock(FlatNutrition):
    """Legacy-shaped summary embedded in a structured response."""


class StructuredItem(BaseModel):
    """Single meal component with values for its own quantity."""

    name: str
    quantity_g: float = 0.0
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    confidence: float | None = None
    assumptions: list[str] = Field(default_factory=list)


class StructuredTotals(BaseModel):
    """Totals for the whole meal."""

    weight_g: float = 0.0
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0


class StructuredPayload(BaseModel):
    """Current response shape: items, totals and a backcompat summary."""

    items: list[StructuredItem] = Field(default_factory=list)
    totals: StructuredTotals | None = None
    per_100g: StructuredTotals | None = None
    notes: list[str] = Field(default_factory=list)
    backcompat: BackcompatBlock | None = None


class LegacyPayload(FlatNutrition):
    """Older flat response shape with per-100g values."""


@dataclass(frozen=True)
class UnparseablePayload:
    """Marker for a missing or undecodable response."""

    reason: str


AiPayload = StructuredPayload | LegacyPayload | UnparseablePayload


class VisionFood(FlatNutrition):
    """Single food detected in an image."""


class VisionPayload(BaseModel):
    """Image recognition response listing detected foods."""

    foods: list[VisionFood]
