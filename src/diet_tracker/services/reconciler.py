"""Reconcile language-model nutrition output into a single recognition result."""

import json
import logging
import math
import re
from decimal import Decimal
from types import MappingProxyType
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from diet_tracker.domain.ai_payloads import (
    AiPayload,
    BackcompatBlock,
    FlatNutrition,
    LegacyPayload,
    StructuredItem,
    StructuredPayload,
    StructuredTotals,
    UnparseablePayload,
)
from diet_tracker.domain.nutrition import (
    PER_PIECE,
    FoodComponent,
    NutritionProfile,
    RecognitionResult,
    RecognitionSource,
    ScaledNutrition,
)
from diet_tracker.services.normalizer import normalize_profile
from diet_tracker.services.quantities import (
    convert_quantity,
    explicit_grams,
    infer_unit,
    parse_quantity,
    resolve_portion,
)
from diet_tracker.services.scaler import round_half_up, scale_profile, sum_scaled

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_QUANTITY_G = 100.0
DEFAULT_CONFIDENCE = 0.5

MULTI_COMPONENT_CONFIDENCE = 85
SINGLE_ITEM_CONFIDENCE = 60
FALLBACK_CONFIDENCE = 30

FALLBACK_PROFILE = NutritionProfile(calories=100, protein_g=5, carbs_g=15, fat_g=3)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)

# Local per-100g values for the two-component meal patterns.
_COMPONENT_FOODS = MappingProxyType(
    {
        "chicken breast": NutritionProfile(165, 31, 0, 3.6),
        "rice": NutritionProfile(130, 2.7, 28, 0.3),
        "egg": NutritionProfile(155, 13, 1.1, 11),
        "bread": NutritionProfile(265, 9, 49, 3.2),
    }
)

_COMPONENT_UNIT = r"(?:(g|gm|grams?|kg|kilograms?|oz|lb|cups?)\b)?"


def _component_pattern(food: str) -> re.Pattern[str]:
    return re.compile(
        rf"(\d+(?:\.\d+)?)\s*{_COMPONENT_UNIT}\s*(?:of\s+)?"
        rf"(?:(?:grilled|boiled|fried|cooked|steamed|large|medium|small)\s+)*{food}"
    )


# Each pair names the canonical component and the pattern that finds its quantity.
_MEAL_PATTERNS: tuple[tuple[tuple[str, re.Pattern[str]], ...], ...] = (
    (
        ("chicken breast", _component_pattern(r"chicken(?:\s+breasts?)?")),
        ("rice", _component_pattern(r"(?:white\s+|brown\s+)?rice")),
    ),
    (
        ("egg", _component_pattern(r"eggs?")),
        ("bread", _component_pattern(r"(?:slices?\s+(?:of\s+)?)?bread")),
    ),
)

# Smaller keyword table used when no AI output is available.
_SIMPLE_FOODS: tuple[tuple[str, NutritionProfile], ...] = (
    ("chicken", NutritionProfile(165, 31, 0, 3.6)),
    ("rice", NutritionProfile(111, 2.6, 23, 0.9)),
    ("pasta", NutritionProfile(131, 5, 25, 1.1)),
    ("bolognese", NutritionProfile(200, 12, 20, 8)),
    ("burger", NutritionProfile(350, 25, 30, 15)),
    ("pizza", NutritionProfile(300, 12, 35, 12)),
    ("roti", NutritionProfile(300, 8, 50, 6)),
    ("egg", NutritionProfile(155, 13, 1.1, 11)),
    ("bread", NutritionProfile(265, 9, 49, 3.2)),
    ("banana", NutritionProfile(89, 1.1, 23, 0.3)),
    ("apple", NutritionProfile(52, 0.3, 14, 0.2)),
    ("orange", NutritionProfile(47, 0.9, 12, 0.1)),
    ("potato", NutritionProfile(77, 2, 17, 0.1)),
)


def decode_payload(raw: str | dict[str, object] | None) -> dict[str, object] | None:
    """Decode model output into a JSON object, or ``None`` if impossible."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        return raw
    text = raw.strip()
    fenced = _FENCED_JSON.search(text)
    if fenced:
        text = fenced.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        decoded = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        _logger.warning("Model output is not valid JSON: %s", exc)
        return None
    if not isinstance(decoded, dict):
        return None
    return decoded


def classify_payload(raw: str | dict[str, object] | None) -> AiPayload:
    """Decide once which response shape arrived."""
    data = decode_payload(raw)
    if data is None:
        return UnparseablePayload(reason="missing or undecodable output")
    try:
        if isinstance(data.get("backcompat"), dict) or isinstance(
            data.get("items"), list
        ):
            payload = _structured_payload(data)
            if payload.backcompat is None and not payload.items:
                return UnparseablePayload(reason="structured output without items")
            return payload
        if "name" in data or "calories_per_100g" in data:
            return LegacyPayload.model_validate(data)
    except ValidationError as exc:
        _logger.warning("Model output failed validation: %s", exc.error_count())
        return UnparseablePayload(reason="validation failed")
    return UnparseablePayload(reason="unrecognized shape")


def _structured_payload(data: dict[str, object]) -> StructuredPayload:
    """Validate each part on its own so one bad item does not sink the rest."""
    raw_items = data.get("items")
    items: list[StructuredItem] = []
    if isinstance(raw_items, list):
        for raw_item in raw_items:
            item = _validate_part(StructuredItem, raw_item)
            if item is not None:
                items.append(item)
    raw_notes = data.get("notes")
    notes = raw_notes if isinstance(raw_notes, list) else []
    return StructuredPayload(
        items=items,
        totals=_validate_part(StructuredTotals, data.get("totals")),
        per_100g=_validate_part(StructuredTotals, data.get("per_100g")),
        notes=[note for note in notes if isinstance(note, str)],
        backcompat=_validate_part(BackcompatBlock, data.get("backcompat")),
    )


def _validate_part(model: type[ModelT], raw: object) -> ModelT | None:
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        _logger.warning(
            "Skipping invalid %s: %s errors", model.__name__, exc.error_count()
        )
        return None


def reconcile(
    description: str, raw: str | dict[str, object] | None
) -> RecognitionResult:
    """Build a recognition result from model output, falling back locally."""
    payload = classify_payload(raw)
    if isinstance(payload, StructuredPayload):
        return _from_structured(description, payload)
    if isinstance(payload, LegacyPayload):
        return _from_legacy(description, payload)
    if raw is not None:
        _logger.warning("Falling back to local recognition: %s", payload.reason)
    return mock_recognition(description)


def mock_recognition(description: str) -> RecognitionResult:
    """Recognize food with local tables only."""
    combined = _recognize_meal(description)
    if combined is not None:
        return combined
    return _recognize_single(description)


def _from_structured(description: str, payload: StructuredPayload) -> RecognitionResult:
    components = tuple(_component_from_item(item) for item in payload.items)
    summary = payload.backcompat
    if summary is not None:
        return RecognitionResult(
            name=summary.name or description,
            calories=int(round_half_up(_non_negative(summary.calories_per_100g))),
            protein=round_half_up(_non_negative(summary.protein_per_100g), 1),
            carbs=round_half_up(_non_negative(summary.carbs_per_100g), 1),
            fat=round_half_up(_non_negative(summary.fat_per_100g), 1),
            quantity=_non_negative(summary.estimated_quantity or DEFAULT_QUANTITY_G),
            unit=summary.unit or "g",
            confidence=to_percent(summary.confidence),
            source=RecognitionSource.STRUCTURED_AI,
            components=components,
        )

    if payload.totals is not None:
        totals = payload.totals
        weight = _non_negative(totals.weight_g)
        scaled = ScaledNutrition(
            calories=int(round_half_up(_non_negative(totals.calories))),
            protein_g=round_half_up(_non_negative(totals.protein_g), 1),
            carbs_g=round_half_up(_non_negative(totals.carbs_g), 1),
            fat_g=round_half_up(_non_negative(totals.fat_g), 1),
        )
    else:
        weight = sum(component.quantity_g for component in components)
        scaled = sum_scaled(
            [
                ScaledNutrition(c.calories, c.protein, c.carbs, c.fat)
                for c in components
            ]
        )
    confidence = round_half_up(
        sum(c.confidence for c in components) / len(components)
    )
    name = components[0].name if len(components) == 1 else "combined meal"
    return RecognitionResult(
        name=name,
        calories=scaled.calories,
        protein=scaled.protein_g,
        carbs=scaled.carbs_g,
        fat=scaled.fat_g,
        quantity=weight or DEFAULT_QUANTITY_G,
        unit="g",
        confidence=int(confidence),
        source=RecognitionSource.STRUCTURED_AI,
        components=components,
    )


def _from_legacy(description: str, payload: LegacyPayload) -> RecognitionResult:
    name = payload.name or description
    user_grams = explicit_grams(description)
    if user_grams is not None:
        portion = resolve_portion(user_grams, "g", name)
    else:
        portion = resolve_portion(
            payload.estimated_quantity or DEFAULT_QUANTITY_G, payload.unit, name
        )
    profile = normalize_profile(name, _profile_from_flat(payload))
    scaled = scale_profile(profile or FALLBACK_PROFILE, portion)
    _logger.debug(
        "Scaled %s to %sg: %s kcal", name, portion.grams, scaled.calories
    )
    return RecognitionResult(
        name=name,
        calories=scaled.calories,
        protein=scaled.protein_g,
        carbs=scaled.carbs_g,
        fat=scaled.fat_g,
        quantity=portion.quantity,
        unit=portion.unit,
        confidence=to_percent(payload.confidence),
        source=RecognitionSource.LEGACY_AI,
    )


def _recognize_meal(description: str) -> RecognitionResult | None:
    text = description.lower()
    for pattern in _MEAL_PATTERNS:
        matches = [(food, regex.search(text)) for food, regex in pattern]
        if not all(match for _, match in matches):
            continue
        parts: list[ScaledNutrition] = []
        total_grams = 0.0
        for food, match in matches:
            grams = _component_grams(food, float(match.group(1)), match.group(2))
            total_grams += grams
            parts.append(
                scale_profile(
                    _COMPONENT_FOODS[food],
                    resolve_portion(grams, "g", food),
                )
            )
        total = sum_scaled(parts)
        return RecognitionResult(
            name=description,
            calories=total.calories,
            protein=total.protein_g,
            carbs=total.carbs_g,
            fat=total.fat_g,
            quantity=round_half_up(total_grams),
            unit="g",
            confidence=MULTI_COMPONENT_CONFIDENCE,
            source=RecognitionSource.MOCK_MULTI_COMPONENT,
        )
    return None


def _component_grams(food: str, quantity: float, unit: str | None) -> float:
    if unit is None:
        unit = infer_unit(quantity, food)
    elif unit.startswith("kilogram"):
        unit = "kg"
    elif unit.startswith("cup"):
        unit = "cup"
    elif unit.startswith("g"):
        unit = "g"
    return resolve_portion(quantity, unit, food).grams


def _recognize_single(description: str) -> RecognitionResult:
    parsed = parse_quantity(description)
    portion = convert_quantity(parsed)
    name = parsed.remainder or description
    for key, profile in _SIMPLE_FOODS:
        if key not in parsed.remainder:
            continue
        if not portion.weighed:
            profile = NutritionProfile(
                calories=profile.calories,
                protein_g=profile.protein_g,
                carbs_g=profile.carbs_g,
                fat_g=profile.fat_g,
                basis=PER_PIECE,
            )
        scaled = scale_profile(profile, portion)
        return RecognitionResult(
            name=name,
            calories=scaled.calories,
            protein=scaled.protein_g,
            carbs=scaled.carbs_g,
            fat=scaled.fat_g,
            quantity=portion.quantity,
            unit=portion.unit,
            confidence=SINGLE_ITEM_CONFIDENCE,
            source=RecognitionSource.MOCK_SINGLE,
        )

    return RecognitionResult(
        name=name,
        calories=int(FALLBACK_PROFILE.calories),
        protein=FALLBACK_PROFILE.protein_g,
        carbs=FALLBACK_PROFILE.carbs_g,
        fat=FALLBACK_PROFILE.fat_g,
        quantity=portion.quantity,
        unit=portion.unit,
        confidence=FALLBACK_CONFIDENCE,
        source=RecognitionSource.FALLBACK,
    )


def _component_from_item(item: StructuredItem) -> FoodComponent:
    return FoodComponent(
        name=item.name,
        quantity_g=_non_negative(item.quantity_g),
        calories=int(round_half_up(_non_negative(item.calories))),
        protein=round_half_up(_non_negative(item.protein_g), 1),
        carbs=round_half_up(_non_negative(item.carbs_g), 1),
        fat=round_half_up(_non_negative(item.fat_g), 1),
        confidence=to_percent(item.confidence),
        assumptions=tuple(item.assumptions),
    )


def _non_negative(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return max(value, 0.0)


def _profile_from_flat(payload: FlatNutrition) -> NutritionProfile:
    return NutritionProfile(
        calories=payload.calories_per_100g or 0.0,
        protein_g=payload.protein_per_100g or 0.0,
        carbs_g=payload.carbs_per_100g or 0.0,
        fat_g=payload.fat_per_100g or 0.0,
    )


def to_percent(confidence: float | None) -> int:
    """Convert a 0-1 confidence to an integer percentage."""
    value = DEFAULT_CONFIDENCE if confidence is None else confidence
    if value > 1:
        value /= 100
    clamped = Decimal(repr(min(max(value, 0.0), 1.0)))
    return int(round_half_up(float(clamped * 100)))
