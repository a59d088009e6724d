"""Quantity parsing and unit conversion for free-text food descriptions."""

import math
import re
from types import MappingProxyType

from diet_tracker.domain.nutrition import ParsedQuantity, Portion

_NUMBER = r"(\d+(?:\.\d+)?)"

# Anchored weight patterns, tried in order. The flag marks kilogram units.
_WEIGHT_PATTERNS: tuple[tuple[re.Pattern[str], bool], ...] = (
    (re.compile(rf"^{_NUMBER}\s*(?:gm|grams?)\b"), False),
    (re.compile(rf"^{_NUMBER}\s*g\b"), False),
    (re.compile(rf"^{_NUMBER}\s*(?:kg|kilograms?)\b"), True),
)
_LEADING_NUMBER = re.compile(rf"^{_NUMBER}\s*(.*)", re.DOTALL)

WEIGHT_UNITS = frozenset({"g", "kg"})
COUNT_UNITS = frozenset({"piece", "slice", "item"})

GRAMS_PER_UNIT = MappingProxyType(
    {
        "g": 1.0,
        "kg": 1000.0,
        "cup": 150.0,
        "tbsp": 15.0,
        "tsp": 5.0,
        "oz": 28.0,
        "lb": 454.0,
    }
)

# Remainder keywords, in priority order.
_UNIT_KEYWORDS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bcups?\b"), "cup"),
    (re.compile(r"\b(?:tbsp|tablespoons?)\b"), "tbsp"),
    (re.compile(r"\b(?:tsp|teaspoons?)\b"), "tsp"),
    (re.compile(r"\b(?:oz|ounces?)\b"), "oz"),
    (re.compile(r"\b(?:lbs?|pounds?)\b"), "lb"),
    (re.compile(r"\bslices?\b"), "slice"),
    (re.compile(r"\bpieces?\b"), "piece"),
)

COUNTABLE_FOODS = (
    "apple",
    "banana",
    "orange",
    "egg",
    "bread",
    "potato",
    "tomato",
    "onion",
    "chicken",
    "fish",
    "beef",
    "roti",
    "chapati",
    "naan",
    "tortilla",
)

# Edible grams for one countable unit, most specific first.
PIECE_GRAMS: tuple[tuple[str, float], ...] = (
    ("chicken breast", 150.0),
    ("chicken", 150.0),
    ("roti", 40.0),
    ("chapati", 40.0),
    ("naan", 100.0),
    ("tortilla", 45.0),
    ("egg", 50.0),
    ("bread", 30.0),
    ("toast", 30.0),
    ("apple", 150.0),
    ("banana", 120.0),
    ("orange", 130.0),
    ("potato", 150.0),
    ("tomato", 120.0),
    ("onion", 110.0),
)

# Stand-in weight for a piece of unknown size; keeps per-piece scaling numeric.
DEFAULT_PIECE_GRAMS = 100.0


def parse_quantity(description: str) -> ParsedQuantity:
    """Split the leading quantity off a food description.

    Weight units directly after the number are recognized and normalized to
    grams. Only the leading number is honored; quantities later in the text
    are left in the remainder.
    """
    text = description.strip().lower()
    for pattern, is_kilograms in _WEIGHT_PATTERNS:
        match = pattern.match(text)
        if match:
            quantity = float(match.group(1))
            if is_kilograms:
                quantity *= 1000
            return ParsedQuantity(
                quantity=quantity, unit="g", remainder=text[match.end() :].strip()
            )
    match = _LEADING_NUMBER.match(text)
    if match:
        return ParsedQuantity(
            quantity=float(match.group(1)),
            unit=None,
            remainder=match.group(2).strip(),
        )
    return ParsedQuantity(quantity=1.0, unit=None, remainder=text)


def explicit_grams(description: str) -> float | None:
    """Return the leading weight the user stated, if any."""
    parsed = parse_quantity(description)
    if parsed.unit in WEIGHT_UNITS:
        return parsed.quantity
    return None


def convert_quantity(parsed: ParsedQuantity) -> Portion:
    """Resolve a parsed quantity to a portion with a gram equivalent."""
    quantity = _clamp(parsed.quantity)
    if parsed.unit in WEIGHT_UNITS:
        return Portion(
            quantity=quantity,
            unit="g",
            grams=quantity * GRAMS_PER_UNIT[parsed.unit],
        )
    unit = _unit_from_keywords(parsed.remainder) or infer_unit(
        quantity, parsed.remainder
    )
    return resolve_portion(quantity, unit, parsed.remainder)


def resolve_portion(quantity: float, unit: str | None, name: str) -> Portion:
    """Resolve an explicit (quantity, unit) pair for a named food."""
    quantity = _clamp(quantity)
    normalized = (unit or "g").strip().lower()
    if normalized in {"gram", "grams", "gm"}:
        normalized = "g"
    if normalized in {"pieces", "items", "slices"}:
        normalized = normalized[:-1]
    if normalized in GRAMS_PER_UNIT:
        return Portion(
            quantity=quantity,
            unit=normalized,
            grams=quantity * GRAMS_PER_UNIT[normalized],
        )
    if normalized not in COUNT_UNITS:
        return Portion(quantity=quantity, unit=normalized, grams=quantity)
    piece_grams = piece_weight(name)
    if piece_grams is None:
        return Portion(
            quantity=quantity,
            unit=normalized,
            grams=quantity * DEFAULT_PIECE_GRAMS,
            weighed=False,
        )
    return Portion(quantity=quantity, unit=normalized, grams=quantity * piece_grams)


def piece_weight(name: str) -> float | None:
    """Return grams for one piece of the named food, if known."""
    lowered = name.lower()
    for key, grams in PIECE_GRAMS:
        if key in lowered:
            return grams
    return None


def _unit_from_keywords(remainder: str) -> str | None:
    for pattern, unit in _UNIT_KEYWORDS:
        if pattern.search(remainder):
            return unit
    return None


def infer_unit(quantity: float, remainder: str) -> str:
    """Guess the unit of a bare number from its size and the food it names."""
    if quantity == 1:
        return "piece"
    if 0 < quantity < 1:
        return "g"
    if any(food in remainder for food in COUNTABLE_FOODS):
        return "piece"
    return "g"


def _clamp(quantity: float) -> float:
    if not math.isfinite(quantity) or quantity < 0:
        return 0.0
    return quantity
