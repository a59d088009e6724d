"""Image food recognition using LLMs."""

import base64
import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from diet_tracker.domain.ai_payloads import VisionFood, VisionPayload
from diet_tracker.domain.nutrition import RecognizedFood
from diet_tracker.services.reconciler import decode_payload, to_percent
from diet_tracker.services.scaler import round_half_up

_logger = logging.getLogger(__name__)

VISION_SOURCE = "vision-ai"
VISION_FALLBACK_SOURCE = "vision-fallback"
MOCK_VISION_SOURCE = "mock-vision"

VISION_PROMPT = """\
Identify every food item in this image and estimate nutrition per 100 g.
Countable foods (eggs, chicken breasts, fruit, bread slices, rotis) use unit
"piece" or "slice"; everything else uses grams. Default weights: 1 egg 50 g,
1 chicken breast 120 g, 1 cup cooked rice 150 g, 1 slice bread 30 g,
1 apple 150 g, 1 banana 120 g, 1 roti 40 g. Add 1 tbsp (14 g) oil per 100 g
for fried food. Reply with JSON only:

{"foods": [{"name": str, "calories_per_100g": num, "protein_per_100g": num,
            "carbs_per_100g": num, "fat_per_100g": num,
            "estimated_quantity": num, "unit": str, "confidence": 0-1}]}
"""

MOCK_FOODS: tuple[RecognizedFood, ...] = (
    RecognizedFood(
        "Grilled Chicken Breast", 165, 31, 0, 3.6, 150, "g", 85, MOCK_VISION_SOURCE
    ),
    RecognizedFood("White Rice", 130, 2.7, 28, 0.3, 100, "g", 90, MOCK_VISION_SOURCE),
    RecognizedFood("Apple", 52, 0.3, 14, 0.2, 1, "piece", 95, MOCK_VISION_SOURCE),
    RecognizedFood("Banana", 89, 1.1, 23, 0.3, 1, "piece", 92, MOCK_VISION_SOURCE),
    RecognizedFood("Bread Slice", 80, 3, 15, 1, 1, "slice", 88, MOCK_VISION_SOURCE),
)

_FALLBACK_KEYWORDS = (
    ("chicken", "Chicken"),
    ("rice", "Rice"),
    ("apple", "Apple"),
    ("banana", "Banana"),
    ("bread", "Bread"),
)


class FoodImageClient(Protocol):
    """Interface for LLM image recognition."""

    async def recognize_image(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        """Return the raw model output for a food image."""


@dataclass
class ImageRecognitionService:
    """Service that prepares image prompts and reshapes results."""

    client: FoodImageClient | None
    model: str
    max_output_tokens: int = 500
    store: bool = False
    rng: random.Random = field(default_factory=random.Random)

    async def recognize(self, image_data: str) -> list[RecognizedFood]:
        """Recognize foods in a data URL or bare base64 image."""
        if self.client is None:
            _logger.warning("No model client configured, returning a mock food")
            return [self.rng.choice(MOCK_FOODS)]

        raw = await self.client.recognize_image(
            model=self.model,
            prompt=VISION_PROMPT,
            image_data_url=to_data_url(image_data),
            max_output_tokens=self.max_output_tokens,
            store=self.store,
        )
        return reshape_foods(raw)


def reshape_foods(raw: str) -> list[RecognizedFood]:
    """Turn model output into foods, falling back to a keyword guess."""
    data = decode_payload(raw)
    if data is not None:
        try:
            if isinstance(data.get("foods"), list):
                payload = VisionPayload.model_validate(data)
                if payload.foods:
                    return [_to_food(food) for food in payload.foods]
            else:
                return [_to_food(VisionFood.model_validate(data))]
        except ValidationError as exc:
            _logger.warning("Vision output failed validation: %s", exc.error_count())
    _logger.warning("Could not parse vision output, using keyword fallback")
    return [_fallback_food(raw)]


def _to_food(food: VisionFood) -> RecognizedFood:
    return RecognizedFood(
        name=food.name or "Unknown Food",
        calories_per_100g=int(round_half_up(food.calories_per_100g or 0.0)),
        protein_per_100g=round_half_up(food.protein_per_100g or 0.0, 1),
        carbs_per_100g=round_half_up(food.carbs_per_100g or 0.0, 1),
        fat_per_100g=round_half_up(food.fat_per_100g or 0.0, 1),
        quantity=max(food.estimated_quantity or 100.0, 0.0),
        unit=food.unit or "g",
        confidence=to_percent(food.confidence),
        source=VISION_SOURCE,
    )


def _fallback_food(raw: str) -> RecognizedFood:
    lowered = raw.lower()
    name = next(
        (label for keyword, label in _FALLBACK_KEYWORDS if keyword in lowered),
        "Food Item",
    )
    return RecognizedFood(
        name=name,
        calories_per_100g=150,
        protein_per_100g=10,
        carbs_per_100g=20,
        fat_per_100g=5,
        quantity=100,
        unit="g",
        confidence=50,
        source=VISION_FALLBACK_SOURCE,
    )


def to_data_url(image_data: str) -> str:
    """Return the image as a data URL, wrapping bare base64 if needed."""
    cleaned = image_data.strip()
    if cleaned.startswith("data:"):
        return cleaned
    try:
        image_bytes = base64.b64decode(cleaned, validate=True)
    except ValueError as exc:
        raise ValueError("Image data is not valid base64") from exc
    return _to_data_url(image_bytes)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
