"""Text food recognition backed by a language model."""

import logging
from dataclasses import dataclass
from typing import Protocol

from diet_tracker.domain.nutrition import RecognitionResult
from diet_tracker.services.reconciler import reconcile
from diet_tracker.services.retry import call_with_retry

_logger = logging.getLogger(__name__)

RECOGNITION_PROMPT = """\
You are a registered nutritionist. Turn free-text food descriptions into
nutrition values for meal logging.

- Split meals into components ("with", "and", "+", commas).
- Normalise quantities to edible grams. Default conversions: 1 roti 40 g,
  1 naan 100 g, 1 cup cooked rice 150 g, 1 tbsp oil 14 g, 1 large egg 50 g,
  1 grilled chicken breast 150 g. Countable foods keep unit "piece".
- Account for cooking oil unless "no oil" is stated; list assumptions.
- Keep calories consistent with macros (4 P + 4 C + 9 F).
- Reply with JSON only, in this shape:

{
  "items": [{"name": str, "quantity_g": num, "calories": num,
             "protein_g": num, "carbs_g": num, "fat_g": num,
             "confidence": 0-1, "assumptions": [str]}],
  "totals": {"weight_g": num, "calories": num, "protein_g": num,
             "carbs_g": num, "fat_g": num},
  "per_100g": {"calories": num, "protein_g": num, "carbs_g": num,
               "fat_g": num},
  "notes": [str],
  "backcompat": {"name": str, "calories_per_100g": num,
                 "protein_per_100g": num, "carbs_per_100g": num,
                 "fat_per_100g": num, "estimated_quantity": num,
                 "unit": str, "confidence": 0-1}
}
"""


class FoodTextClient(Protocol):
    """Interface for language-model text recognition."""

    async def recognize_text(
        self,
        *,
        model: str,
        instructions: str,
        text: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        """Return the raw model output for a food description."""


@dataclass
class FoodRecognitionService:
    """Service that asks the model for nutrition and reconciles the answer."""

    client: FoodTextClient | None
    model: str
    max_output_tokens: int = 500
    store: bool = False
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def recognize(self, description: str) -> RecognitionResult:
        """Recognize a food description, falling back to local tables."""
        if self.client is None:
            if self.debug:
                _logger.info("No model client configured, using local recognition")
            return reconcile(description, None)

        client = self.client
        try:
            raw = await call_with_retry(
                lambda: client.recognize_text(
                    model=self.model,
                    instructions=RECOGNITION_PROMPT,
                    text=(
                        "Analyze this food description and provide accurate "
                        f'nutritional information: "{description}"'
                    ),
                    max_output_tokens=self.max_output_tokens,
                    store=self.store,
                ),
                action="recognize_text",
                retry_attempts=self.retry_attempts,
                retry_delay_seconds=self.retry_delay_seconds,
                debug=self.debug,
            )
        except Exception:
            _logger.exception("Food recognition request failed")
            return reconcile(description, None)

        result = reconcile(description, raw)
        if self.debug:
            _logger.info(
                "Food recognition: description=%s source=%s calories=%s",
                description,
                result.source.value,
                result.calories,
            )
        return result
