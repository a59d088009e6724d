"""Shared test fixtures."""

import json
import random
from dataclasses import dataclass, field

import pytest

from diet_tracker.config import Settings
from diet_tracker.containers import AppContainer
from diet_tracker.services.coach import CoachService, CoachTextClient
from diet_tracker.services.recognition import FoodRecognitionService, FoodTextClient
from diet_tracker.services.vision import FoodImageClient, ImageRecognitionService

STRUCTURED_PAYLOAD: dict[str, object] = {
    "items": [
        {
            "name": "chicken breast, grilled, skinless",
            "quantity_g": 100,
            "calories": 165,
            "protein_g": 31,
            "carbs_g": 0,
            "fat_g": 3.6,
            "confidence": 0.97,
            "assumptions": ["grilled", "skinless", "no added oil"],
        },
        {
            "name": "plain white rice, cooked",
            "quantity_g": 100,
            "calories": 130,
            "protein_g": 2.7,
            "carbs_g": 28,
            "fat_g": 0.3,
            "confidence": 0.96,
            "assumptions": [],
        },
    ],
    "totals": {
        "weight_g": 200,
        "calories": 295,
        "protein_g": 33.7,
        "carbs_g": 28,
        "fat_g": 3.9,
    },
    "per_100g": {"calories": 147.5, "protein_g": 16.85, "carbs_g": 14, "fat_g": 1.95},
    "notes": [],
    "backcompat": {
        "name": "combined meal",
        "calories_per_100g": 147.5,
        "protein_per_100g": 16.85,
        "carbs_per_100g": 14,
        "fat_per_100g": 1.95,
        "estimated_quantity": 200,
        "unit": "g",
        "confidence": 0.93,
    },
}

LEGACY_PAYLOAD: dict[str, object] = {
    "name": "Chicken Biryani",
    "calories_per_100g": 212,
    "protein_per_100g": 9.3,
    "carbs_per_100g": 27.1,
    "fat_per_100g": 7.4,
    "estimated_quantity": 250,
    "unit": "g",
    "confidence": 0.8,
}


@dataclass
class FakeFoodClient(FoodTextClient, FoodImageClient, CoachTextClient):
    """Fake model client returning fixed output text."""

    text_output: str = field(default_factory=lambda: json.dumps(STRUCTURED_PAYLOAD))
    image_output: str = field(
        default_factory=lambda: json.dumps(
            {
                "foods": [
                    {
                        "name": "Banana",
                        "calories_per_100g": 89.4,
                        "protein_per_100g": 1.09,
                        "carbs_per_100g": 22.84,
                        "fat_per_100g": 0.33,
                        "estimated_quantity": 1,
                        "unit": "piece",
                        "confidence": 0.92,
                    }
                ]
            }
        )
    )
    coach_output: str = "You have 2464 calories left today. Try grilled fish."
    text_calls: list[dict[str, object]] = field(default_factory=list)
    image_calls: list[dict[str, object]] = field(default_factory=list)
    coach_calls: list[dict[str, object]] = field(default_factory=list)

    async def recognize_text(
        self,
        *,
        model: str,
        instructions: str,
        text: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        self.text_calls.append({"model": model, "text": text})
        return self.text_output

    async def recognize_image(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        self.image_calls.append({"model": model, "image_data_url": image_data_url})
        return self.image_output

    async def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        self.coach_calls.append(
            {"model": model, "prompt": prompt, "max_output_tokens": max_output_tokens}
        )
        return self.coach_output


@dataclass
class FailingFoodClient(FoodTextClient, FoodImageClient, CoachTextClient):
    """Fake model client that always raises."""

    calls: int = 0

    async def recognize_text(
        self,
        *,
        model: str,
        instructions: str,
        text: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        self.calls += 1
        raise RuntimeError("provider unavailable")

    async def recognize_image(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        self.calls += 1
        raise RuntimeError("provider unavailable")

    async def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        self.calls += 1
        raise RuntimeError("provider unavailable")


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def food_client() -> FakeFoodClient:
    return FakeFoodClient()


@pytest.fixture
def container(settings: Settings, food_client: FakeFoodClient) -> AppContainer:
    recognition_service = FoodRecognitionService(
        client=food_client,
        model=settings.openai_model,
        retry_delay_seconds=0,
    )
    image_recognition_service = ImageRecognitionService(
        client=food_client,
        model=settings.openai_model,
        rng=random.Random(0),
    )
    coach_service = CoachService(
        client=food_client,
        model=settings.openai_model,
        retry_delay_seconds=0,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        recognition_service=recognition_service,
        image_recognition_service=image_recognition_service,
        coach_service=coach_service,
        close_resources=close_resources,
    )
