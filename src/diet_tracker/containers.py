"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from diet_tracker.adapters.openai_food_client import OpenAIFoodClient
from diet_tracker.config import Settings, resolve_api_key
from diet_tracker.services.coach import CoachService
from diet_tracker.services.recognition import FoodRecognitionService
from diet_tracker.services.vision import ImageRecognitionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    recognition_service: FoodRecognitionService
    image_recognition_service: ImageRecognitionService
    coach_service: CoachService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    api_key = resolve_api_key(resolved_settings.openai_api_key)
    openai_client = OpenAIFoodClient.create(api_key) if api_key else None
    recognition_service = FoodRecognitionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
        store=resolved_settings.openai_store,
        debug=resolved_settings.recognition_debug,
    )
    image_recognition_service = ImageRecognitionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
        store=resolved_settings.openai_store,
    )
    coach_service = CoachService(
        client=openai_client,
        model=resolved_settings.openai_model,
        max_output_tokens=resolved_settings.coach_max_output_tokens,
        plan_max_output_tokens=resolved_settings.diet_plan_max_output_tokens,
        store=resolved_settings.openai_store,
        debug=resolved_settings.recognition_debug,
    )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        recognition_service=recognition_service,
        image_recognition_service=image_recognition_service,
        coach_service=coach_service,
        close_resources=close_resources,
    )
