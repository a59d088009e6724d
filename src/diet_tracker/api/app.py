"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request, status

from diet_tracker.api.models import (
    CoachRequest,
    DietPlanRequest,
    RecognizeFoodRequest,
    RecognizeImageRequest,
    TargetsRequest,
)
from diet_tracker.app_logging import configure_logging
from diet_tracker.containers import AppContainer
from diet_tracker.domain.coach import ChatMessage
from diet_tracker.domain.targets import BodyProfile, MacroTotals, NutritionTargets
from diet_tracker.services.targets import daily_targets


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/ai/recognize-food")
    async def recognize_food(
        payload: RecognizeFoodRequest, request: Request
    ) -> dict[str, object]:
        """Recognize nutrition for a free-text food description."""
        description = (payload.food_description or "").strip()
        if not description:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Food description is required",
            )
        state_container: AppContainer = request.app.state.container
        result = await state_container.recognition_service.recognize(description)
        return asdict(result)

    @app.post("/api/ai/recognize-image")
    async def recognize_image(
        payload: RecognizeImageRequest, request: Request
    ) -> dict[str, object]:
        """Recognize foods in a camera image."""
        if not payload.image_data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Image data is required",
            )
        state_container: AppContainer = request.app.state.container
        try:
            foods = await state_container.image_recognition_service.recognize(
                payload.image_data
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except Exception as exc:
            logger.exception("Image recognition failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to recognize food image",
            ) from exc
        return {"foods": [asdict(food) for food in foods]}

    @app.post("/api/nutrition/targets")
    async def nutrition_targets(payload: TargetsRequest) -> dict[str, object]:
        """Return the daily calorie target with consumed, remaining and progress."""
        return asdict(_targets_for(payload)[1])

    @app.post("/api/ai/coach-response")
    async def coach_response(
        payload: CoachRequest, request: Request
    ) -> dict[str, str]:
        """Answer a coaching question using the user's intake for today."""
        message = (payload.message or "").strip()
        if not message:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Message is required",
            )
        profile, targets = _targets_for(payload)
        history = [
            ChatMessage(sender=entry.sender, message=entry.message)
            for entry in payload.history
        ]
        state_container: AppContainer = request.app.state.container
        reply = await state_container.coach_service.reply(
            message, profile, targets, history
        )
        return {"response": reply}

    @app.post("/api/ai/diet-plan")
    async def diet_plan(payload: DietPlanRequest, request: Request) -> dict[str, str]:
        """Draft a personalized diet plan for the requested goal."""
        profile, targets = _targets_for(payload)
        state_container: AppContainer = request.app.state.container
        plan = await state_container.coach_service.diet_plan(
            profile, targets, payload.goal
        )
        return {"dietPlan": plan}

    return app


def _targets_for(payload: TargetsRequest) -> tuple[BodyProfile, NutritionTargets]:
    profile = BodyProfile(
        height_cm=payload.profile.height,
        weight_kg=payload.profile.weight,
        age=payload.profile.age,
        gender=payload.profile.gender,
        activity_level=payload.profile.activity_level,
    )
    meals = [
        MacroTotals(
            calories=meal.calories,
            protein=meal.protein,
            carbs=meal.carbs,
            fat=meal.fat,
        )
        for meal in payload.meals
    ]
    return profile, daily_targets(profile, meals)
