"""Diet coaching and meal planning backed by a language model."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from diet_tracker.domain.coach import ChatMessage
from diet_tracker.domain.targets import BodyProfile, NutritionTargets
from diet_tracker.services.retry import call_with_retry
from diet_tracker.services.scaler import round_half_up
from diet_tracker.services.targets import PROTEIN_G_PER_KG

_logger = logging.getLogger(__name__)

HISTORY_WINDOW = 5
DEFAULT_GOAL = "maintain"

COACH_UNAVAILABLE_REPLY = (
    "I'm sorry, I'm having trouble responding right now. Please try again later."
)
DIET_PLAN_UNAVAILABLE_REPLY = (
    "I'm sorry, I'm having trouble generating a diet plan right now. "
    "Please try again later."
)

_COACH_INSTRUCTIONS = """\
Instructions:
1. Provide personalized, actionable advice based on their current nutrition status
2. Always mention their current calorie balance (consumed vs remaining)
3. Be encouraging and supportive
4. Give specific food recommendations when appropriate
5. Keep responses concise but helpful (2-3 paragraphs max)
6. If they ask about specific foods, provide calorie estimates and healthier
   alternatives
7. Always consider their TDEE and current macro intake

Respond as their personal AI diet coach:"""

_DIET_PLAN_INSTRUCTIONS = """\
Please provide:
1. A personalized diet plan with specific meal suggestions
2. Macro distribution recommendations
3. Hydration goals
4. Meal timing advice
5. Foods to include and avoid
6. Portion size guidance

Format your response as a structured diet plan with clear sections."""


class CoachTextClient(Protocol):
    """Interface for free-form language-model replies."""

    async def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        """Return the model reply for a prompt."""


@dataclass
class CoachService:
    """Service that answers coaching questions and drafts diet plans."""

    client: CoachTextClient | None
    model: str
    max_output_tokens: int = 500
    plan_max_output_tokens: int = 1000
    store: bool = False
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def reply(
        self,
        message: str,
        profile: BodyProfile,
        targets: NutritionTargets,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        """Answer a user message with their profile and intake as context."""
        prompt = build_coach_prompt(message, profile, targets, history)
        return await self._generate(
            prompt,
            max_output_tokens=self.max_output_tokens,
            action="coach_reply",
            unavailable=COACH_UNAVAILABLE_REPLY,
        )

    async def diet_plan(
        self,
        profile: BodyProfile,
        targets: NutritionTargets,
        goal: str = DEFAULT_GOAL,
    ) -> str:
        """Draft a personalized diet plan for a goal."""
        prompt = build_diet_plan_prompt(profile, targets, goal)
        return await self._generate(
            prompt,
            max_output_tokens=self.plan_max_output_tokens,
            action="diet_plan",
            unavailable=DIET_PLAN_UNAVAILABLE_REPLY,
        )

    async def _generate(
        self, prompt: str, *, max_output_tokens: int, action: str, unavailable: str
    ) -> str:
        if self.client is None:
            _logger.warning("No model client configured for %s", action)
            return unavailable
        client = self.client
        try:
            reply = await call_with_retry(
                lambda: client.generate_text(
                    model=self.model,
                    prompt=prompt,
                    max_output_tokens=max_output_tokens,
                    store=self.store,
                ),
                action=action,
                retry_attempts=self.retry_attempts,
                retry_delay_seconds=self.retry_delay_seconds,
                debug=self.debug,
            )
        except Exception:
            _logger.exception("Coach %s request failed", action)
            return unavailable
        if self.debug:
            _logger.info("Coach %s: %s characters", action, len(reply))
        return reply


def build_coach_prompt(
    message: str,
    profile: BodyProfile,
    targets: NutritionTargets,
    history: Sequence[ChatMessage] = (),
) -> str:
    """Build the coaching prompt from the profile, intake and recent chat."""
    recent = "\n".join(
        f"{entry.sender}: {entry.message}" for entry in history[-HISTORY_WINDOW:]
    )
    protein_target = int(round_half_up((profile.weight_kg or 0) * PROTEIN_G_PER_KG))
    consumed = targets.consumed
    return (
        'You are an AI Diet Coach named "GymFreak Coach". You are knowledgeable, '
        "supportive, and personalized.\n\n"
        f"{_profile_block(profile, targets)}\n\n"
        "Current Nutrition Status:\n"
        f"- Calories Consumed Today: {consumed.calories}\n"
        f"- Calories Remaining: {targets.remaining.calories}\n"
        f"- Protein Consumed: {consumed.protein}g (Target: {protein_target}g)\n"
        f"- Carbs Consumed: {consumed.carbs}g\n"
        f"- Fat Consumed: {consumed.fat}g\n\n"
        f"Recent Chat History:\n{recent}\n\n"
        f'User\'s Current Message: "{message}"\n\n'
        f"{_COACH_INSTRUCTIONS}"
    )


def build_diet_plan_prompt(
    profile: BodyProfile, targets: NutritionTargets, goal: str = DEFAULT_GOAL
) -> str:
    """Build the diet plan prompt for a goal such as lose, maintain or gain."""
    consumed = targets.consumed
    return (
        "You are a professional nutritionist and diet coach. Create a "
        "personalized diet plan based on the following user information:\n\n"
        f"{_profile_block(profile, targets)}\n"
        f"- Goal: {goal}\n\n"
        "Current Nutrition Status:\n"
        f"- Calories Consumed Today: {consumed.calories}\n"
        f"- Calories Remaining: {targets.remaining.calories}\n"
        f"- Protein Consumed: {consumed.protein}g\n"
        f"- Carbs Consumed: {consumed.carbs}g\n"
        f"- Fat Consumed: {consumed.fat}g\n\n"
        f"{_DIET_PLAN_INSTRUCTIONS}"
    )


def _profile_block(profile: BodyProfile, targets: NutritionTargets) -> str:
    return (
        "User Profile:\n"
        f"- Height: {profile.height_cm} cm\n"
        f"- Weight: {profile.weight_kg} kg\n"
        f"- Age: {profile.age} years\n"
        f"- Gender: {profile.gender}\n"
        f"- Activity Level: {profile.activity_level}\n"
        f"- Daily Calorie Goal (TDEE): {targets.tdee} calories"
    )
