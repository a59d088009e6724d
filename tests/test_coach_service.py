"""Tests for the diet coaching service."""

import asyncio

from diet_tracker.domain.coach import ChatMessage
from diet_tracker.domain.targets import BodyProfile, MacroTotals
from diet_tracker.services.coach import (
    COACH_UNAVAILABLE_REPLY,
    DIET_PLAN_UNAVAILABLE_REPLY,
    CoachService,
    build_coach_prompt,
    build_diet_plan_prompt,
)
from diet_tracker.services.targets import daily_targets
from tests.conftest import FailingFoodClient, FakeFoodClient

PROFILE = BodyProfile(
    height_cm=180, weight_kg=80, age=30, gender="male", activity_level="moderate"
)
TARGETS = daily_targets(
    PROFILE, [MacroTotals(calories=295, protein=33.7, carbs=28, fat=3.9)]
)


def test_coach_prompt_includes_balance_and_recent_history() -> None:
    history = [ChatMessage(sender="user", message=f"question {i}") for i in range(7)]

    prompt = build_coach_prompt("What should I eat tonight?", PROFILE, TARGETS, history)

    assert "Daily Calorie Goal (TDEE): 2759 calories" in prompt
    assert "Calories Consumed Today: 295" in prompt
    assert "Calories Remaining: 2464" in prompt
    assert "(Target: 128g)" in prompt
    assert 'User\'s Current Message: "What should I eat tonight?"' in prompt
    assert "user: question 1" not in prompt
    assert "user: question 2" in prompt
    assert "user: question 6" in prompt


def test_diet_plan_prompt_includes_goal() -> None:
    prompt = build_diet_plan_prompt(PROFILE, TARGETS, "lose")

    assert "- Goal: lose" in prompt
    assert "Activity Level: moderate" in prompt
    assert "Hydration goals" in prompt


def test_reply_uses_model_output() -> None:
    client = FakeFoodClient()
    service = CoachService(client=client, model="gpt-4o")

    reply = asyncio.run(service.reply("Any snack ideas?", PROFILE, TARGETS))

    assert reply == client.coach_output
    assert client.coach_calls[0]["max_output_tokens"] == 500
    assert "Any snack ideas?" in str(client.coach_calls[0]["prompt"])


def test_diet_plan_uses_plan_token_limit() -> None:
    client = FakeFoodClient(coach_output="Breakfast: oats")
    service = CoachService(client=client, model="gpt-4o", debug=True)

    plan = asyncio.run(service.diet_plan(PROFILE, TARGETS, "gain"))

    assert plan == "Breakfast: oats"
    assert client.coach_calls[0]["max_output_tokens"] == 1000


def test_reply_retries_then_apologizes() -> None:
    client = FailingFoodClient()
    service = CoachService(
        client=client, model="gpt-4o", retry_attempts=1, retry_delay_seconds=0
    )

    reply = asyncio.run(service.reply("Hi", PROFILE, TARGETS))

    assert client.calls == 2
    assert reply == COACH_UNAVAILABLE_REPLY


def test_without_client_returns_unavailable_messages() -> None:
    service = CoachService(client=None, model="gpt-4o")

    reply = asyncio.run(service.reply("Hi", PROFILE, TARGETS))
    plan = asyncio.run(service.diet_plan(PROFILE, TARGETS))

    assert reply == COACH_UNAVAILABLE_REPLY
    assert plan == DIET_PLAN_UNAVAILABLE_REPLY
