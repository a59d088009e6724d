"""Tests for the text food recognition service."""

import asyncio
import json

from diet_tracker.domain.nutrition import RecognitionSource
from diet_tracker.services.recognition import FoodRecognitionService
from tests.conftest import LEGACY_PAYLOAD, FailingFoodClient, FakeFoodClient


def test_recognize_uses_model_output() -> None:
    client = FakeFoodClient()
    service = FoodRecognitionService(client=client, model="gpt-4o")

    result = asyncio.run(service.recognize("100 g chicken breast with 100 g rice"))

    assert result.source == RecognitionSource.STRUCTURED_AI
    assert result.confidence == 93
    assert client.text_calls[0]["model"] == "gpt-4o"
    assert "100 g chicken breast with 100 g rice" in client.text_calls[0]["text"]


def test_recognize_reconciles_legacy_output() -> None:
    client = FakeFoodClient(text_output=json.dumps(LEGACY_PAYLOAD))
    service = FoodRecognitionService(client=client, model="gpt-4o", debug=True)

    result = asyncio.run(service.recognize("300g chicken biryani"))

    assert result.source == RecognitionSource.LEGACY_AI
    assert result.calories == 750


def test_recognize_without_client_uses_local_tables() -> None:
    service = FoodRecognitionService(client=None, model="gpt-4o")

    result = asyncio.run(service.recognize("100 g chicken breast with 100 g rice"))

    assert result.source == RecognitionSource.MOCK_MULTI_COMPONENT
    assert result.calories == 295


def test_recognize_retries_then_falls_back() -> None:
    client = FailingFoodClient()
    service = FoodRecognitionService(
        client=client,
        model="gpt-4o",
        retry_attempts=1,
        retry_delay_seconds=0,
    )

    result = asyncio.run(service.recognize("xyzfood"))

    assert client.calls == 2
    assert result.source == RecognitionSource.FALLBACK
    assert result.calories == 100


def test_recognize_garbage_output_falls_back() -> None:
    client = FakeFoodClient(text_output="I am not sure what that is.")
    service = FoodRecognitionService(client=client, model="gpt-4o")

    result = asyncio.run(service.recognize("2 rotis"))

    assert result.source == RecognitionSource.MOCK_SINGLE
    assert result.calories == 240
