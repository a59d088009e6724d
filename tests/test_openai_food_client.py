"""Tests for the OpenAI food recognition adapter."""

import asyncio
import json

import pytest

from diet_tracker.adapters.openai_food_client import OpenAIFoodClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = json.dumps({"foods": []})) -> None:
        self.responses = _FakeResponses(output_text)


def test_recognize_text_sends_instructions() -> None:
    fake = _FakeOpenAI('{"name": "rice"}')
    client = OpenAIFoodClient(client=fake)

    result = asyncio.run(
        client.recognize_text(
            model="gpt-4o",
            instructions="Be a nutritionist",
            text="1 cup rice",
            max_output_tokens=500,
            store=False,
        )
    )

    assert result == '{"name": "rice"}'
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["instructions"] == "Be a nutritionist"
    assert payload["input"] == "1 cup rice"
    assert payload["max_output_tokens"] == 500


def test_recognize_image_sends_image_url() -> None:
    fake = _FakeOpenAI()
    client = OpenAIFoodClient(client=fake)

    asyncio.run(
        client.recognize_image(
            model="gpt-4o",
            prompt="Detect foods",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            max_output_tokens=500,
            store=False,
        )
    )

    payload = fake.responses.last_payload
    assert payload is not None
    content = payload["input"][0]["content"]
    assert content[1]["image_url"] == "data:image/jpeg;base64,ZmFrZQ=="


def test_empty_response_raises() -> None:
    client = OpenAIFoodClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.recognize_text(
                model="gpt-4o",
                instructions="x",
                text="y",
                max_output_tokens=10,
                store=False,
            )
        )


def test_generate_text_sends_prompt_as_input() -> None:
    fake = _FakeOpenAI("Drink more water.")
    client = OpenAIFoodClient(client=fake)

    result = asyncio.run(
        client.generate_text(
            model="gpt-4o", prompt="Coach me", max_output_tokens=1000, store=False
        )
    )

    assert result == "Drink more water."
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["input"] == "Coach me"
    assert payload["max_output_tokens"] == 1000
