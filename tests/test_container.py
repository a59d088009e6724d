"""Tests for container wiring."""

import asyncio

from diet_tracker.config import Settings, resolve_api_key
from diet_tracker.containers import build_container


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)
    assert container.recognition_service.client is not None
    assert container.image_recognition_service.client is not None
    assert container.coach_service.client is not None
    asyncio.run(container.close_resources())


def test_build_container_without_key_uses_local_recognition() -> None:
    container = build_container(Settings(openai_api_key="your-openai-api-key-here"))
    assert container.recognition_service.client is None
    assert container.image_recognition_service.client is None
    assert container.coach_service.client is None
    asyncio.run(container.close_resources())


def test_resolve_api_key() -> None:
    assert resolve_api_key(None) is None
    assert resolve_api_key("   ") is None
    assert resolve_api_key(" sk-test ") == "sk-test"
