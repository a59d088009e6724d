"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_PLACEHOLDER_API_KEYS = {"", "your-openai-api-key-here"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_max_output_tokens: int = 500
    coach_max_output_tokens: int = 500
    diet_plan_max_output_tokens: int = 1000
    openai_store: bool = False
    recognition_debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_api_key(raw: str | None) -> str | None:
    """Return the API key, treating blanks and the sample value as unset."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in _PLACEHOLDER_API_KEYS:
        return None
    return cleaned
