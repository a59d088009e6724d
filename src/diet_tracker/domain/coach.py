"""Domain models for coaching conversations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChatMessage:
    """Single message in a coaching conversation."""

    sender: str
    message: str
