"""
Conversation Message Domain Model

Messages and per-message emotional state supplied by the caller.

PRIVACY: Message content may contain sensitive information.
It must never be written to logs.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Iterable, Sequence

from eva.domain.errors import ValidationError


class MessageRole(StrEnum):
    """Message author role."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """
    A single immutable conversation message.

    An ordered sequence of messages forms the conversation history.

    Attributes:
        role: Message author role
        content: Message text content
        timestamp: When message was created
    """

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not isinstance(self.role, MessageRole):
            try:
                object.__setattr__(self, "role", MessageRole(self.role))
            except ValueError as e:
                raise ValidationError(f"Unknown message role: {self.role!r}", "role") from e
        if self.content is None:
            object.__setattr__(self, "content", "")

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=MessageRole.ASSISTANT, content=content)

    @property
    def is_user(self) -> bool:
        return self.role == MessageRole.USER

    def to_chat_dict(self) -> dict:
        """Convert to chat-completion message format."""
        return {"role": self.role.value, "content": self.content}

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


def user_messages(history: Iterable[Message]) -> list[Message]:
    """Return only user-authored messages, preserving order."""
    return [m for m in history if m.is_user]


def recent(history: Sequence[Message], limit: int) -> list[Message]:
    """Return the last `limit` messages (none when limit <= 0)."""
    if limit <= 0:
        return []
    return list(history[-limit:])


@dataclass(frozen=True)
class EmotionalState:
    """
    Caller-supplied emotional state for one message.

    Attributes:
        primary_emotion: Emotion label (e.g. "anxious", "despair")
        intensity: Intensity on a 1-10 scale
    """

    primary_emotion: str = "neutral"
    intensity: int = 5

    def __post_init__(self) -> None:
        if not isinstance(self.intensity, int) or isinstance(self.intensity, bool):
            raise ValidationError("Intensity must be an integer", "intensity")
        if not 1 <= self.intensity <= 10:
            raise ValidationError(
                f"Intensity must be 1-10, got {self.intensity}", "intensity"
            )
        object.__setattr__(
            self, "primary_emotion", (self.primary_emotion or "neutral").strip().lower()
        )

    def describes(self, label: str) -> bool:
        """Whether the primary emotion mentions the given label."""
        return label.lower() in self.primary_emotion

    def to_dict(self) -> dict:
        return {
            "primary_emotion": self.primary_emotion,
            "intensity": self.intensity,
        }

