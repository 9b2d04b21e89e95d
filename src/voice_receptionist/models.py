from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class RecognitionStatus(str, Enum):
    """Lifecycle states of the speech capture adapter."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    LISTENING = "listening"


@dataclass(slots=True, frozen=True)
class Turn:
    """One immutable conversation message."""

    id: str
    role: TurnRole
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls, role: TurnRole, content: str) -> Turn:
        if not content:
            raise ValueError("Turn content must not be empty")
        return cls(id=f"{role.value}-{uuid4().hex}", role=role, content=content)

    def as_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(slots=True, frozen=True)
class ResponderReply:
    reply: str


@dataclass(slots=True, frozen=True)
class ResponderError:
    message: str
    status_code: int | None = None


ResponderResult = ResponderReply | ResponderError


@dataclass(slots=True, frozen=True)
class ConversationView:
    """Read-only snapshot of everything the presentation layer renders."""

    turns: tuple[Turn, ...]
    interim_transcript: str
    pending_input: str
    processing: bool
    error: str | None
    recognition_status: RecognitionStatus
    auto_speak: bool
