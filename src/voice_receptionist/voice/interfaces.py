"""Contracts for platform speech recognition and synthesis."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class RecognitionResult:
    """One recognized fragment; ``is_final`` once the platform commits to it."""

    transcript: str
    is_final: bool


@dataclass(slots=True, frozen=True)
class RecognitionEvent:
    """Results reported by the platform, starting at ``result_index`` for this event."""

    result_index: int
    results: Sequence[RecognitionResult]


@dataclass(slots=True, frozen=True)
class RecognitionOptions:
    locale: str = "en-US"
    interim_results: bool = True
    max_alternatives: int = 1
    continuous: bool = False


@dataclass(slots=True, frozen=True)
class Utterance:
    text: str
    rate: float
    pitch: float
    locale: str


class RecognitionListener(Protocol):
    """Receives platform recognition callbacks."""

    def on_start(self) -> None: ...

    def on_result(self, event: RecognitionEvent) -> None: ...

    def on_error(self, error: str) -> None: ...

    def on_end(self) -> None: ...


class SpeechRecognizer(Protocol):
    """Platform capability that turns live speech into transcript events."""

    def start(self, listener: RecognitionListener, options: RecognitionOptions) -> None:
        """Begin one capture session, reporting progress to ``listener``."""

    def stop(self) -> None:
        """Cancel the active capture session, if any."""


class SpeechSynthesizer(Protocol):
    """Platform capability that speaks one utterance at a time."""

    def speak(self, utterance: Utterance) -> None:
        """Start speaking ``utterance``."""

    def cancel(self) -> None:
        """Stop whatever is currently being spoken."""


class VoiceBackendUnavailableError(RuntimeError):
    """Raised when an optional speech backend library is not installed."""
