"""Text-to-speech gating for spoken assistant replies."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .interfaces import SpeechSynthesizer, Utterance


@dataclass(slots=True)
class VoiceOutputConfig:
    """Configurable controls for reply speech."""

    auto_speak: bool = True
    rate: float = 1.0
    pitch: float = 1.05
    locale: str = "en-US"


class SpeechOutputAdapter:
    """Speaks replies once the user has interacted and auto-speak is on."""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer | None,
        config: VoiceOutputConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._synthesizer = synthesizer
        self._config = config or VoiceOutputConfig()
        self._interacted = False
        self._logger = logger or logging.getLogger("voice_receptionist.voice.output")

    @property
    def interacted(self) -> bool:
        return self._interacted

    @property
    def auto_speak(self) -> bool:
        return self._config.auto_speak

    def mark_interaction(self) -> None:
        """Record the first user gesture; playback is blocked until then."""
        self._interacted = True

    def set_auto_speak(self, enabled: bool) -> None:
        self._config.auto_speak = enabled

    def toggle_auto_speak(self) -> bool:
        self._config.auto_speak = not self._config.auto_speak
        return self._config.auto_speak

    def speak(self, text: str) -> Utterance | None:
        """Replace any utterance in progress with ``text``; returns what was spoken."""
        if self._synthesizer is None or not self._interacted or not self._config.auto_speak:
            return None

        utterance = Utterance(
            text=text,
            rate=self._config.rate,
            pitch=self._config.pitch,
            locale=self._config.locale,
        )
        self._synthesizer.cancel()
        self._synthesizer.speak(utterance)
        self._logger.debug("speech_started", extra={"chars": len(text)})
        return utterance
