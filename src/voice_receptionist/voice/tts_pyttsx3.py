"""Text-to-speech backend powered by ``pyttsx3``."""

from __future__ import annotations

import queue
import threading

from .interfaces import SpeechSynthesizer, Utterance, VoiceBackendUnavailableError

INSTALL_HINT = "Voice TTS backend unavailable. Install extras with: pip install 'voice-receptionist[voice]'"


class Pyttsx3SpeechSynthesizer(SpeechSynthesizer):
    """Speaker playback using a local pyttsx3 engine.

    The engine is created, driven and stopped only on one worker thread, since
    several pyttsx3 drivers are bound to the thread that initialized them.
    ``cancel`` raises a flag that the worker checks at every spoken word.
    pyttsx3 drivers expose no pitch control, so ``Utterance.pitch`` is not applied.
    """

    def __init__(
        self,
        *,
        voice_id: str | None = None,
        base_rate: int = 200,
        volume: float | None = None,
    ) -> None:
        try:
            import pyttsx3
        except ImportError as exc:  # pragma: no cover - import guard
            raise VoiceBackendUnavailableError(INSTALL_HINT) from exc

        self._pyttsx3 = pyttsx3
        self._voice_id = voice_id
        self._base_rate = base_rate
        self._volume = volume
        self._locale: str | None = None
        self._engine = None
        self._init_error: Exception | None = None

        self._queue: queue.Queue[Utterance | None] = queue.Queue()
        self._cancelled = threading.Event()
        self._ready = threading.Event()
        self._worker = threading.Thread(target=self._run, name="pyttsx3-speaker", daemon=True)
        self._worker.start()
        self._ready.wait()
        if self._init_error is not None:
            raise VoiceBackendUnavailableError(f"Unable to start pyttsx3: {self._init_error}") from self._init_error

    def speak(self, utterance: Utterance) -> None:
        text = utterance.text.strip()
        if text:
            self._queue.put(utterance)

    def cancel(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        self._cancelled.set()

    def close(self) -> None:
        """Finish the utterance in progress and stop the worker thread."""
        self._queue.put(None)
        self._worker.join()

    def _run(self) -> None:
        try:
            self._engine = self._start_engine()
        except Exception as exc:  # noqa: BLE001 - reported to the constructor.
            self._init_error = exc
            self._ready.set()
            return
        self._ready.set()

        while True:
            utterance = self._queue.get()
            if utterance is None:
                return
            self._cancelled.clear()
            self._apply(utterance)
            self._engine.say(utterance.text)
            self._engine.runAndWait()

    def _start_engine(self):
        engine = self._pyttsx3.init()
        if self._voice_id:
            engine.setProperty("voice", self._voice_id)
        if self._volume is not None:
            engine.setProperty("volume", max(0.0, min(1.0, self._volume)))
        engine.connect("started-word", self._on_word)
        return engine

    def _on_word(self, name, location, length) -> None:
        if self._cancelled.is_set():
            self._engine.stop()

    def _apply(self, utterance: Utterance) -> None:
        self._engine.setProperty("rate", int(self._base_rate * utterance.rate))
        if self._voice_id or utterance.locale == self._locale:
            return
        self._locale = utterance.locale
        voice = _voice_for_locale(self._engine.getProperty("voices") or [], utterance.locale)
        if voice is not None:
            self._engine.setProperty("voice", voice)


def _voice_for_locale(voices: list, locale: str) -> str | None:
    wanted = locale.lower().replace("-", "_")
    for voice in voices:
        for language in getattr(voice, "languages", None) or []:
            if isinstance(language, bytes):
                language = language.decode("utf-8", errors="ignore")
            if str(language).lower().lstrip("\x05").replace("-", "_").startswith(wanted):
                return voice.id
    return None
