"""Speech-to-text backend powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import logging
import threading

from .interfaces import (
    RecognitionEvent,
    RecognitionListener,
    RecognitionOptions,
    RecognitionResult,
    SpeechRecognizer,
    VoiceBackendUnavailableError,
)

INSTALL_HINT = "Voice STT backend unavailable. Install extras with: pip install 'voice-receptionist[voice]'"


class RecognitionFailure(Exception):
    """Capture ended with a platform error code such as ``no-speech`` or ``network``."""


class SpeechRecognitionRecognizer(SpeechRecognizer):
    """Capture one microphone utterance per session and transcribe it with Google Web Speech.

    The blocking microphone and network work runs in a worker thread; listener
    callbacks are always delivered on the event loop that called ``start``.
    The library has no streaming mode, so sessions report a single final
    result and never interim fragments.
    """

    def __init__(
        self,
        *,
        phrase_time_limit: float = 8.0,
        timeout: float | None = 5.0,
        sample_rate: int = 16_000,
        chunk_size: int = 1024,
        adjust_noise_seconds: float = 0.2,
        logger: logging.Logger | None = None,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise VoiceBackendUnavailableError(INSTALL_HINT) from exc
        self._sr = sr
        self._recognizer = sr.Recognizer()
        try:
            self._microphone = sr.Microphone(sample_rate=sample_rate, chunk_size=chunk_size)
        except (AttributeError, OSError) as exc:
            raise VoiceBackendUnavailableError(
                "Microphone backend unavailable. Install PyAudio and check the input device."
            ) from exc
        self._phrase_time_limit = phrase_time_limit
        self._timeout = timeout
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)
        self._task: asyncio.Task[None] | None = None
        self._microphone_busy = threading.Lock()
        self._logger = logger or logging.getLogger("voice_receptionist.voice.stt")

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, listener: RecognitionListener, options: RecognitionOptions) -> None:
        if self.active:
            raise RuntimeError("Voice capture is already running.")
        if self._microphone_busy.locked():
            raise RuntimeError("Microphone is still releasing the previous capture.")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._session(listener, options), name="speech-capture")

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the current capture session, if any, has ended."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _session(self, listener: RecognitionListener, options: RecognitionOptions) -> None:
        listener.on_start()
        try:
            transcript = await asyncio.to_thread(self._listen_and_transcribe, options.locale)
        except asyncio.CancelledError:
            listener.on_end()
            raise
        except RecognitionFailure as exc:
            listener.on_error(str(exc))
            listener.on_end()
            return
        except Exception as exc:  # noqa: BLE001 - backend faults end the session as a platform error.
            self._logger.warning("capture_session_failed", extra={"error": repr(exc)})
            listener.on_error(str(exc) or type(exc).__name__)
            listener.on_end()
            return

        if transcript:
            listener.on_result(RecognitionEvent(result_index=0, results=[RecognitionResult(transcript, True)]))
        listener.on_end()

    def _listen_and_transcribe(self, locale: str) -> str:
        with self._microphone_busy:
            return self._capture(locale)

    def _capture(self, locale: str) -> str:
        sr = self._sr
        try:
            with self._microphone as source:
                if self._adjust_noise_seconds > 0:
                    self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
                audio = self._recognizer.listen(
                    source,
                    timeout=self._timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
        except sr.WaitTimeoutError as exc:
            raise RecognitionFailure("no-speech") from exc
        except OSError as exc:
            raise RecognitionFailure("audio-capture") from exc

        try:
            return self._recognizer.recognize_google(audio, language=locale).strip()
        except sr.UnknownValueError:
            return ""
        except sr.RequestError as exc:
            self._logger.warning("speech_service_failed", extra={"error": str(exc)})
            raise RecognitionFailure("network") from exc
