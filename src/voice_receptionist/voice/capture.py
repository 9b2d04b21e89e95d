"""Speech capture state machine driven by platform recognition callbacks."""

from __future__ import annotations

import logging
from typing import Protocol

from voice_receptionist.models import RecognitionStatus

from .interfaces import RecognitionEvent, RecognitionOptions, SpeechRecognizer

UNSUPPORTED_MESSAGE = "Voice input is not supported on this platform."
RECOGNITION_ERROR_MESSAGE = "Voice recognition error."
START_FAILED_MESSAGE = "Unable to start voice capture."


class TranscriptSink(Protocol):
    """Where capture progress goes; implemented by the conversation controller."""

    def submit(self, text: str) -> object: ...

    def show_interim(self, text: str) -> None: ...

    def show_error(self, message: str | None) -> None: ...

    def show_recognition_status(self, status: RecognitionStatus) -> None: ...


class SpeechCaptureAdapter:
    """Moves through idle -> initializing -> listening -> idle for each capture session."""

    def __init__(
        self,
        recognizer: SpeechRecognizer | None,
        sink: TranscriptSink,
        options: RecognitionOptions | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._recognizer = recognizer
        self._sink = sink
        self._options = options or RecognitionOptions()
        self._status = RecognitionStatus.IDLE
        self._logger = logger or logging.getLogger("voice_receptionist.voice.capture")

    @property
    def status(self) -> RecognitionStatus:
        return self._status

    @property
    def available(self) -> bool:
        return self._recognizer is not None

    def start(self) -> None:
        if self._recognizer is None:
            self._sink.show_error(UNSUPPORTED_MESSAGE)
            return

        self._set_status(RecognitionStatus.INITIALIZING)
        try:
            self._recognizer.start(self, self._options)
        except Exception as exc:  # noqa: BLE001 - platform start failures are shown, not raised.
            self._logger.warning("capture_start_failed", extra={"error": repr(exc)})
            self._sink.show_error(str(exc) or START_FAILED_MESSAGE)
            self._set_status(RecognitionStatus.IDLE)

    def stop(self) -> None:
        if self._recognizer is not None:
            self._recognizer.stop()
        self._set_status(RecognitionStatus.IDLE)

    def toggle(self) -> None:
        """Microphone button: stop while listening, otherwise start."""
        if self._recognizer is None:
            self._sink.show_error(UNSUPPORTED_MESSAGE)
            return
        if self._status == RecognitionStatus.LISTENING:
            self.stop()
        else:
            self.start()

    def on_start(self) -> None:
        self._set_status(RecognitionStatus.LISTENING)
        self._sink.show_interim("")
        self._sink.show_error(None)

    def on_result(self, event: RecognitionEvent) -> None:
        final_text = ""
        interim_text = ""
        for result in list(event.results)[event.result_index :]:
            if result.is_final:
                final_text += result.transcript
            else:
                interim_text += result.transcript

        if final_text:
            self._sink.show_interim("")
            self._logger.info("capture_finalized", extra={"chars": len(final_text)})
            self._sink.submit(final_text.strip())
        else:
            self._sink.show_interim(interim_text.strip())

    def on_error(self, error: str) -> None:
        self._set_status(RecognitionStatus.IDLE)
        self._logger.warning("capture_error", extra={"error": error})
        self._sink.show_error(error or RECOGNITION_ERROR_MESSAGE)

    def on_end(self) -> None:
        self._set_status(RecognitionStatus.IDLE)

    def _set_status(self, status: RecognitionStatus) -> None:
        self._status = status
        self._sink.show_recognition_status(status)
