"""Speech capture and speech output boundaries."""

from .capture import SpeechCaptureAdapter, TranscriptSink
from .interfaces import (
    RecognitionEvent,
    RecognitionListener,
    RecognitionOptions,
    RecognitionResult,
    SpeechRecognizer,
    SpeechSynthesizer,
    Utterance,
    VoiceBackendUnavailableError,
)
from .output import SpeechOutputAdapter, VoiceOutputConfig

__all__ = [
    "RecognitionEvent",
    "RecognitionListener",
    "RecognitionOptions",
    "RecognitionResult",
    "SpeechCaptureAdapter",
    "SpeechOutputAdapter",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "TranscriptSink",
    "Utterance",
    "VoiceBackendUnavailableError",
    "VoiceOutputConfig",
]
