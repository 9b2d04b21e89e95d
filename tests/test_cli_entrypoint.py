from __future__ import annotations

import importlib
import sys
import types

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("voice_receptionist.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_show_config_masks_api_key() -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_receptionist.main import app

    result = typer_testing.CliRunner().invoke(app, ["show-config"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "respond_url" in result.stdout
    assert "sk-" not in result.stdout


def test_voice_chat_reports_actionable_error_when_voice_backends_missing(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_receptionist.main import app

    fake_stt = types.ModuleType("voice_receptionist.voice.stt_speechrecognition")
    fake_tts = types.ModuleType("voice_receptionist.voice.tts_pyttsx3")

    class _MissingBackend:
        def __init__(self, *args, **kwargs) -> None:
            raise RuntimeError("Voice backend missing")

    fake_stt.SpeechRecognitionRecognizer = _MissingBackend
    fake_tts.Pyttsx3SpeechSynthesizer = _MissingBackend

    monkeypatch.setitem(sys.modules, "voice_receptionist.voice.stt_speechrecognition", fake_stt)
    monkeypatch.setitem(sys.modules, "voice_receptionist.voice.tts_pyttsx3", fake_tts)

    result = typer_testing.CliRunner().invoke(app, ["voice-chat"], catch_exceptions=False)

    assert result.exit_code == 1
    assert "Voice backend missing" in result.stdout


def test_voice_chat_enter_stops_listening_without_waiting_for_speech(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from voice_receptionist.main import app

    fake_stt = types.ModuleType("voice_receptionist.voice.stt_speechrecognition")
    fake_tts = types.ModuleType("voice_receptionist.voice.tts_pyttsx3")

    class _HangingRecognizer:
        instances: list[_HangingRecognizer] = []

        def __init__(self, *args, **kwargs) -> None:
            self.starts = 0
            self.stops = 0
            self.instances.append(self)

        def start(self, listener, options) -> None:
            self.starts += 1
            listener.on_start()

        def stop(self) -> None:
            self.stops += 1

        async def wait(self) -> None:
            return None

    class _SilentSynthesizer:
        def __init__(self, *args, **kwargs) -> None:
            self.closed = False

        def speak(self, utterance) -> None:
            pass

        def cancel(self) -> None:
            pass

        def close(self) -> None:
            self.closed = True

    fake_stt.SpeechRecognitionRecognizer = _HangingRecognizer
    fake_tts.Pyttsx3SpeechSynthesizer = _SilentSynthesizer

    monkeypatch.setitem(sys.modules, "voice_receptionist.voice.stt_speechrecognition", fake_stt)
    monkeypatch.setitem(sys.modules, "voice_receptionist.voice.tts_pyttsx3", fake_tts)

    result = typer_testing.CliRunner().invoke(app, ["voice-chat"], input="\n\n/quit\n", catch_exceptions=False)

    assert result.exit_code == 0
    recognizer = _HangingRecognizer.instances[-1]
    assert recognizer.starts == 1
    assert recognizer.stops == 2
