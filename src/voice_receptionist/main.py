"""CLI startup entrypoint for the voice receptionist."""

from __future__ import annotations

import asyncio

import typer
from rich import print

from voice_receptionist.config import settings
from voice_receptionist.console import ConsoleView
from voice_receptionist.conversation import ConversationController, HistoryBuffer
from voice_receptionist.responder import RemoteResponderClient
from voice_receptionist.telemetry import configure_logging
from voice_receptionist.voice import (
    RecognitionOptions,
    SpeechCaptureAdapter,
    SpeechOutputAdapter,
    VoiceOutputConfig,
)

app = typer.Typer(help="Voice receptionist service and console front end")

QUIT_COMMANDS = {"/quit", "/exit"}


def _build_controller(endpoint: str | None, speech_output: SpeechOutputAdapter | None = None) -> ConversationController:
    responder = RemoteResponderClient(
        endpoint or settings.respond_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    return ConversationController(
        responder,
        speech_output=speech_output,
        history=HistoryBuffer(max_turns=settings.history_limit),
        greeting=settings.greeting,
    )


async def _read_line(prompt: str) -> str | None:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


@app.command("show-config")
def show_config() -> None:
    """Show runtime configuration (the API key is masked)."""
    print(
        {
            "app_name": settings.app_name,
            "respond_url": settings.respond_url,
            "history_limit": settings.history_limit,
            "openai_model": settings.openai_model,
            "openai_api_key": "set" if settings.openai_api_key else None,
            "auto_speak": settings.auto_speak,
            "speech_locale": settings.speech_locale,
        }
    )


@app.command()
def serve(
    host: str = typer.Option(None, help="Interface to bind"),
    port: int = typer.Option(None, help="Port to listen on"),
) -> None:
    """Run the respond API under uvicorn."""
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run(
        "voice_receptionist.api.app:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def chat(endpoint: str = typer.Option(None, help="Respond endpoint URL")) -> None:
    """Type caller requests and read the receptionist's replies."""
    configure_logging(settings.log_level)
    controller = _build_controller(endpoint)
    view = ConsoleView()
    controller.subscribe(view.render)
    view.render(controller.snapshot())

    async def _run() -> None:
        while True:
            line = await _read_line("> ")
            if line is None or line.strip().lower() in QUIT_COMMANDS:
                break
            controller.set_pending_input(line)
            task = controller.submit_pending()
            if task is not None:
                await task

    asyncio.run(_run())


@app.command("voice-chat")
def voice_chat(
    endpoint: str = typer.Option(None, help="Respond endpoint URL"),
    auto_speak: bool = typer.Option(None, help="Speak replies aloud (defaults to configuration)"),
    phrase_time_limit: float = typer.Option(8.0, help="Per-utterance capture limit in seconds"),
) -> None:
    """Talk to the receptionist: Enter toggles the microphone, typed text is sent as-is."""
    try:
        from voice_receptionist.voice.stt_speechrecognition import SpeechRecognitionRecognizer
        from voice_receptionist.voice.tts_pyttsx3 import Pyttsx3SpeechSynthesizer
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    except ImportError:
        print({"error": "Voice extras are missing. Install with: pip install 'voice-receptionist[voice]'"})
        raise typer.Exit(code=1)

    try:
        recognizer = SpeechRecognitionRecognizer(phrase_time_limit=phrase_time_limit)
        synthesizer = Pyttsx3SpeechSynthesizer()
    except RuntimeError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    configure_logging(settings.log_level)
    speech_output = SpeechOutputAdapter(
        synthesizer,
        VoiceOutputConfig(
            auto_speak=settings.auto_speak if auto_speak is None else auto_speak,
            rate=settings.speech_rate,
            pitch=settings.speech_pitch,
            locale=settings.speech_locale,
        ),
    )
    controller = _build_controller(endpoint, speech_output=speech_output)
    capture = SpeechCaptureAdapter(recognizer, controller, RecognitionOptions(locale=settings.speech_locale))
    view = ConsoleView()
    controller.subscribe(view.render)
    view.render(controller.snapshot())
    print(
        {
            "voice_chat": "started",
            "hint": "Press Enter to start or stop listening, type to send text, "
            "'/voice' toggles spoken replies, '/quit' exits.",
        }
    )

    async def _run() -> None:
        while True:
            line = await _read_line("")
            speech_output.mark_interaction()
            if line is None or line.strip().lower() in QUIT_COMMANDS:
                capture.stop()
                await recognizer.wait()
                break
            command = line.strip().lower()
            if command == "/voice":
                print({"auto_speak": speech_output.toggle_auto_speak()})
                continue
            if not command:
                capture.toggle()
                continue
            controller.set_pending_input(line)
            controller.submit_pending()
            await controller.wait_for_turn()

    try:
        asyncio.run(_run())
    finally:
        synthesizer.close()


if __name__ == "__main__":
    app()
