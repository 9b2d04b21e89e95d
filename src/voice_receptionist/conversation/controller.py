"""Conversation-turn controller: one user turn in, one assistant turn out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from voice_receptionist.config import DEFAULT_GREETING
from voice_receptionist.models import (
    ConversationView,
    RecognitionStatus,
    ResponderError,
    Turn,
    TurnRole,
)
from voice_receptionist.responder import Responder
from voice_receptionist.voice.output import SpeechOutputAdapter

from .history import HistoryBuffer

INVALID_REPLY_MESSAGE = "Invalid response from server."

ChangeListener = Callable[[ConversationView], None]


class ConversationController:
    """Accepts typed or spoken input and runs at most one responder call at a time.

    ``submit`` does all of its bookkeeping synchronously before handing the
    network call to a task, so the in-flight check and the user-turn append
    can never interleave with another ``submit`` on the same event loop.
    """

    def __init__(
        self,
        responder: Responder,
        *,
        speech_output: SpeechOutputAdapter | None = None,
        history: HistoryBuffer | None = None,
        greeting: str | None = DEFAULT_GREETING,
        logger: logging.Logger | None = None,
    ) -> None:
        self._responder = responder
        self._speech_output = speech_output
        self._history = history if history is not None else HistoryBuffer()
        self._logger = logger or logging.getLogger("voice_receptionist.conversation")

        self._in_flight = False
        self._error: str | None = None
        self._interim_transcript = ""
        self._pending_input = ""
        self._recognition_status = RecognitionStatus.IDLE
        self._listeners: list[ChangeListener] = []
        self._turn_task: asyncio.Task[Turn | None] | None = None

        if greeting:
            self._history.append(Turn.create(TurnRole.ASSISTANT, greeting))

    @property
    def history(self) -> HistoryBuffer:
        return self._history

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def interim_transcript(self) -> str:
        return self._interim_transcript

    @property
    def pending_input(self) -> str:
        return self._pending_input

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every state change."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> ConversationView:
        return ConversationView(
            turns=self._history.turns(),
            interim_transcript=self._interim_transcript,
            pending_input=self._pending_input,
            processing=self._in_flight,
            error=self._error,
            recognition_status=self._recognition_status,
            auto_speak=self._speech_output.auto_speak if self._speech_output else False,
        )

    def set_pending_input(self, text: str) -> None:
        self._pending_input = text
        self._notify()

    def submit_pending(self) -> asyncio.Task[Turn | None] | None:
        """Submit the typed draft, as the send button does."""
        return self.submit(self._pending_input)

    def submit(self, text: str) -> asyncio.Task[Turn | None] | None:
        """Start a turn for ``text``.

        Returns the task that finishes the turn, or ``None`` when the input is
        blank or another turn is still waiting on the responder.
        """
        content = text.strip()
        if not content or self._in_flight:
            self._logger.debug(
                "turn_ignored",
                extra={"blank": not content, "in_flight": self._in_flight},
            )
            return None

        loop = asyncio.get_running_loop()
        if not self._history.ends_with_user(content):
            self._history.append(Turn.create(TurnRole.USER, content))
        history = self._history.as_messages()

        self._pending_input = ""
        self._interim_transcript = ""
        self._in_flight = True
        self._error = None
        self._logger.info("turn_submitted", extra={"chars": len(content), "history_turns": len(history)})
        self._notify()

        self._turn_task = loop.create_task(self._complete_turn(content, history))
        return self._turn_task

    async def ask(self, text: str) -> Turn | None:
        """Submit ``text`` and wait for the assistant turn it produces."""
        task = self.submit(text)
        if task is None:
            return None
        return await task

    async def wait_for_turn(self) -> Turn | None:
        """Wait for the turn currently in flight, whichever input path started it."""
        task = self._turn_task
        if task is None or task.done():
            return None
        return await task

    async def _complete_turn(self, prompt: str, history: list[dict[str, str]]) -> Turn | None:
        try:
            result = await self._responder.respond(prompt, history)
        except Exception as exc:  # noqa: BLE001 - any responder failure ends the turn as an error.
            self._logger.exception("responder_crashed", extra={"error": repr(exc)})
            result = ResponderError(message=str(exc) or "Failed to reach the server.")

        if isinstance(result, ResponderError):
            self._fail(result.message)
            return None

        reply = result.reply.strip()
        if not reply:
            self._fail(INVALID_REPLY_MESSAGE)
            return None

        turn = Turn.create(TurnRole.ASSISTANT, reply)
        self._history.append(turn)
        if self._speech_output is not None:
            self._speech_output.speak(turn.content)
        self._in_flight = False
        self._logger.info("turn_completed", extra={"chars": len(reply)})
        self._notify()
        return turn

    def _fail(self, message: str) -> None:
        self._error = message
        self._in_flight = False
        self._logger.warning("turn_failed", extra={"error": message})
        self._notify()

    # Capture adapter callbacks.

    def show_interim(self, text: str) -> None:
        self._interim_transcript = text
        self._notify()

    def show_error(self, message: str | None) -> None:
        self._error = message
        self._notify()

    def show_recognition_status(self, status: RecognitionStatus) -> None:
        self._recognition_status = status
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.snapshot()
        for listener in list(self._listeners):
            listener(view)
