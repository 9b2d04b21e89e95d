"""Console rendering of the conversation panel."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from voice_receptionist.models import ConversationView, RecognitionStatus, Turn, TurnRole


class ConsoleView:
    """Prints new turns, the interim transcript, the thinking indicator and the error banner."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()
        self._shown: set[str] = set()
        self._last_interim = ""
        self._last_error: str | None = None
        self._last_processing = False
        self._last_status = RecognitionStatus.IDLE

    def render(self, view: ConversationView) -> None:
        for turn in view.turns:
            if turn.id not in self._shown:
                self._shown.add(turn.id)
                self._console.print(_turn_panel(turn))

        if view.interim_transcript and view.interim_transcript != self._last_interim:
            self._console.print(Text(f"… {view.interim_transcript}", style="italic cyan"))
        self._last_interim = view.interim_transcript

        if view.recognition_status != self._last_status:
            if view.recognition_status == RecognitionStatus.LISTENING:
                self._console.print(Text("● Listening…", style="bold red"))
            self._last_status = view.recognition_status

        if view.processing and not self._last_processing:
            self._console.print(Text("Thinking...", style="dim"))
        self._last_processing = view.processing

        if view.error and view.error != self._last_error:
            self._console.print(Panel(view.error, title="Error", border_style="red"))
        self._last_error = view.error


def _turn_panel(turn: Turn) -> Panel:
    if turn.role == TurnRole.ASSISTANT:
        return Panel(turn.content, title="Clara", title_align="left", border_style="blue")
    return Panel(turn.content, title="You", title_align="right", border_style="magenta")
