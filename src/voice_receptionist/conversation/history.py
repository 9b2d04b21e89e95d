"""Bounded conversation history."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from voice_receptionist.models import Turn, TurnRole

MAX_HISTORY = 12


class HistoryBuffer:
    """Keeps the most recent turns in insertion order, dropping the oldest on overflow."""

    def __init__(self, max_turns: int = MAX_HISTORY) -> None:
        if max_turns < 1:
            raise ValueError("History buffer needs room for at least one turn")
        self._turns: deque[Turn] = deque(maxlen=max_turns)

    @property
    def max_turns(self) -> int:
        return self._turns.maxlen or 0

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def ends_with_user(self, content: str) -> bool:
        """True when the newest turn is a user turn carrying exactly ``content``."""
        last = self.last()
        return last is not None and last.role == TurnRole.USER and last.content == content

    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def as_messages(self) -> list[dict[str, str]]:
        return [turn.as_message() for turn in self._turns]

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))
