"""Conversation state: bounded history and the turn controller."""

from .controller import ConversationController
from .history import MAX_HISTORY, HistoryBuffer

__all__ = ["ConversationController", "HistoryBuffer", "MAX_HISTORY"]
