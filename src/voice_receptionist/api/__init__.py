"""HTTP surface: the respond endpoint and its model provider client."""

from .app import create_app
from .prompts import SYSTEM_PROMPT, build_messages, normalize_history
from .upstream import ChatCompletionClient, ServerMisconfiguredError, UpstreamModelError

__all__ = [
    "ChatCompletionClient",
    "SYSTEM_PROMPT",
    "ServerMisconfiguredError",
    "UpstreamModelError",
    "build_messages",
    "create_app",
    "normalize_history",
]
