"""Receptionist persona and chat message assembly."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

SYSTEM_PROMPT = """
You are "Clara", an AI receptionist for a modern workplace. Your goals:
- Provide warm, professional greetings.
- Quickly identify caller intent, contact details, and preferred follow-up.
- Offer clear next steps, including booking meetings, capturing messages, or escalating when needed.
- Keep responses concise (2-4 sentences) while sounding human and empathetic.
- Confirm key information back to the caller.
- If unsure, politely request clarification.
Respond in plain text without markdown lists unless specifically requested by the caller.
""".strip()

MAX_HISTORY_MESSAGES = 12


class HistoryMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


def normalize_history(raw_history: Any, limit: int = MAX_HISTORY_MESSAGES) -> list[HistoryMessage]:
    """Keep the trailing ``limit`` items, then drop anything that is not a usable turn."""
    if not isinstance(raw_history, list):
        return []

    conversation: list[HistoryMessage] = []
    for item in raw_history[-limit:]:
        if not isinstance(item, dict):
            continue
        role = item.get("role")
        content = item.get("content")
        if role in ("user", "assistant") and isinstance(content, str) and content.strip():
            conversation.append(HistoryMessage(role=role, content=content.strip()))
    return conversation


def build_messages(prompt: str, conversation: list[HistoryMessage]) -> list[dict[str, str]]:
    """System prompt, prior turns, then the prompt unless it already closes the history."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(entry.model_dump() for entry in conversation)

    last = conversation[-1] if conversation else None
    if last is None or last.role != "user" or last.content != prompt:
        messages.append({"role": "user", "content": prompt})
    return messages
