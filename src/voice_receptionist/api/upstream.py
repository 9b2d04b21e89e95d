"""Hosted chat-completion model client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

FALLBACK_REPLY = "I'm sorry, but I couldn't generate a response right now."


class ServerMisconfiguredError(RuntimeError):
    """Raised when the server lacks the credentials needed to reach the model."""


class UpstreamModelError(RuntimeError):
    """The model provider answered with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ChatCompletionClient:
    """Calls an OpenAI-compatible ``/chat/completions`` endpoint and returns the first choice."""

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.4,
        max_tokens: int = 320,
        base_url: str = "https://api.openai.com/v1",
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if not api_key:
            raise ServerMisconfiguredError("Missing model provider API key")
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._client = client
        self._logger = logger or logging.getLogger("voice_receptionist.api.upstream")

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, messages: list[dict[str, str]]) -> str:
        body = {
            "model": self._model,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "presence_penalty": 0,
            "messages": messages,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        if self._client is not None:
            response = await self._client.post(self._url, json=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=None) as client:
                response = await client.post(self._url, json=body, headers=headers)

        if not response.is_success:
            message = _upstream_error_message(response)
            self._logger.warning(
                "upstream_rejected",
                extra={"status_code": response.status_code, "model": self._model},
            )
            raise UpstreamModelError(message, response.status_code)

        return _first_choice_text(response.json())


def _upstream_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
    return f"Upstream model error ({response.status_code})."


def _first_choice_text(payload: Any) -> str:
    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return FALLBACK_REPLY
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        return FALLBACK_REPLY
    return content.strip()
