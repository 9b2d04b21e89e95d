"""Client for the conversation respond endpoint."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from voice_receptionist.models import ResponderError, ResponderReply, ResponderResult


class Responder(Protocol):
    """Produces an assistant reply for a prompt and its preceding conversation."""

    async def respond(self, prompt: str, history: Sequence[dict[str, str]]) -> ResponderResult:
        """Return a reply, or an error result for any expected failure."""


class RemoteResponderClient:
    """Posts the prompt plus trimmed history to ``/api/respond`` over HTTP."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = httpx.Timeout(timeout_seconds)
        self._client = client
        self._logger = logger or logging.getLogger("voice_receptionist.responder")

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def respond(self, prompt: str, history: Sequence[dict[str, str]]) -> ResponderResult:
        body = {
            "prompt": prompt,
            "history": [{"role": entry["role"], "content": entry["content"]} for entry in history],
        }
        try:
            response = await self._post(body)
        except Exception as exc:  # noqa: BLE001 - transport failures become an error result.
            self._logger.warning("respond_transport_failed", extra={"endpoint": self._endpoint, "error": repr(exc)})
            return ResponderError(message=str(exc) or "Failed to reach the server.")

        payload = _json_or_none(response)
        if not response.is_success:
            message = payload.get("error") if isinstance(payload, dict) else None
            if not isinstance(message, str) or not message:
                message = f"Request failed ({response.status_code})"
            self._logger.info(
                "respond_rejected",
                extra={"endpoint": self._endpoint, "status_code": response.status_code},
            )
            return ResponderError(message=message, status_code=response.status_code)

        reply = payload.get("reply") if isinstance(payload, dict) else None
        if not isinstance(reply, str):
            return ResponderError(message="Invalid response from server.", status_code=response.status_code)
        return ResponderReply(reply=reply)

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self._endpoint, json=body)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._endpoint, json=body)


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
