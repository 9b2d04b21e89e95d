"""FastAPI application serving the receptionist respond endpoint."""

from __future__ import annotations

import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from voice_receptionist.config import Settings, get_settings

from .prompts import build_messages, normalize_history
from .upstream import ChatCompletionClient, ServerMisconfiguredError, UpstreamModelError

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Server misconfigured: missing OpenAI API key."


class RespondReply(BaseModel):
    reply: str


class RespondError(BaseModel):
    error: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(RespondError(error=message).model_dump(), status_code=status_code)


def create_app(settings: Settings | None = None, *, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the API; ``http_client`` overrides the transport used for the model provider."""
    app = FastAPI(title="Voice Receptionist", version="0.1.0")
    app.state.settings = settings or get_settings()
    app.state.http_client = http_client

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/api/respond",
        response_model=RespondReply,
        responses={400: {"model": RespondError}, 500: {"model": RespondError}, 502: {"model": RespondError}},
    )
    async def respond(request: Request):
        config: Settings = request.app.state.settings
        try:
            client = ChatCompletionClient(
                config.openai_api_key,
                model=config.openai_model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                base_url=config.openai_base_url,
                client=request.app.state.http_client,
            )
        except ServerMisconfiguredError:
            logger.error("respond_misconfigured")
            return _error(500, MISSING_KEY_MESSAGE)

        try:
            body = await request.json()
        except ValueError:
            return _error(400, "Invalid JSON body.")
        if not isinstance(body, dict):
            body = {}

        raw_prompt = body.get("prompt")
        prompt = raw_prompt.strip() if isinstance(raw_prompt, str) else ""
        if not prompt:
            return _error(400, "Provide a prompt message.")

        conversation = normalize_history(body.get("history"))
        messages = build_messages(prompt, conversation)
        logger.info(
            "respond_request",
            extra={"prompt_chars": len(prompt), "history_turns": len(conversation), "model": client.model},
        )

        try:
            reply = await client.complete(messages)
        except UpstreamModelError as exc:
            logger.warning("respond_upstream_error", extra={"status_code": exc.status_code})
            return _error(502, exc.message)
        except Exception as exc:  # noqa: BLE001 - reported to the caller as a 500.
            logger.exception("respond_failed")
            return _error(500, str(exc) or "Unexpected server error.")

        return RespondReply(reply=reply)

    return app


app = create_app()
