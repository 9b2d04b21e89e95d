"""Runtime configuration for the voice receptionist."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GREETING = "Hello! I'm your AI receptionist. Tap the microphone or type to tell me how I can help."


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="VOICE_RECEPTIONIST_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "voice-receptionist"
    log_level: str = "INFO"

    respond_url: str = Field(
        default="http://127.0.0.1:8000/api/respond",
        description="Endpoint the console front end posts conversation turns to.",
    )
    request_timeout_seconds: float | None = None
    history_limit: int = Field(default=12, ge=1, le=12)
    greeting: str = DEFAULT_GREETING

    auto_speak: bool = True
    speech_locale: str = "en-US"
    speech_rate: float = 1.0
    speech_pitch: float = 1.05

    host: str = "127.0.0.1"
    port: int = 8000

    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("VOICE_RECEPTIONIST_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices(
            "VOICE_RECEPTIONIST_OPENAI_MODEL",
            "OPENAI_MODEL",
            "OPENAI_RESPONSIVE_MODEL",
        ),
    )
    openai_base_url: str = "https://api.openai.com/v1"
    temperature: float = 0.4
    max_tokens: int = 320


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
