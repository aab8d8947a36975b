"""Application configuration."""

import os

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    twilio_account_sid: str
    twilio_auth_token: str
    twilio_phone_number: str
    supabase_url: str
    supabase_service_key: str
    ai_chat_base_url: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    redis_url: str | None = None
    ignored_sender_numbers: str | None = None
    conversation_ttl_seconds: int = 86400
    conversation_max_messages: int = 20
    history_window: int = 10
    sms_max_length: int = 140
    ai_timeout_seconds: float = 15.0
    storage_timeout_seconds: float = 5.0
    sms_timeout_seconds: float = 10.0
    test_mode: bool = False
    validate_twilio_signature: bool = True
    public_webhook_url: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_ai_backend(self) -> "Settings":
        if not self.ai_chat_base_url and not self.openai_api_key:
            raise ValueError("Set AI_CHAT_BASE_URL or OPENAI_API_KEY")
        return self


def parse_phone_numbers(raw: str | None) -> set[str]:
    """Parse a comma separated list of phone numbers from env."""
    if raw is None:
        return set()
    numbers: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip()
        if value:
            numbers.add(value)
    return numbers
