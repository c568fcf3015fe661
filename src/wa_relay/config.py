from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SYSTEM_PROMPT = (
    "You are a friendly assistant replying to people on WhatsApp. "
    "Answer in plain text, in the language the user wrote in. "
    "Keep replies short: a few sentences at most, no markdown."
)


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseModel):
    # Env values arrive as strings; validate them into the declared types
    model_config = ConfigDict(validate_default=True)

    # --- HTTP server ---
    host: str = Field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: _env("PORT", "3000"))  # type: ignore[arg-type]
    log_level: LogLevel = Field(
        default_factory=lambda: _env("LOG_LEVEL", "INFO")  # type: ignore[arg-type]
    )

    # "completion" asks the hosted model, "greeting" answers hellos only
    reply_mode: Literal["completion", "greeting"] = Field(
        default_factory=lambda: _env("REPLY_MODE", "completion")  # type: ignore[arg-type]
    )

    # --- Chat completion (OpenRouter / any OpenAI-compatible endpoint) ---
    openrouter_api_key: str | None = Field(default_factory=lambda: _env("OPENROUTER_API_KEY"))
    openrouter_base_url: str = Field(
        default_factory=lambda: _env("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    )
    completion_model: str = Field(
        default_factory=lambda: _env("COMPLETION_MODEL", "deepseek/deepseek-r1-0528:free")
    )
    completion_temperature: float = Field(
        default_factory=lambda: _env("COMPLETION_TEMPERATURE", "0.7")  # type: ignore[arg-type]
    )
    completion_max_tokens: int = Field(
        default_factory=lambda: _env("COMPLETION_MAX_TOKENS", "300")  # type: ignore[arg-type]
    )
    completion_timeout: float = Field(
        default_factory=lambda: _env("COMPLETION_TIMEOUT", "30")  # type: ignore[arg-type]
    )
    # Empty string disables the system instruction
    system_prompt: str = Field(
        default_factory=lambda: _env("SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)
    )
    max_reply_chars: int = Field(
        ge=1,
        default_factory=lambda: _env("MAX_REPLY_CHARS", "1000")  # type: ignore[arg-type]
    )

    # --- Conversation window ---
    history_turns: int = Field(
        ge=1,
        default_factory=lambda: _env("HISTORY_TURNS", "10")  # type: ignore[arg-type]
    )
    max_senders: int = Field(
        ge=1,
        default_factory=lambda: _env("MAX_SENDERS", "1000")  # type: ignore[arg-type]
    )

    # --- Outbound messaging ---
    messaging_provider: Literal["fast2sms", "twilio"] = Field(
        default_factory=lambda: _env("MESSAGING_PROVIDER", "fast2sms")  # type: ignore[arg-type]
    )
    send_timeout: float = Field(
        default_factory=lambda: _env("SEND_TIMEOUT", "10")  # type: ignore[arg-type]
    )

    fast2sms_api_key: str | None = Field(default_factory=lambda: _env("FAST2SMS_API_KEY"))
    fast2sms_send_url: str = Field(
        default_factory=lambda: _env(
            "FAST2SMS_SEND_URL", "https://www.fast2sms.com/dev/whatsapp/send"
        )
    )
    fast2sms_route: str | None = Field(default_factory=lambda: _env("FAST2SMS_ROUTE"))

    # Alternate provider
    twilio_account_sid: str | None = Field(default_factory=lambda: _env("TWILIO_ACCOUNT_SID"))
    twilio_auth_token: str | None = Field(default_factory=lambda: _env("TWILIO_AUTH_TOKEN"))
    twilio_whatsapp_from: str | None = Field(
        default_factory=lambda: _env("TWILIO_WHATSAPP_FROM")
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def missing_credentials(self) -> list[str]:
        """
        Names of environment variables the current configuration needs but lacks.

        Used at startup to warn; the app still starts without them.
        """
        missing: list[str] = []
        if self.reply_mode == "completion" and not self.openrouter_api_key:
            missing.append("OPENROUTER_API_KEY")

        if self.messaging_provider == "fast2sms":
            if not self.fast2sms_api_key:
                missing.append("FAST2SMS_API_KEY")
        else:
            for name, value in (
                ("TWILIO_ACCOUNT_SID", self.twilio_account_sid),
                ("TWILIO_AUTH_TOKEN", self.twilio_auth_token),
                ("TWILIO_WHATSAPP_FROM", self.twilio_whatsapp_from),
            ):
                if not value:
                    missing.append(name)
        return missing


@lru_cache
def get_settings() -> Settings:
    return Settings()
