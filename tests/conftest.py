from __future__ import annotations

from collections.abc import Iterator

import pytest

from wa_relay import llm
from wa_relay.config import get_settings

ENV_VARS = (
    "HOST",
    "PORT",
    "LOG_LEVEL",
    "REPLY_MODE",
    "OPENROUTER_API_KEY",
    "OPENROUTER_BASE_URL",
    "COMPLETION_MODEL",
    "COMPLETION_TEMPERATURE",
    "COMPLETION_MAX_TOKENS",
    "COMPLETION_TIMEOUT",
    "SYSTEM_PROMPT",
    "MAX_REPLY_CHARS",
    "HISTORY_TURNS",
    "MAX_SENDERS",
    "MESSAGING_PROVIDER",
    "SEND_TIMEOUT",
    "FAST2SMS_API_KEY",
    "FAST2SMS_SEND_URL",
    "FAST2SMS_ROUTE",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_WHATSAPP_FROM",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from default settings and no cached model."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    monkeypatch.setattr(llm, "_model", None)
    yield
    get_settings.cache_clear()
