from __future__ import annotations

from collections.abc import Sequence
from typing import cast

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from .config import get_settings
from .history import Turn

_model: ChatOpenAI | None = None


def get_model() -> ChatOpenAI:
    """
    Lazily create and cache the chat-completion model.

    Points ChatOpenAI at the OpenRouter-compatible base URL with the bearer key
    from OPENROUTER_API_KEY. Retries are disabled: a failed call falls back to
    a canned reply instead.

    Raises RuntimeError when OPENROUTER_API_KEY is missing; OPENAI_API_KEY is
    never used.
    """
    global _model
    if _model is None:
        settings = get_settings()
        if not settings.openrouter_api_key:
            raise RuntimeError("OPENROUTER_API_KEY is not configured")

        _model = ChatOpenAI(
            model=settings.completion_model,
            api_key=SecretStr(settings.openrouter_api_key),
            base_url=settings.openrouter_base_url,
            temperature=settings.completion_temperature,
            max_tokens=settings.completion_max_tokens,  # type: ignore[call-arg]
            timeout=settings.completion_timeout,
            max_retries=0,
        )
    return _model


def to_lc_messages(turns: Sequence[Turn]) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    for turn in turns:
        if turn["role"] == "system":
            messages.append(SystemMessage(content=turn["content"]))
        elif turn["role"] == "assistant":
            messages.append(AIMessage(content=turn["content"]))
        else:
            messages.append(HumanMessage(content=turn["content"]))
    return messages


def ask_llm(turns: Sequence[Turn]) -> str:
    """
    Send role-tagged turns to the completion endpoint and return the reply text.

    Raises ValueError when the model answers with no text.
    """
    model = get_model()
    response = model.invoke(to_lc_messages(turns))
    content = response.content  # type: ignore[reportUnknownMemberType]
    if not isinstance(content, str):
        # Some providers return a list of content blocks
        content = "".join(
            str(block.get("text", "")) if isinstance(block, dict) else str(block)
            for block in cast(list[object], content)
        )
    content = content.strip()
    if not content:
        raise ValueError("Completion returned no content")
    return content
