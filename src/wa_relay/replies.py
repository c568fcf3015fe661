from __future__ import annotations

import logging
from typing import Final, Protocol

from . import llm
from .history import ConversationStore, Turn

logger = logging.getLogger(__name__)

DEFAULT_MAX_REPLY_CHARS: Final[int] = 1000
ELLIPSIS: Final[str] = "..."

GREETING_WORDS: Final[tuple[str, ...]] = ("hi", "hello", "hey")
GREETING_REPLY: Final[str] = "hello"

FALLBACK_GREETING: Final[str] = "Hello! 👋 How can I help you today?"
FALLBACK_THANKS: Final[str] = "You're welcome! 😊"
FALLBACK_GENERIC: Final[str] = "Sorry, something went wrong. Please try again in a moment."


class ReplyGenerator(Protocol):
    def generate(self, sender: str, text: str) -> str | None:
        """Return the reply for `text`, or None when nothing should be sent."""
        ...


def clamp_reply(text: str, max_chars: int = DEFAULT_MAX_REPLY_CHARS) -> str:
    """
    Keep a WhatsApp reply within max_chars.

    Longer text is cut and ends with "...", so the result is never longer
    than max_chars.
    """
    if len(text) <= max_chars:
        return text

    # Budget too small to fit the ellipsis; hard-cut instead.
    if max_chars <= len(ELLIPSIS):
        return text[:max_chars]

    allowed = max_chars - len(ELLIPSIS)
    return text[:allowed].rstrip() + ELLIPSIS


def is_greeting(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in GREETING_WORDS)


def fallback_reply(text: str) -> str:
    """Canned reply used when the completion call fails."""
    lowered = text.lower()
    if "hi" in lowered or "hello" in lowered:
        return FALLBACK_GREETING
    if "thank" in lowered:
        return FALLBACK_THANKS
    return FALLBACK_GENERIC


class GreetingReplyGenerator:
    """Rule-only replies: answer greetings with a fixed "hello", ignore the rest."""

    def __init__(self, reply: str = GREETING_REPLY) -> None:
        self.reply = reply

    def generate(self, sender: str, text: str) -> str | None:
        if is_greeting(text):
            return self.reply
        return None


class CompletionReplyGenerator:
    """
    Replies from the hosted chat-completion model.

    The request carries the optional system prompt, the sender's recent
    turns from the store, and the new message. Successful exchanges are added
    to the store; failures of any kind degrade to fallback_reply().
    """

    def __init__(
        self,
        store: ConversationStore,
        system_prompt: str | None = None,
        max_chars: int = DEFAULT_MAX_REPLY_CHARS,
    ) -> None:
        self.store = store
        self.system_prompt = system_prompt or None
        self.max_chars = max_chars

    def build_turns(self, sender: str, text: str) -> list[Turn]:
        turns: list[Turn] = []
        if self.system_prompt:
            turns.append({"role": "system", "content": self.system_prompt})
        window = self.store.window(sender)
        # An odd cap can leave an assistant turn whose question was evicted
        while window and window[0]["role"] == "assistant":
            window.pop(0)
        turns.extend(window)
        turns.append({"role": "user", "content": text})
        return turns

    def generate(self, sender: str, text: str) -> str:
        try:
            answer = llm.ask_llm(self.build_turns(sender, text))
        except Exception:
            logger.exception("Completion failed for %s, using fallback reply", sender)
            return clamp_reply(fallback_reply(text), self.max_chars)

        self.store.append(
            sender,
            {"role": "user", "content": text},
            {"role": "assistant", "content": answer},
        )
        return clamp_reply(answer, self.max_chars)
