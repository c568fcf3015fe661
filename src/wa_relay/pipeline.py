from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from . import fast2sms_client, twilio_client
from .config import Settings
from .history import ConversationStore
from .replies import CompletionReplyGenerator, GreetingReplyGenerator, ReplyGenerator
from .whatsapp import InboundMessage

logger = logging.getLogger(__name__)

Sender = Callable[[str, str], None]
Outcome = Literal["sent", "send_failed", "no_reply"]


@dataclass
class RelayResult:
    outcome: Outcome
    reply: str | None = None


@dataclass
class Relay:
    """
    One webhook pass: generate a reply, then hand it to the messaging provider.

    `send(to, body)` raises on failure; the error is logged here and never
    reaches the webhook caller.
    """

    generator: ReplyGenerator
    send: Sender

    def process(self, message: InboundMessage) -> RelayResult:
        logger.info("User %s: %r", message.sender, message.text)

        reply = self.generator.generate(message.sender, message.text)
        if reply is None:
            logger.info("No reply for %s", message.sender)
            return RelayResult(outcome="no_reply")

        logger.info("Bot reply to %s: %r", message.sender, reply)

        try:
            self.send(message.sender, reply)
        except Exception:
            logger.exception("Send error for %s", message.sender)
            return RelayResult(outcome="send_failed", reply=reply)

        return RelayResult(outcome="sent", reply=reply)


def get_sender(settings: Settings) -> Sender:
    if settings.messaging_provider == "twilio":
        return twilio_client.send_whatsapp
    return fast2sms_client.send_whatsapp


def build_reply_generator(settings: Settings, store: ConversationStore) -> ReplyGenerator:
    if settings.reply_mode == "greeting":
        return GreetingReplyGenerator()
    return CompletionReplyGenerator(
        store=store,
        system_prompt=settings.system_prompt,
        max_chars=settings.max_reply_chars,
    )


def build_relay(settings: Settings) -> Relay:
    """Wire the configured reply mode and messaging provider together."""
    store = ConversationStore(
        max_turns=settings.history_turns,
        max_senders=settings.max_senders,
    )
    return Relay(
        generator=build_reply_generator(settings, store),
        send=get_sender(settings),
    )
