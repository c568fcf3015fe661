from __future__ import annotations

import uvicorn

from .config import get_settings
from .history import ConversationStore
from .pipeline import build_reply_generator

CLI_PHONE = "999000000_cli"


def chat() -> None:
    """
    Interactive CLI chat through the configured reply generator.

    Nothing is sent to WhatsApp; replies are printed instead. The conversation
    window is kept under a fixed pseudo-phone number.
    """
    settings = get_settings()
    store = ConversationStore(
        max_turns=settings.history_turns,
        max_senders=settings.max_senders,
    )
    generator = build_reply_generator(settings, store)
    print(f"Local chat ({settings.reply_mode} mode). Type /quit to exit.\n")
    while True:
        try:
            user_input = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not user_input:
            continue
        if user_input.lower() in {"/q", "/quit", "/exit"}:
            break
        reply = generator.generate(CLI_PHONE, user_input)
        print(f"bot> {reply if reply is not None else '(no reply)'}\n")


def serve() -> None:
    """Run the webhook server on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(
        "wa_relay.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    chat()


if __name__ == "__main__":
    main()
