from __future__ import annotations


class MessagingError(Exception):
    """The messaging provider did not accept an outbound message."""

    def __init__(self, provider: str, detail: str) -> None:
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
        self.detail = detail
