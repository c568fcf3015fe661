from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class InboundMessage(BaseModel):
    sender: str
    text: str


def is_verify_event(payload: Any) -> bool:
    """Fast2SMS sends {"event": "webhook_verify"} when the webhook URL is saved."""
    return isinstance(payload, dict) and payload.get("event") == "webhook_verify"


def parse_inbound(payload: Any) -> InboundMessage | None:
    """
    Pull the sender and text out of a Fast2SMS WhatsApp webhook:

      { "whatsapp_reports": [ { "from": "918928417703", "body": "Hi there" } ] }

    Only the first report is used. Returns None for anything else, including
    a report without a sender or without text.
    """
    if not isinstance(payload, dict):
        return None

    reports = payload.get("whatsapp_reports")
    if not isinstance(reports, list) or not reports:
        return None

    report = reports[0]
    if not isinstance(report, dict):
        return None

    sender = report.get("from")
    text = report.get("body")

    # Some gateway payloads carry the number as a JSON integer
    if isinstance(sender, int) and not isinstance(sender, bool):
        sender = str(sender)

    if not isinstance(sender, str) or not sender.strip():
        return None
    if not isinstance(text, str) or not text.strip():
        return None

    return InboundMessage(sender=sender.strip(), text=text)
