from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import get_settings
from .pipeline import Relay, build_relay
from .whatsapp import InboundMessage, is_verify_event, parse_inbound

logging.basicConfig(
    level=get_settings().log_level,
    format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: warn about missing credentials, but keep serving
    settings = get_settings()
    missing = settings.missing_credentials()
    if missing:
        logger.warning("Missing configuration: %s", ", ".join(missing))
    logger.info(
        "Reply mode=%s, messaging provider=%s",
        settings.reply_mode,
        settings.messaging_provider,
    )
    yield


app = FastAPI(title="wa-relay", version="0.1.0", lifespan=lifespan)


@lru_cache
def get_relay() -> Relay:
    """The process-wide relay; owns the conversation store."""
    return build_relay(get_settings())


def relay_or_none() -> Relay | None:
    """
    Webhook dependency: the shared relay, or None when it cannot be built.

    Bad configuration must not turn into a 500 for the gateway, so the error
    is logged and the webhook still acknowledges.
    """
    try:
        return get_relay()
    except Exception:
        logger.exception("Relay could not be built from the current configuration")
        return None


def process_and_reply(relay: Relay, message: InboundMessage) -> None:
    """
    Background task: run the relay pass for one inbound message.

    Runs after the webhook has been acknowledged, so failures are only logged.
    """
    try:
        relay.process(message)
    except Exception:
        logger.exception("Relay failed for %s", message.sender)


@app.get("/")
def health() -> PlainTextResponse:
    return PlainTextResponse("WhatsApp bot running")


@app.post("/webhook")
async def webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    relay: Relay | None = Depends(relay_or_none),
) -> Response:
    """
    Fast2SMS WhatsApp webhook.

    Every request is answered with 200 so the gateway never re-delivers:
      - {"event": "webhook_verify"} -> {"status": "success"}
      - a whatsapp_reports message -> reply is generated and sent in the background
      - anything else (or an error while reading it) -> empty 200
    """
    try:
        payload: Any = await request.json()
        logger.debug("Incoming: %s", payload)

        if is_verify_event(payload):
            return JSONResponse({"status": "success"})

        message = parse_inbound(payload)
        if message is None:
            logger.debug("Ignoring webhook payload without a usable report")
        elif relay is None:
            logger.warning("Dropping message from %s: relay is not configured", message.sender)
        else:
            background_tasks.add_task(process_and_reply, relay, message)
    except Exception:
        logger.exception("Webhook error")

    return Response(status_code=200)
