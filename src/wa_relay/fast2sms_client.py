from __future__ import annotations

from typing import Any

import httpx

from .config import get_settings
from .errors import MessagingError


def build_payload(to: str, body: str, route: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"message": body, "numbers": to}
    if route:
        payload["route"] = route
    return payload


def send_whatsapp(to: str, body: str, client: httpx.Client | None = None) -> None:
    """
    Send a WhatsApp reply through the Fast2SMS send API.

    Raises RuntimeError when FAST2SMS_API_KEY is missing and MessagingError
    when the request fails or Fast2SMS answers with "return": false.
    """
    settings = get_settings()
    if not settings.fast2sms_api_key:
        raise RuntimeError("Fast2SMS is not configured (FAST2SMS_API_KEY)")

    headers = {
        "authorization": settings.fast2sms_api_key,
        "Content-Type": "application/json",
    }
    payload = build_payload(to, body, settings.fast2sms_route)

    owns_client = client is None
    http = client or httpx.Client(timeout=settings.send_timeout)
    try:
        resp = http.post(settings.fast2sms_send_url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise MessagingError("fast2sms", f"request failed: {e}") from e
    finally:
        if owns_client:
            http.close()

    if not resp.is_success:
        raise MessagingError("fast2sms", f"HTTP {resp.status_code}: {resp.text[:500]}")

    try:
        data = resp.json()
    except ValueError:
        # 2xx with a non-JSON body; nothing more to check
        return

    if isinstance(data, dict) and data.get("return") is False:
        raise MessagingError("fast2sms", str(data.get("message") or data))
