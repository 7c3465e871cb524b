# Overview: Push notifications to the LINE Messaging API.

"""
Notification sink.

push() is fire-and-forget from the caller's point of view: it never raises
for delivery problems. Any failure to deliver is logged and reported as
False.

The notifier instance lives in app.extensions["ppe_notifier"] so tests can
swap it for a recording fake.
"""

from __future__ import annotations

from typing import Any

import httpx
from flask import Flask, current_app


EXTENSION_KEY = "ppe_notifier"
PUSH_PATH = "/v2/bot/message/push"


class LineNotifier:
    def __init__(
        self,
        *,
        access_token: str | None,
        api_base: str = "https://api.line.me",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.access_token = access_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    @staticmethod
    def build_messages(message: str | dict | list) -> list[dict]:
        """
        Normalize a message into LINE's messages array.

        Plain strings become a single text message. A dict is sent as one
        structured message (flex, sticker, ...); a list is sent as given.
        """
        if isinstance(message, str):
            return [{"type": "text", "text": message}]
        if isinstance(message, dict):
            return [message]
        return list(message)

    def push(self, recipient_id: str, message: str | dict | list) -> bool:
        if not self.is_configured:
            current_app.logger.warning("LINE push skipped: LINE_CHANNEL_ACCESS_TOKEN is not set")
            return False
        if not recipient_id:
            current_app.logger.warning("LINE push skipped: no recipient")
            return False

        body: dict[str, Any] = {
            "to": recipient_id,
            "messages": self.build_messages(message),
        }
        headers = {"Authorization": f"Bearer {self.access_token}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.api_base}{PUSH_PATH}", json=body, headers=headers)
        except httpx.HTTPError:
            current_app.logger.exception("LINE push to %s failed", recipient_id)
            return False

        if response.is_error:
            current_app.logger.warning(
                "LINE push to %s rejected: HTTP %s %s",
                recipient_id,
                response.status_code,
                response.text[:500],
            )
            return False
        return True


def init_app(app: Flask) -> None:
    app.extensions[EXTENSION_KEY] = LineNotifier(
        access_token=app.config.get("LINE_CHANNEL_ACCESS_TOKEN"),
        api_base=app.config.get("LINE_API_BASE", "https://api.line.me"),
        timeout=app.config.get("NOTIFY_TIMEOUT", 10.0),
    )


def get_notifier():
    return current_app.extensions[EXTENSION_KEY]


def notify_admin(message: str | dict) -> bool:
    """Push to ADMIN_LINE_USER_ID; False when no admin recipient is configured."""
    admin_id = current_app.config.get("ADMIN_LINE_USER_ID")
    if not admin_id:
        current_app.logger.info("Admin notification skipped: ADMIN_LINE_USER_ID is not set")
        return False
    return get_notifier().push(admin_id, message)
