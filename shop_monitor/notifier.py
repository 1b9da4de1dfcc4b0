"""Slack Web API notifier.

Posts notification payloads to a Slack channel with ``chat.postMessage``.
Messages are sent once; a failed post is reported to the caller, not
retried.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Optional

import requests

from .config import REQUEST_TIMEOUT_SECONDS, SLACK_API_URL, SLACK_BOT_TOKEN, SLACK_CHANNEL_ID
from .models import NotificationPayload
from .utils import get_http_session, raise_for_status

logger = logging.getLogger(__name__)


class SlackAPIError(Exception):
    """Slack answered with ``ok: false``."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


class SlackNotifier:
    def __init__(
        self,
        token: Optional[str] = SLACK_BOT_TOKEN,
        channel: Optional[str] = SLACK_CHANNEL_ID,
        *,
        api_url: str = SLACK_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.token = token
        self.channel = channel
        self.api_url = api_url.rstrip("/")
        self.session = session or get_http_session()
        self.timeout = timeout

    def close(self) -> None:
        self.session.close()

    def _call(self, method: str, body: dict) -> dict:
        resp = self.session.post(
            f"{self.api_url}/{method}",
            json=body,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json; charset=utf-8",
            },
            timeout=self.timeout,
        )
        raise_for_status(resp)
        data = resp.json()
        if not data.get("ok"):
            raise SlackAPIError(method, data.get("error", "unknown_error"))
        return data

    def post(self, payload: NotificationPayload) -> str:
        """Send one payload. Returns the message timestamp (``ts``)."""
        body: dict[str, Any] = {
            "channel": self.channel,
            "text": payload.text,
            "link_names": True,
            "unfurl_links": False,
            "unfurl_media": False,
        }
        if payload.blocks:
            body["blocks"] = payload.slack_blocks()
        data = self._call("chat.postMessage", body)
        logger.info("Posted to %s: %s", self.channel, payload.text)
        return data.get("ts", "")

    def delete(self, ts: str) -> None:
        self._call("chat.delete", {"channel": self.channel, "ts": ts})
        logger.info("Deleted message %s from %s", ts, self.channel)

    def send_test_message(self, delete_after: float = 10.0) -> None:
        """Post a throwaway message and delete it after ``delete_after`` seconds."""
        logger.info("Sending test message to %s...", self.channel)
        ts = self.post(
            NotificationPayload(
                text="<!channel> Test Hello World! :ultrafastparrot: :flavortown: "
                f"(This message will self-destruct in {delete_after:g} seconds...)"
            )
        )
        logger.info("Message sent! Waiting %g seconds to delete...", delete_after)
        time.sleep(delete_after)
        self.delete(ts)
        logger.info("Test message deleted successfully!")


__all__ = ["SlackNotifier", "SlackAPIError"]
