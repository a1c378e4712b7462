"""
Slack bot notifications.

The bot exposes two endpoints: `/notify` sends the daily survey prompt and
`/notify-summary` tells the user their weekly report is ready.
"""
from __future__ import annotations

from typing import Optional, Protocol

import httpx

from goodday.core.config import settings
from goodday.core.errors import NotificationError
from goodday.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class Notifier(Protocol):
    def notify_summary(self, slackid: str) -> None: ...

    def prompt(self, slackid: str) -> None: ...


class SlackNotifier:
    def __init__(
        self,
        base_url: str,
        functions_id: str = "",
        functions_secret: str = "",
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._auth = (functions_id, functions_secret) if functions_id else None
        self._client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)

    @classmethod
    def from_settings(cls) -> "SlackNotifier":
        return cls(
            base_url=settings.SLACKBOT_API_URL,
            functions_id=settings.FUNCTIONS_ID,
            functions_secret=settings.FUNCTIONS_SECRET,
        )

    def _post(self, endpoint: str, slackid: str, auth: bool) -> None:
        try:
            response = self._client.post(
                f"{self.base_url}/{endpoint}",
                json={"user_id": slackid},
                auth=self._auth if auth and self._auth else None,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(slackid, str(e)) from e

    def notify_summary(self, slackid: str) -> None:
        logger.info("Notifying %s of their weekly summary", slackid)
        self._post("notify-summary", slackid, auth=False)

    def prompt(self, slackid: str) -> None:
        logger.info("Prompting %s", slackid)
        self._post("notify", slackid, auth=True)

    def close(self) -> None:
        self._client.close()
