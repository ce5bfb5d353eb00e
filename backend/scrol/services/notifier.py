"""
Scrol Backend — Notification Dispatcher Client
===============================================

What:  Sends a one-shot notification (email delivery) through the external
       dispatcher.
How:   POST <notify_url> with JSON {"message": ..., "email": ...}; a non-2xx
       answer raises NotificationError. Nothing is retried or queued.
Who:   FriendService after inserting a friend edge.
"""

import logging
from typing import Optional

import httpx

from scrol.config import settings
from scrol.exceptions import NotificationError

logger = logging.getLogger(__name__)


class Notifier:
    """Fire-and-forget client for the notification sink."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = settings.notify_url if url is None else url
        self.timeout = timeout or settings.notify_timeout
        self._transport = transport

    async def send(self, email: str, message: str) -> None:
        """
        Deliver `message` to `email`.

        Raises:
            NotificationError: the sink answered with a non-success status
            httpx.HTTPError:   the sink could not be reached
        """
        if not self.url:
            logger.warning("NOTIFY_URL not configured; skipping notification to %s", email)
            return

        logger.info("Sending notification to %s", email)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json={"message": message, "email": email})

        if not response.is_success:
            logger.error("Unable to send notification to %s: status=%d", email, response.status_code)
            raise NotificationError(
                context={"email": email, "status": response.status_code},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
notifier = Notifier()
