"""
Slack Notification Adapter

Architectural Intent:
- Implements NotificationPort for Slack incoming-webhook notifications
- Renders every outcome as an attachment tagged with the command, the
  initiating user and the time it was issued
- Uses stdlib urllib for the HTTP layer (no external dependencies)

Design Decisions:
- Without a webhook URL the adapter runs in stub mode: it logs and keeps the
  payload in memory, which is also what tests inspect
- Delivery failures are logged, never raised: notifications are
  fire-and-forget for the engine
- Green for success, red for failure
"""

import asyncio
import json
import logging
import urllib.error
import urllib.request
import uuid
from typing import Optional

from kubepromote.domain.value_objects.command_context import CommandContext

logger = logging.getLogger(__name__)

SUCCESS_COLOR = "#36a64f"
FAILURE_COLOR = "#ff0000"


class SlackAdapter:
    """Slack notification adapter."""

    def __init__(self, webhook_url: str = "", channel: str = "", timeout: float = 10.0) -> None:
        """Initialize Slack adapter.

        Args:
            webhook_url: Slack webhook URL for incoming messages
            channel: Optional channel override for the webhook
            timeout: HTTP timeout in seconds
        """
        self._webhook_url = webhook_url
        self._channel = channel
        self._timeout = timeout
        self._messages: dict[str, dict] = {}

    async def notify_success(self, context: CommandContext, message: str) -> None:
        await self._send(context, message, SUCCESS_COLOR, "success")

    async def notify_failure(self, context: CommandContext, message: str) -> None:
        await self._send(context, message, FAILURE_COLOR, "failure")

    def build_payload(self, context: CommandContext, message: str, color: str) -> dict:
        issued = context.issued_at.strftime("%Y-%m-%d %H:%M:%S")
        payload: dict = {
            "attachments": [
                {
                    "pretext": f"*Command:* `{context.command}`",
                    "text": f"Current Date and Time: {issued}\n{message}",
                    "color": color,
                    "fields": [
                        {
                            "title": "Initializer",
                            "value": context.initiator,
                            "short": True,
                        }
                    ],
                }
            ]
        }
        channel = context.channel or self._channel
        if channel:
            payload["channel"] = channel
        return payload

    async def _send(
        self, context: CommandContext, message: str, color: str, outcome: str
    ) -> None:
        message_id = f"SLACK-{uuid.uuid4().hex[:8].upper()}"
        payload = self.build_payload(context, message, color)
        self._messages[message_id] = {"outcome": outcome, "message": message, **payload}

        if not self._webhook_url:
            logger.info(
                "Slack %s (stub): %s - %s [command=%s, initiator=%s]",
                outcome, message_id, message, context.command, context.initiator,
            )
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._post, payload)
        except (urllib.error.URLError, OSError, ValueError) as e:
            logger.error("Failed to post %s message to Slack: %s", outcome, e)

    def _post(self, payload: dict) -> None:
        request = urllib.request.Request(
            self._webhook_url,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urllib.request.urlopen(request, timeout=self._timeout) as response:
            response.read()

    @property
    def sent(self) -> list[dict]:
        """Payloads sent so far, oldest first."""
        return list(self._messages.values())

    def get_message(self, message_id: str) -> Optional[dict]:
        """Retrieve a sent message by ID."""
        return self._messages.get(message_id)
