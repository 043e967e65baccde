"""
Console Notification Adapter

Architectural Intent:
- Implements NotificationPort for operators driving kubepromote from a shell
- Mirrors the CLI's [+]/[-] output convention
"""

import sys
from typing import TextIO, Optional

from kubepromote.domain.value_objects.command_context import CommandContext


class ConsoleAdapter:
    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    def _write(self, line: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    async def notify_success(self, context: CommandContext, message: str) -> None:
        self._write(f"[+] {message}")

    async def notify_failure(self, context: CommandContext, message: str) -> None:
        self._write(f"[-] {message}")


class NotifierGroup:
    """Fans every notification out to several NotificationPort implementations."""

    def __init__(self, *notifiers) -> None:
        self._notifiers = list(notifiers)

    async def notify_success(self, context: CommandContext, message: str) -> None:
        for notifier in self._notifiers:
            await notifier.notify_success(context, message)

    async def notify_failure(self, context: CommandContext, message: str) -> None:
        for notifier in self._notifiers:
            await notifier.notify_failure(context, message)
