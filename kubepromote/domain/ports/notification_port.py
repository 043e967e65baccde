"""
Notification Port

Architectural Intent:
- Abstract interface for reporting command outcomes to the operator channel
- Fire-and-forget: the engine never inspects the result of a notification
- Decouples the engine from Slack or any other chat platform

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- Every notification carries the CommandContext so the channel can tag it with
  the initiating command, user and time
"""

from typing import Protocol, runtime_checkable

from kubepromote.domain.value_objects.command_context import CommandContext


@runtime_checkable
class NotificationPort(Protocol):
    """Port for sending command outcomes to an operator channel."""

    async def notify_success(self, context: CommandContext, message: str) -> None:
        """Report a successful outcome for ``context``."""
        ...

    async def notify_failure(self, context: CommandContext, message: str) -> None:
        """Report a failed or rejected outcome for ``context``."""
        ...
