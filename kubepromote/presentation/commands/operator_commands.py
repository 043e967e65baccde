"""
Operator Commands

Architectural Intent:
- The operator-facing command surface: parses `<command> <args...>`,
  validates arguments, calls the use cases and reports the outcome
- Every command produces exactly one notification; a promotion or rollback's
  confirmation arrives later as a second, independent one
- Domain errors become operator messages here and nowhere else

Commands:
    help                          -> list the commands
    list <namespace>              -> pods, versions, statuses and labels
    diff <label>                  -> running version per namespace
    promote <namespace> <label>   -> promote from the upstream namespace
    rollback <namespace> <label>  -> restore the previously promoted version
    history <namespace> <label>   -> recorded promotions, newest first
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from kubepromote.application.dtos.promotion_dtos import PromotionResult, RollbackResult
from kubepromote.composition_root import PromoterContainer
from kubepromote.domain.errors import EmptyNamespace, PromoterError, QueryError
from kubepromote.domain.value_objects.command_context import CommandContext

logger = logging.getLogger(__name__)

HELP_LINES = (
    "/help - Get this help message",
    "/list <namespace> - List Kubernetes pods",
    "/diff <label> - Show differences in deployments",
    "/promote <namespace> <label> - Promote a deployment to the next environment",
    "/rollback <namespace> <label> - Rollback a deployment to the previous version",
    "/history <namespace> <label> - Show promotion history",
)

USAGE = {
    "list": "/list <namespace>",
    "diff": "/diff <label>",
    "promote": "/promote <namespace> <label>",
    "rollback": "/rollback <namespace> <label>",
    "history": "/history <namespace> <label>",
}

ARITY = {"list": 1, "diff": 1, "promote": 2, "rollback": 2, "history": 2}


@dataclass(frozen=True)
class CommandOutcome:
    ok: bool
    message: str
    informational: bool = False
    result: Any = None


class OperatorCommands:
    def __init__(self, container: PromoterContainer) -> None:
        self.container = container
        self._handlers: dict[str, Callable[[list[str], CommandContext], Awaitable[CommandOutcome]]] = {
            "help": self._help,
            "list": self._list,
            "diff": self._diff,
            "promote": self._promote,
            "rollback": self._rollback,
            "history": self._history,
        }

    async def handle_text(self, text: str, context: CommandContext) -> CommandOutcome:
        """Handle a chat-style command line such as "/promote qa web"."""
        parts = text.split()
        if not parts:
            return await self._reply(context, CommandOutcome(False, "Empty command."))
        return await self.dispatch(parts[0].lstrip("/"), parts[1:], context)

    async def dispatch(
        self, name: str, args: list[str], context: CommandContext
    ) -> CommandOutcome:
        handler = self._handlers.get(name)
        if handler is None:
            outcome = CommandOutcome(
                False, f"Unknown command: {name}. Please use a supported command."
            )
            return await self._reply(context, outcome)

        expected = ARITY.get(name)
        if expected is not None and len(args) != expected:
            outcome = CommandOutcome(
                False, f"Invalid command format. Expected format: {USAGE[name]}"
            )
            return await self._reply(context, outcome)

        try:
            outcome = await handler(args, context)
        except PromoterError as e:
            logger.info("Command %s rejected: %s", context.command, e)
            outcome = CommandOutcome(
                ok=e.informational,
                message=self._describe(e),
                informational=e.informational,
            )
        return await self._reply(context, outcome)

    async def _reply(self, context: CommandContext, outcome: CommandOutcome) -> CommandOutcome:
        if outcome.ok:
            await self.container.notifier.notify_success(context, outcome.message)
        else:
            await self.container.notifier.notify_failure(context, outcome.message)
        return outcome

    @staticmethod
    def _describe(error: PromoterError) -> str:
        if isinstance(error, (QueryError, EmptyNamespace)):
            return f"Failed to get pod information: {error}"
        return str(error)

    async def _help(self, args: list[str], context: CommandContext) -> CommandOutcome:
        body = "\n".join(HELP_LINES)
        return CommandOutcome(True, f"Here are the commands you can use:\n```\n{body}\n```")

    async def _list(self, args: list[str], context: CommandContext) -> CommandOutcome:
        report = await self.container.list_workloads.execute(args[0])
        return CommandOutcome(True, report.render(), result=report)

    async def _diff(self, args: list[str], context: CommandContext) -> CommandOutcome:
        diff = await self.container.diff_versions.execute(args[0])
        return CommandOutcome(True, diff.render(), result=diff)

    async def _promote(self, args: list[str], context: CommandContext) -> CommandOutcome:
        namespace, label = args
        result = await self.container.promote.execute(namespace, label, context)
        return CommandOutcome(True, result.message, result=result)

    async def _rollback(self, args: list[str], context: CommandContext) -> CommandOutcome:
        namespace, label = args
        result = await self.container.rollback.execute(namespace, label, context)
        return CommandOutcome(True, result.message, result=result)

    async def _history(self, args: list[str], context: CommandContext) -> CommandOutcome:
        namespace, label = args
        loop = asyncio.get_running_loop()
        entries = await loop.run_in_executor(
            None, self.container.history.entries, namespace, label
        )
        if not entries:
            return CommandOutcome(
                True, f"No release history for `{label}` in namespace `{namespace}`."
            )
        lines = [
            f"#{e.sequence} `{e.version}` at {e.timestamp:%Y-%m-%d %H:%M:%S}"
            for e in entries
        ]
        return CommandOutcome(
            True,
            f"Release history for `{label}` in namespace `{namespace}`:\n" + "\n".join(lines),
            result=entries,
        )


def confirmation_of(outcome: CommandOutcome) -> Optional[asyncio.Task]:
    """The confirmation watcher task behind a promote/rollback outcome, if any."""
    if isinstance(outcome.result, (PromotionResult, RollbackResult)):
        return outcome.result.confirmation
    return None
