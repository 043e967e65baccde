"""
CLI Module

Architectural Intent:
- Command-line interface for kubepromote
- Entry point for operators working from a shell or a CI job
- Delegates to the operator command surface via the composition root
- Supports --verbose/--debug flags for log level control

Design Decisions:
- promote and rollback wait for their confirmation watcher before exiting
  (bounded by --wait-timeout); --no-wait returns as soon as the version-set
  has been committed, abandoning the watcher
"""

import argparse
import asyncio
import getpass
import logging
import sys
import traceback

from kubepromote.infrastructure.config import load_config
from kubepromote.infrastructure.logging import configure_logging, level_from_name
from kubepromote.domain.errors import PromoterError
from kubepromote.domain.services.rollout_confirmation import WatchState
from kubepromote.domain.value_objects.command_context import CommandContext


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubepromote",
        description="kubepromote: promote and roll back workloads across dev, qa, stage and prod",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config (default: kubepromote.json)"
    )
    parser.add_argument(
        "--user", "-u", default=None, help="Initiator name recorded on notifications"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List pods in a namespace")
    list_parser.add_argument("namespace", help="Namespace to list")

    diff_parser = subparsers.add_parser(
        "diff", help="Show a workload's version in every namespace"
    )
    diff_parser.add_argument("label", help="Workload label")

    for name, help_text in (
        ("promote", "Promote a workload from its upstream namespace"),
        ("rollback", "Roll a workload back to its previous version"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("namespace", help="Target namespace")
        sub.add_argument("label", help="Workload label")
        sub.add_argument(
            "--no-wait", action="store_true", help="Do not wait for rollout confirmation"
        )
        sub.add_argument(
            "--wait-timeout", type=float, default=600.0,
            help="Seconds to wait for rollout confirmation",
        )

    history_parser = subparsers.add_parser(
        "history", help="Show recorded promotions for a workload"
    )
    history_parser.add_argument("namespace", help="Namespace")
    history_parser.add_argument("label", help="Workload label")

    dash_parser = subparsers.add_parser(
        "dash", help="Launch the pipeline dashboard"
    )
    dash_parser.add_argument(
        "--labels", "-l", required=True, help="Comma-separated list of workload labels"
    )

    return parser


def command_args(args: argparse.Namespace) -> list[str]:
    if args.command == "list":
        return [args.namespace]
    if args.command == "diff":
        return [args.label]
    return [args.namespace, args.label]


async def async_main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    # Configure logging based on flags
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = level_from_name(config.log_level)
    configure_logging(level=level, json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return 0

    from kubepromote.composition_root import create_container

    try:
        container = create_container(config)
    except PromoterError as e:
        print(f"[-] Startup failed: {e}")
        if verbose:
            traceback.print_exc()
        return 1

    try:
        if args.command == "dash":
            from kubepromote.presentation.tui.dashboard import PipelineDashboard

            labels = [label for label in args.labels.split(",") if label]
            app = PipelineDashboard(container.observer, container.chain, labels)
            await app.run_async()
            return 0

        from kubepromote.presentation.commands.operator_commands import (
            OperatorCommands,
            confirmation_of,
        )

        cmd_args = command_args(args)
        context = CommandContext(
            command=" ".join([args.command, *cmd_args]),
            initiator=args.user or getpass.getuser(),
        )
        commands = OperatorCommands(container)

        try:
            outcome = await commands.dispatch(args.command, cmd_args, context)
        except Exception as e:
            print(f"[-] {args.command} failed: {e}")
            if verbose:
                traceback.print_exc()
            return 1

        if not outcome.ok:
            return 1

        confirmation = confirmation_of(outcome)
        if confirmation is not None:
            if args.no_wait:
                confirmation.cancel()
            else:
                print(f"[*] Waiting up to {args.wait_timeout:.0f}s for rollout confirmation...")
                try:
                    state = await asyncio.wait_for(confirmation, timeout=args.wait_timeout)
                except asyncio.TimeoutError:
                    print("[-] Rollout not confirmed before timeout.")
                    return 1
                if state is not WatchState.CONFIRMED:
                    return 1
        return 0
    finally:
        container.close()


def main():
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
