"""
Rollout Confirmation Service

Architectural Intent:
- Pure state machine deciding when a requested version is confirmed running
- Knows nothing about streams or notifications; the ConfirmRollout use case
  feeds it events and acts on its verdicts

Domain Logic:
- WATCHING -> CONFIRMED when any instance is Running at the target version
- A Failed or Unknown instance yields an INSTANCE_FAILED verdict but the
  state stays WATCHING: several pods may be rolling at once and only one has
  to reach the target
- WATCHING -> ABORTED when the event stream closes before confirmation
"""

from __future__ import annotations
from enum import Enum, auto

from kubepromote.domain.value_objects.workload_instance import EventKind, InstanceEvent


class WatchState(Enum):
    WATCHING = auto()
    CONFIRMED = auto()
    ABORTED = auto()


class Verdict(Enum):
    IGNORED = auto()
    CONFIRMED = auto()
    INSTANCE_FAILED = auto()


class RolloutConfirmation:
    """Tracks one watcher's progress towards ``target_version``."""

    def __init__(self, namespace: str, target_version: str) -> None:
        if not target_version:
            raise ValueError("target_version cannot be empty")
        self.namespace = namespace
        self.target_version = target_version
        self.state = WatchState.WATCHING
        self.failed_instances: list[str] = []
        self.confirmed_by: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.state is not WatchState.WATCHING

    def observe(self, event: InstanceEvent) -> Verdict:
        if self.is_terminal:
            return Verdict.IGNORED
        if event.kind not in (EventKind.ADDED, EventKind.MODIFIED):
            return Verdict.IGNORED

        instance = event.instance
        if not instance.version:
            return Verdict.IGNORED

        if instance.is_running and instance.version == self.target_version:
            self.state = WatchState.CONFIRMED
            self.confirmed_by = instance.name
            return Verdict.CONFIRMED

        if instance.has_failed:
            self.failed_instances.append(instance.name)
            return Verdict.INSTANCE_FAILED

        return Verdict.IGNORED

    def abort(self) -> None:
        if self.state is WatchState.WATCHING:
            self.state = WatchState.ABORTED
