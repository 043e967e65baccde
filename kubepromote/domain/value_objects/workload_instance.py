"""
Workload Instance Value Objects

Architectural Intent:
- Immutable snapshots of pods as observed in a namespace
- Version and label extraction policy lives here so every adapter agrees on it
- The engine never mutates instances; they are re-fetched on every request
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional

DEFAULT_LABEL_KEY = "app.kubernetes.io/name"


class Phase(Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Phase":
        for phase in cls:
            if phase.value == value:
                return phase
        return cls.UNKNOWN


def extract_version(image_refs: Iterable[str]) -> str:
    """Return the tag of the first image reference with exactly one ':'.

    "grafana/loki:2.6.1" -> "2.6.1". References without a tag, or with a
    registry port ("registry:5000/app:1.0"), are ambiguous and yield "".
    """
    for image in image_refs:
        parts = image.split(":")
        if len(parts) == 2:
            return parts[1]
    return ""


def extract_label(labels: Optional[Mapping[str, str]], key: str = DEFAULT_LABEL_KEY) -> str:
    if not labels:
        return ""
    return labels.get(key, "") or ""


@dataclass(frozen=True)
class WorkloadInstance:
    """
    Value Object representing one pod of a workload.
    """
    name: str
    version: str = ""
    label: str = ""
    phase: Phase = Phase.UNKNOWN
    waiting_reason: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Instance name cannot be empty")

    @property
    def status(self) -> str:
        """Waiting reason (e.g. CrashLoopBackOff) if any, else the phase."""
        if self.waiting_reason:
            return self.waiting_reason
        return self.phase.value

    @property
    def is_running(self) -> bool:
        return self.phase is Phase.RUNNING

    @property
    def has_failed(self) -> bool:
        return self.phase in (Phase.FAILED, Phase.UNKNOWN)


@dataclass(frozen=True)
class InstanceListing:
    """Result of listing a namespace: parallel names, versions and labels."""
    namespace: str
    instances: tuple[WorkloadInstance, ...] = field(default_factory=tuple)

    @property
    def names(self) -> list[str]:
        return [i.name for i in self.instances]

    @property
    def versions(self) -> list[str]:
        return [i.version for i in self.instances]

    @property
    def labels(self) -> list[str]:
        return [i.label for i in self.instances]

    def __len__(self) -> int:
        return len(self.instances)

    def __iter__(self):
        return iter(self.instances)

    def version_for(self, label: str) -> str:
        """Version of the first instance carrying ``label``, or ""."""
        for instance in self.instances:
            if instance.label == label:
                return instance.version
        return ""

    def with_label(self, label: str) -> list[WorkloadInstance]:
        return [i for i in self.instances if i.label == label]


class EventKind(Enum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EventKind":
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class InstanceEvent:
    kind: EventKind
    instance: WorkloadInstance
