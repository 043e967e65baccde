"""
Promotion DTOs

Architectural Intent:
- Data Transfer Objects returned across the use case boundary
- Carry the operator-facing message alongside the structured outcome
- The confirmation task handle lets a short-lived caller (the CLI) wait for
  the watcher; long-lived callers simply drop it
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Optional

from kubepromote.domain.value_objects.workload_instance import WorkloadInstance


@dataclass(frozen=True)
class PromotionResult:
    namespace: str
    label: str
    source_namespace: str
    previous_version: str
    version: str
    message: str
    committed: bool = True
    confirmation: Optional[asyncio.Task] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class RollbackResult:
    namespace: str
    label: str
    previous_version: str
    version: str
    message: str
    committed: bool = True
    confirmation: Optional[asyncio.Task] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class InstanceStatusLine:
    name: str
    version: str = ""
    status: str = ""
    label: str = ""
    error: str = ""

    def render(self) -> str:
        if self.error:
            return f"Error: {self.error}"
        return (
            f"Pod: `{self.name}`, Version: `{self.version}`, "
            f"Status: `{self.status}`, Label: `{self.label}`"
        )


@dataclass(frozen=True)
class NamespaceReport:
    namespace: str
    lines: tuple[InstanceStatusLine, ...] = ()

    def render(self) -> str:
        body = "\n".join(line.render() for line in self.lines)
        return f"Namespace: `{self.namespace}`\n{body}"


@dataclass(frozen=True)
class StageVersion:
    namespace: str
    version: str
    status: str


@dataclass(frozen=True)
class VersionDiff:
    label: str
    stages: tuple[StageVersion, ...] = ()

    @property
    def deployed(self) -> tuple[StageVersion, ...]:
        """Stages where the workload reports a version."""
        return tuple(s for s in self.stages if s.version)

    @property
    def all_same_version(self) -> bool:
        return len({s.version for s in self.deployed}) <= 1

    def render(self) -> str:
        if self.all_same_version:
            return (
                "All applications are running the same version across namespaces. "
                "No promotion needed."
            )
        lines = [
            f"Namespace: `{s.namespace}`, Version: `{s.version}`, Status: `{s.status}`"
            for s in self.deployed
        ]
        return "Differences found in application versions across namespaces:\n" + "\n".join(lines)


def instance_line(instance: WorkloadInstance, status: str) -> InstanceStatusLine:
    return InstanceStatusLine(
        name=instance.name,
        version=instance.version,
        status=status,
        label=instance.label,
    )
