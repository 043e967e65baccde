"""
Promotion Events

Architectural Intent:
- Events published by the decision engines and the confirmation watcher
- aggregate_id is always "<namespace>/<label>" so subscribers can correlate
  a promotion with its later confirmation
"""

from dataclasses import dataclass
from typing import Any

from kubepromote.domain.events.event_base import DomainEvent


def workload_key(namespace: str, label: str) -> str:
    return f"{namespace}/{label}"


@dataclass(frozen=True)
class PromotionInitiatedEvent(DomainEvent):
    namespace: str = ""
    label: str = ""
    source_namespace: str = ""
    from_version: str = ""
    to_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "namespace": self.namespace,
            "label": self.label,
            "source_namespace": self.source_namespace,
            "from_version": self.from_version,
            "to_version": self.to_version,
        }


@dataclass(frozen=True)
class RollbackInitiatedEvent(DomainEvent):
    namespace: str = ""
    label: str = ""
    from_version: str = ""
    to_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "namespace": self.namespace,
            "label": self.label,
            "from_version": self.from_version,
            "to_version": self.to_version,
        }


@dataclass(frozen=True)
class RolloutConfirmedEvent(DomainEvent):
    namespace: str = ""
    instance: str = ""
    version: str = ""


@dataclass(frozen=True)
class InstanceFailedEvent(DomainEvent):
    namespace: str = ""
    instance: str = ""
    version: str = ""
    phase: str = ""


@dataclass(frozen=True)
class RolloutWatchAbortedEvent(DomainEvent):
    namespace: str = ""
    version: str = ""
    reason: str = ""
