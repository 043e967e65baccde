"""
Promotion and Rollback Requests

Architectural Intent:
- Ephemeral decision records built by the decision engines, never persisted
- Each request validates its own invariants and produces the domain event
  describing the version change it represents
- Requests are immutable; resolving a field returns a new instance
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional

from kubepromote.domain.errors import AlreadyCurrent, NoPriorVersion
from kubepromote.domain.events.promotion_events import (
    PromotionInitiatedEvent,
    RollbackInitiatedEvent,
    workload_key,
)


@dataclass(frozen=True)
class PromotionRequest:
    namespace: str
    label: str
    source_namespace: str
    current_version: str = ""
    candidate_version: str = ""

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("namespace cannot be empty")
        if not self.label:
            raise ValueError("label cannot be empty")
        if not self.source_namespace:
            raise ValueError("source_namespace cannot be empty")

    @property
    def is_noop(self) -> bool:
        return self.current_version == self.candidate_version

    def with_versions(self, current: str, candidate: str) -> "PromotionRequest":
        return replace(self, current_version=current, candidate_version=candidate)

    def ensure_change(self) -> None:
        if self.is_noop:
            raise AlreadyCurrent(self.current_version, self.namespace)

    def change_description(self) -> str:
        return f"Promote {self.label}"

    def initiated_event(self) -> PromotionInitiatedEvent:
        return PromotionInitiatedEvent(
            aggregate_id=workload_key(self.namespace, self.label),
            namespace=self.namespace,
            label=self.label,
            source_namespace=self.source_namespace,
            from_version=self.current_version,
            to_version=self.candidate_version,
        )


@dataclass(frozen=True)
class RollbackRequest:
    namespace: str
    label: str
    current_version: str = ""
    rollback_version: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("namespace cannot be empty")
        if not self.label:
            raise ValueError("label cannot be empty")

    def resolved(self, rollback_version: Optional[str]) -> "RollbackRequest":
        return replace(self, rollback_version=rollback_version)

    def target_version(self) -> str:
        if not self.rollback_version:
            raise NoPriorVersion(self.namespace, self.label, self.current_version)
        return self.rollback_version

    def change_description(self) -> str:
        return f"Rollback {self.label}"

    def initiated_event(self) -> RollbackInitiatedEvent:
        return RollbackInitiatedEvent(
            aggregate_id=workload_key(self.namespace, self.label),
            namespace=self.namespace,
            label=self.label,
            from_version=self.current_version,
            to_version=self.target_version(),
        )
