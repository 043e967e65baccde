"""
Domain Events Package

Architectural Intent:
- Contains domain events published by promotion, rollback and confirmation
- Events are the primary mechanism for cross-boundary communication
"""

from kubepromote.domain.events.event_base import DomainEvent
from kubepromote.domain.events.promotion_events import (
    PromotionInitiatedEvent,
    RollbackInitiatedEvent,
    RolloutConfirmedEvent,
    InstanceFailedEvent,
    RolloutWatchAbortedEvent,
    workload_key,
)

__all__ = [
    "DomainEvent",
    "PromotionInitiatedEvent",
    "RollbackInitiatedEvent",
    "RolloutConfirmedEvent",
    "InstanceFailedEvent",
    "RolloutWatchAbortedEvent",
    "workload_key",
]
