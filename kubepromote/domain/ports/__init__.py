"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from kubepromote.domain.ports.cluster_state_port import ClusterStatePort, InstanceStream
from kubepromote.domain.ports.gitops_port import GitOpsPort
from kubepromote.domain.ports.history_port import HistoryLedgerPort
from kubepromote.domain.ports.notification_port import NotificationPort
from kubepromote.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "ClusterStatePort",
    "InstanceStream",
    "GitOpsPort",
    "HistoryLedgerPort",
    "NotificationPort",
    "EventBusPort",
]
