"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the kubepromote application
- Single place where all adapters and use cases are wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Factory function creates and wires all dependencies; any port can be
  overridden, which is how tests run the real use cases against fakes
- Cluster and GitHub clients connect lazily on first use; the history
  database is opened here and owned by the container
"""

from dataclasses import dataclass
import logging
from typing import Optional

from kubepromote.application.orchestration.workload_locks import WorkloadLocks
from kubepromote.application.use_cases.confirm_rollout import ConfirmRollout
from kubepromote.application.use_cases.inspect_pipeline import DiffVersions, ListWorkloads
from kubepromote.application.use_cases.observe_workloads import WorkloadObserver
from kubepromote.application.use_cases.promote_workload import PromoteWorkload
from kubepromote.application.use_cases.rollback_workload import RollbackWorkload
from kubepromote.domain.events.promotion_events import (
    InstanceFailedEvent,
    PromotionInitiatedEvent,
    RollbackInitiatedEvent,
    RolloutConfirmedEvent,
    RolloutWatchAbortedEvent,
)
from kubepromote.domain.ports.cluster_state_port import ClusterStatePort
from kubepromote.domain.ports.gitops_port import GitOpsPort
from kubepromote.domain.ports.history_port import HistoryLedgerPort
from kubepromote.domain.ports.notification_port import NotificationPort
from kubepromote.domain.value_objects.promotion_chain import PromotionChain
from kubepromote.infrastructure.adapters.console_adapter import ConsoleAdapter, NotifierGroup
from kubepromote.infrastructure.adapters.github_adapter import GitHubAdapter
from kubepromote.infrastructure.adapters.kubernetes_adapter import KubernetesAdapter
from kubepromote.infrastructure.adapters.slack_adapter import SlackAdapter
from kubepromote.infrastructure.config import PromoterConfig, load_config
from kubepromote.infrastructure.event_bus import EventBus, audit_logger
from kubepromote.infrastructure.repositories.sqlite_history_repository import (
    SQLiteHistoryRepository,
)

AUDITED_EVENTS = (
    PromotionInitiatedEvent,
    RollbackInitiatedEvent,
    RolloutConfirmedEvent,
    InstanceFailedEvent,
    RolloutWatchAbortedEvent,
)


@dataclass
class PromoterContainer:
    """DI container holding all wired dependencies."""

    config: PromoterConfig
    chain: PromotionChain
    cluster: ClusterStatePort
    gitops: GitOpsPort
    history: HistoryLedgerPort
    notifier: NotificationPort
    event_bus: EventBus
    locks: WorkloadLocks
    observer: WorkloadObserver
    confirm_rollout: ConfirmRollout
    promote: PromoteWorkload
    rollback: RollbackWorkload
    list_workloads: ListWorkloads
    diff_versions: DiffVersions

    def close(self) -> None:
        close = getattr(self.history, "close", None)
        if close is not None:
            close()


def _default_notifier(config: PromoterConfig) -> NotificationPort:
    console = ConsoleAdapter()
    if config.notifications.slack_webhook_url:
        return NotifierGroup(
            console,
            SlackAdapter(
                webhook_url=config.notifications.slack_webhook_url,
                channel=config.notifications.slack_channel,
            ),
        )
    return console


def create_container(
    config: Optional[PromoterConfig] = None,
    cluster: Optional[ClusterStatePort] = None,
    gitops: Optional[GitOpsPort] = None,
    history: Optional[HistoryLedgerPort] = None,
    notifier: Optional[NotificationPort] = None,
) -> PromoterContainer:
    """Create and wire all dependencies."""
    config = config or load_config()
    chain = config.pipeline.chain()

    cluster = cluster or KubernetesAdapter(config.kubernetes)
    gitops = gitops or GitHubAdapter(config.gitops)
    if history is None:
        repository = SQLiteHistoryRepository(config.history.db_path)
        repository.connect()
        history = repository
    notifier = notifier or _default_notifier(config)

    event_bus = EventBus()
    handler = audit_logger(logging.getLogger("kubepromote.audit"))
    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, handler)

    locks = WorkloadLocks()
    observer = WorkloadObserver(
        cluster,
        max_attempts=config.observer.max_attempts,
        retry_delay=config.observer.retry_delay_seconds,
    )
    confirm_rollout = ConfirmRollout(cluster, notifier, event_bus)
    promote = PromoteWorkload(
        observer, gitops, history, confirm_rollout, chain, locks, event_bus
    )
    rollback = RollbackWorkload(
        observer, gitops, history, confirm_rollout, chain, locks, event_bus
    )

    return PromoterContainer(
        config=config,
        chain=chain,
        cluster=cluster,
        gitops=gitops,
        history=history,
        notifier=notifier,
        event_bus=event_bus,
        locks=locks,
        observer=observer,
        confirm_rollout=confirm_rollout,
        promote=promote,
        rollback=rollback,
        list_workloads=ListWorkloads(observer, chain),
        diff_versions=DiffVersions(observer, chain),
    )
