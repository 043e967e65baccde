"""
Rollback Workload Use Case

Architectural Intent:
- Restores a workload to the version recorded before its current one
- The history ledger is the only source for the rollback target; if it has
  nothing earlier, rollback is refused rather than guessed
- Uses the same version-set and confirmation path as promotion

Design Decisions:
- Rollback does not append to the ledger, so a second rollback keeps walking
  further back through promotion history instead of bouncing between two
  versions
"""

import asyncio
import logging
from typing import Optional

from kubepromote.application.dtos.promotion_dtos import RollbackResult
from kubepromote.application.orchestration.workload_locks import WorkloadLocks
from kubepromote.application.use_cases.confirm_rollout import ConfirmRollout
from kubepromote.application.use_cases.observe_workloads import WorkloadObserver
from kubepromote.domain.entities.promotion import RollbackRequest
from kubepromote.domain.errors import (
    ExternalMutationFailed,
    LabelNotFound,
    NamespaceNotAllowed,
)
from kubepromote.domain.ports.event_bus_port import EventBusPort
from kubepromote.domain.ports.gitops_port import GitOpsPort
from kubepromote.domain.ports.history_port import HistoryLedgerPort
from kubepromote.domain.value_objects.command_context import CommandContext
from kubepromote.domain.value_objects.promotion_chain import PromotionChain

logger = logging.getLogger(__name__)


class RollbackWorkload:
    def __init__(
        self,
        observer: WorkloadObserver,
        gitops: GitOpsPort,
        history: HistoryLedgerPort,
        confirm_rollout: ConfirmRollout,
        chain: Optional[PromotionChain] = None,
        locks: Optional[WorkloadLocks] = None,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.observer = observer
        self.gitops = gitops
        self.history = history
        self.confirm_rollout = confirm_rollout
        self.chain = chain or PromotionChain()
        self.locks = locks or WorkloadLocks()
        self.event_bus = event_bus

    async def execute(
        self, namespace: str, label: str, context: CommandContext
    ) -> RollbackResult:
        if not self.chain.can_promote(namespace):
            raise NamespaceNotAllowed(namespace, self.chain.promotable)

        async with self.locks.hold(namespace, label):
            current = await self.observer.current_version(namespace, label)
            if not current:
                raise LabelNotFound(label, namespace)

            request = RollbackRequest(namespace, label, current_version=current)
            loop = asyncio.get_running_loop()
            previous = await loop.run_in_executor(
                None, self.history.find_previous, namespace, current, label
            )
            request = request.resolved(previous)
            target = request.target_version()

            try:
                committed = await self.gitops.set_version(
                    namespace, target, request.change_description()
                )
            except ExternalMutationFailed:
                raise
            except Exception as e:
                raise ExternalMutationFailed(namespace, target, str(e)) from e

        logger.info(
            "Rolling back %s in %s from %s to %s", label, namespace, current, target
        )
        confirmation = self.confirm_rollout.spawn(namespace, target, context)
        if self.event_bus is not None:
            await self.event_bus.publish([request.initiated_event()])

        return RollbackResult(
            namespace=namespace,
            label=label,
            previous_version=current,
            version=target,
            message=(
                f"Rollback to version `{target}` in namespace `{namespace}` has been "
                "initiated. Please wait for the deployment to complete."
            ),
            committed=committed,
            confirmation=confirmation,
        )
