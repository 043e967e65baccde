"""
Promote Workload Use Case

Architectural Intent:
- Moves a workload's version one step down the promotion chain
- Decides the source namespace, the running and candidate versions, and
  whether the change is a no-op
- Side effects are strictly ordered: version-set, then history append, then
  the detached confirmation watcher

Design Decisions:
- The equality check happens before any external call, so a no-op promotion
  never touches GitOps or the ledger
- The version-set is never retried automatically
- Ledger calls run in the default executor, off the event loop
- A ledger failure after a successful version-set is raised as a distinct
  PersistenceError: the cluster is changing but history does not know it
"""

import asyncio
import logging
from typing import Optional

from kubepromote.application.dtos.promotion_dtos import PromotionResult
from kubepromote.application.orchestration.workload_locks import WorkloadLocks
from kubepromote.application.use_cases.confirm_rollout import ConfirmRollout
from kubepromote.application.use_cases.observe_workloads import WorkloadObserver
from kubepromote.domain.entities.promotion import PromotionRequest
from kubepromote.domain.errors import (
    ExternalMutationFailed,
    LabelNotFound,
    LabelNotFoundInSource,
    NamespaceNotAllowed,
    PersistenceError,
)
from kubepromote.domain.ports.event_bus_port import EventBusPort
from kubepromote.domain.ports.gitops_port import GitOpsPort
from kubepromote.domain.ports.history_port import HistoryLedgerPort
from kubepromote.domain.value_objects.command_context import CommandContext
from kubepromote.domain.value_objects.promotion_chain import PromotionChain

logger = logging.getLogger(__name__)


class PromoteWorkload:
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
    ) -> PromotionResult:
        source_namespace = self.chain.source_of(namespace)
        if not self.chain.can_promote(namespace) or source_namespace is None:
            raise NamespaceNotAllowed(namespace, self.chain.promotable)

        request = PromotionRequest(namespace, label, source_namespace)

        async with self.locks.hold(namespace, label):
            request = await self._decide(request)
            committed = await self._set_version(request)
            await self._record(request)

        logger.info(
            "Promoting %s from %s to %s in %s (source %s)",
            label, request.current_version, request.candidate_version,
            namespace, source_namespace,
        )
        confirmation = self.confirm_rollout.spawn(
            namespace, request.candidate_version, context
        )
        if self.event_bus is not None:
            await self.event_bus.publish([request.initiated_event()])

        return PromotionResult(
            namespace=namespace,
            label=label,
            source_namespace=source_namespace,
            previous_version=request.current_version,
            version=request.candidate_version,
            message=(
                f"Promotion of version `{request.candidate_version}` to namespace "
                f"`{namespace}` has been initiated. Please wait for the deployment "
                "to complete."
            ),
            committed=committed,
            confirmation=confirmation,
        )

    async def _decide(self, request: PromotionRequest) -> PromotionRequest:
        current = await self.observer.current_version(request.namespace, request.label)
        if not current:
            raise LabelNotFound(request.label, request.namespace)

        candidate = await self.observer.current_version(
            request.source_namespace, request.label
        )
        if not candidate:
            raise LabelNotFoundInSource(request.label, request.source_namespace)

        request = request.with_versions(current, candidate)
        request.ensure_change()
        return request

    async def _set_version(self, request: PromotionRequest) -> bool:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.history.verify_schema)
        try:
            return await self.gitops.set_version(
                request.namespace,
                request.candidate_version,
                request.change_description(),
            )
        except ExternalMutationFailed:
            raise
        except Exception as e:
            raise ExternalMutationFailed(
                request.namespace, request.candidate_version, str(e)
            ) from e

    async def _record(self, request: PromotionRequest) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None, self.history.append,
                request.namespace, request.candidate_version, request.label,
            )
        except PersistenceError as e:
            logger.error(
                "Version %s was set in %s but release history was not recorded: %s",
                request.candidate_version, request.namespace, e,
            )
            raise PersistenceError(
                f"Version `{request.candidate_version}` was set in namespace "
                f"`{request.namespace}` but the release history could not be "
                f"recorded: {e}",
                namespace=request.namespace,
            ) from e
