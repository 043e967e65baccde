"""
Inspect Pipeline Use Cases

Architectural Intent:
- Read-only views operators use before promoting: what runs in a namespace,
  and how a workload's version differs across the chain
- Built on the same retrying observer as the decision engines
"""

import logging
from typing import Optional

from kubepromote.application.dtos.promotion_dtos import (
    InstanceStatusLine,
    NamespaceReport,
    StageVersion,
    VersionDiff,
    instance_line,
)
from kubepromote.application.use_cases.observe_workloads import WorkloadObserver
from kubepromote.domain.errors import LabelNotFound, NamespaceNotAllowed, PromoterError
from kubepromote.domain.value_objects.promotion_chain import PromotionChain

logger = logging.getLogger(__name__)


class ListWorkloads:
    def __init__(self, observer: WorkloadObserver, chain: Optional[PromotionChain] = None):
        self.observer = observer
        self.chain = chain or PromotionChain()

    async def execute(self, namespace: str) -> NamespaceReport:
        if not self.chain.can_list(namespace):
            raise NamespaceNotAllowed(namespace, self.chain.listable)

        listing = await self.observer.retrying_list_instances(namespace)

        lines = []
        for instance in listing:
            try:
                status = await self.observer.get_status(instance.name, namespace)
            except PromoterError as e:
                logger.warning("Failed to get status for pod %s: %s", instance.name, e)
                lines.append(InstanceStatusLine(
                    name=instance.name,
                    error=f"Failed to get status for pod {instance.name};",
                ))
                continue
            lines.append(instance_line(instance, status))

        return NamespaceReport(namespace=namespace, lines=tuple(lines))


class DiffVersions:
    def __init__(self, observer: WorkloadObserver, chain: Optional[PromotionChain] = None):
        self.observer = observer
        self.chain = chain or PromotionChain()

    async def execute(self, label: str) -> VersionDiff:
        found = False
        stages = []

        for namespace in self.chain.stages:
            listing = await self.observer.retrying_list_instances(namespace)
            matching = listing.with_label(label)
            if matching:
                found = True
            # The first running pod with the label represents the namespace.
            for instance in matching:
                if instance.status == "Running":
                    stages.append(StageVersion(namespace, instance.version, instance.status))
                    break

        if not found:
            raise LabelNotFound(label, ", ".join(self.chain.stages))

        return VersionDiff(label=label, stages=tuple(stages))
