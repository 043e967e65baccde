"""
Observe Workloads Use Case

Architectural Intent:
- Read-through view of which version of each workload runs in a namespace
- Wraps cluster queries with a bounded retry so transient API failures
  (pods restarting, API server blips) do not fail a whole command
- Every operation checks connectivity first and fails with a typed error
  instead of retrying forever

Design Decisions:
- Only list queries are retried; status lookups and watches fail fast
- Nothing is cached: each call re-reads the cluster
"""

import asyncio
import logging
from typing import Optional

from kubepromote.domain.errors import EmptyNamespace, PromoterError, QueryError
from kubepromote.domain.ports.cluster_state_port import ClusterStatePort
from kubepromote.domain.value_objects.workload_instance import InstanceListing

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 30.0


class WorkloadObserver:
    def __init__(
        self,
        cluster: ClusterStatePort,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.cluster = cluster
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    async def list_instances(self, namespace: str) -> InstanceListing:
        await self.cluster.ensure_connected()
        try:
            instances = await self.cluster.list_instances(namespace)
        except PromoterError:
            raise
        except Exception as e:
            raise QueryError(
                f"failed to list pods in namespace {namespace}: {e}",
                namespace=namespace,
            ) from e

        if not instances:
            raise EmptyNamespace(namespace)
        return InstanceListing(namespace=namespace, instances=tuple(instances))

    async def retrying_list_instances(
        self,
        namespace: str,
        max_attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> InstanceListing:
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        delay = delay if delay is not None else self.retry_delay

        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return await self.list_instances(namespace)
            except Exception as e:
                last_error = e
                logger.warning(
                    "Error getting pods info in namespace '%s', attempt %d/%d: %s",
                    namespace, attempt, attempts, e,
                )
                if attempt < attempts:
                    await asyncio.sleep(delay)

        raise QueryError(
            f"failed to get pods info in namespace '{namespace}' "
            f"after {attempts} attempts: {last_error}",
            namespace=namespace,
            attempts=attempts,
        ) from last_error

    async def get_status(self, name: str, namespace: str) -> str:
        """Container waiting reason (e.g. CrashLoopBackOff) if any, else the phase."""
        await self.cluster.ensure_connected()
        try:
            instance = await self.cluster.get_instance(name, namespace)
        except PromoterError:
            raise
        except Exception as e:
            raise QueryError(
                f"failed to get pod details for {name}: {e}", namespace=namespace
            ) from e
        return instance.status

    async def current_version(self, namespace: str, label: str) -> str:
        """Version of the first instance labelled ``label``, or "" if none."""
        listing = await self.retrying_list_instances(namespace)
        return listing.version_for(label)
