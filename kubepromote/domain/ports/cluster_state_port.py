"""
Cluster State Port

Architectural Intent:
- Port interface for reading live workload state from the cluster
- Read-only: the engine observes snapshots and events, it never mutates pods
- Implemented by KubernetesAdapter, or by in-memory fakes in tests
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Protocol, runtime_checkable

from kubepromote.domain.value_objects.workload_instance import (
    InstanceEvent,
    WorkloadInstance,
)


@runtime_checkable
class InstanceStream(Protocol):
    """An open subscription to instance lifecycle events."""

    def __aiter__(self) -> AsyncIterator[InstanceEvent]: ...

    async def close(self) -> None: ...


class ClusterStatePort(ABC):
    """
    Port interface for reading cluster state.
    """

    @abstractmethod
    async def ensure_connected(self) -> None:
        """
        Verifies the cluster API is reachable, reconnecting once if needed.
        Raises ClusterConnectionError when it is not.
        """
        pass

    @abstractmethod
    async def list_instances(self, namespace: str) -> list[WorkloadInstance]:
        """
        Lists every instance in a namespace. May return an empty list.
        Raises QueryError on transport failure.
        """
        pass

    @abstractmethod
    async def get_instance(self, name: str, namespace: str) -> WorkloadInstance:
        """
        Fetches a single instance. Raises QueryError if it cannot be read.
        """
        pass

    @abstractmethod
    async def watch_instances(self, namespace: str) -> InstanceStream:
        """
        Opens an event subscription for a namespace.
        Raises QueryError if the subscription cannot be established.
        """
        pass
