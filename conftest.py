"""Global test configuration.

Provides in-memory fakes for the cluster, the GitOps repository and the
notifier so use cases can be exercised without a cluster or network access.
"""

import pytest

from kubepromote.domain.errors import QueryError
from kubepromote.domain.ports.cluster_state_port import ClusterStatePort
from kubepromote.domain.ports.gitops_port import GitOpsPort
from kubepromote.domain.value_objects.command_context import CommandContext
from kubepromote.domain.value_objects.workload_instance import (
    InstanceEvent,
    Phase,
    WorkloadInstance,
)
from kubepromote.infrastructure.repositories.sqlite_history_repository import (
    SQLiteHistoryRepository,
)


def pod(name, version, label="web", phase=Phase.RUNNING, waiting_reason=None):
    return WorkloadInstance(
        name=name, version=version, label=label, phase=phase,
        waiting_reason=waiting_reason,
    )


def event(kind, name, version, label="web", phase=Phase.RUNNING):
    return InstanceEvent(kind=kind, instance=pod(name, version, label, phase))


class FakeStream:
    def __init__(self, events, error=None):
        self._events = list(events)
        self._error = error
        self.closed = False

    async def __aiter__(self):
        for e in self._events:
            yield e
        if self._error is not None:
            raise self._error

    async def close(self):
        self.closed = True


class FakeCluster(ClusterStatePort):
    """Namespaces of pods held in memory; watches replay scripted events."""

    def __init__(self):
        self.pods: dict[str, list[WorkloadInstance]] = {}
        self.events: dict[str, list[InstanceEvent]] = {}
        self.stream_error = None
        self.watch_error = None
        self.list_failures = 0
        self.list_calls = 0
        self.streams: list[FakeStream] = []

    def deploy(self, namespace, *instances):
        self.pods.setdefault(namespace, []).extend(instances)

    async def ensure_connected(self):
        return None

    async def list_instances(self, namespace):
        self.list_calls += 1
        if self.list_failures:
            self.list_failures -= 1
            raise QueryError("apiserver unavailable", namespace=namespace)
        return list(self.pods.get(namespace, []))

    async def get_instance(self, name, namespace):
        for instance in self.pods.get(namespace, []):
            if instance.name == name:
                return instance
        raise QueryError(f"pod {name} not found", namespace=namespace)

    async def watch_instances(self, namespace):
        if self.watch_error is not None:
            raise self.watch_error
        stream = FakeStream(self.events.get(namespace, []), self.stream_error)
        self.streams.append(stream)
        return stream


class FakeGitOps(GitOpsPort):
    def __init__(self):
        self.pinned: dict[str, str] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.error = None

    async def set_version(self, namespace, version, change_description):
        self.calls.append((namespace, version, change_description))
        if self.error is not None:
            raise self.error
        if self.pinned.get(namespace) == version:
            return False
        self.pinned[namespace] = version
        return True


class RecordingNotifier:
    def __init__(self):
        self.successes: list[str] = []
        self.failures: list[str] = []

    async def notify_success(self, context, message):
        self.successes.append(message)

    async def notify_failure(self, context, message):
        self.failures.append(message)


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def gitops():
    return FakeGitOps()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def history(tmp_path):
    repo = SQLiteHistoryRepository(str(tmp_path / "history.db"))
    repo.connect()
    yield repo
    repo.close()


@pytest.fixture
def context():
    return CommandContext(command="promote qa web", initiator="alice")


@pytest.fixture
def make_pod():
    return pod


@pytest.fixture
def make_event():
    return event

