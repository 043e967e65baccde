"""
Kubernetes Adapter

Architectural Intent:
- Infrastructure adapter implementing ClusterStatePort via the official
  kubernetes Python client
- Translates V1Pod objects into WorkloadInstance value objects
- Bridges the client's blocking watch generator onto asyncio for the
  confirmation watcher

Design Decisions:
- Client configuration is resolved in order: explicit kubeconfig, explicit
  server/token/CA, in-cluster service account, default ~/.kube/config
- Each adapter owns its ApiClient; nothing is stored in the client's global
  default configuration
- Blocking API calls run in the default executor so the event loop stays free
- ensure_connected rebuilds the client once when the API server is unreachable
  and then gives up with ClusterConnectionError
"""

from __future__ import annotations
import asyncio
import base64
import logging
import tempfile
import threading
from typing import Any, AsyncIterator, Callable, Optional

from kubernetes import client, watch
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from kubepromote.domain.errors import ClusterConnectionError, QueryError
from kubepromote.domain.ports.cluster_state_port import ClusterStatePort
from kubepromote.domain.value_objects.workload_instance import (
    DEFAULT_LABEL_KEY,
    EventKind,
    InstanceEvent,
    Phase,
    WorkloadInstance,
    extract_label,
    extract_version,
)
from kubepromote.infrastructure.config import KubernetesConfig

logger = logging.getLogger(__name__)

_STREAM_END = object()


def pod_to_instance(pod: Any, label_key: str = DEFAULT_LABEL_KEY) -> WorkloadInstance:
    """Convert a V1Pod into a WorkloadInstance."""
    metadata = pod.metadata
    spec = pod.spec
    status = pod.status

    containers = (spec.containers or []) if spec else []
    version = extract_version(c.image or "" for c in containers)

    waiting_reason = None
    for container_status in (status.container_statuses or []) if status else []:
        state = container_status.state
        if state and state.waiting and state.waiting.reason:
            waiting_reason = state.waiting.reason
            break

    return WorkloadInstance(
        name=metadata.name,
        version=version,
        label=extract_label(metadata.labels, label_key),
        phase=Phase.parse(status.phase if status else None),
        waiting_reason=waiting_reason,
    )


def build_client_configuration(settings: KubernetesConfig) -> client.Configuration:
    """Resolve a client configuration from settings, env or the pod's service account."""
    configuration = client.Configuration()

    if settings.kubeconfig:
        logger.info("Using kubeconfig %s", settings.kubeconfig)
        k8s_config.load_kube_config(
            config_file=settings.kubeconfig,
            context=settings.context or None,
            client_configuration=configuration,
        )
        return configuration

    if settings.server and settings.token and settings.ca_data:
        logger.info("Building configuration from server and token settings")
        try:
            ca_pem = base64.b64decode(settings.ca_data)
        except ValueError as e:
            raise ClusterConnectionError(f"failed to decode cluster CA: {e}") from e
        # The client only accepts a CA bundle by file path.
        ca_file = tempfile.NamedTemporaryFile(
            prefix="kubepromote-ca-", suffix=".crt", delete=False
        )
        with ca_file:
            ca_file.write(ca_pem)
        configuration.host = settings.server
        configuration.api_key = {"authorization": f"Bearer {settings.token}"}
        configuration.ssl_ca_cert = ca_file.name
        return configuration

    try:
        k8s_config.load_incluster_config(client_configuration=configuration)
        logger.info("Loaded in-cluster configuration")
    except k8s_config.ConfigException:
        logger.info("Falling back to default kubeconfig")
        k8s_config.load_kube_config(
            context=settings.context or None,
            client_configuration=configuration,
        )
    return configuration


class KubernetesPodStream:
    """Async view over a kubernetes.watch.Watch pod stream running in a thread."""

    def __init__(
        self,
        core: client.CoreV1Api,
        namespace: str,
        label_key: str,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._core = core
        self._namespace = namespace
        self._label_key = label_key
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue()
        self._watch = watch.Watch()
        self._thread = threading.Thread(
            target=self._pump,
            name=f"pod-watch-{namespace}",
            daemon=True,
        )

    def start(self) -> "KubernetesPodStream":
        self._thread.start()
        return self

    def _pump(self) -> None:
        try:
            for raw in self._watch.stream(
                self._core.list_namespaced_pod, namespace=self._namespace
            ):
                pod = raw.get("object")
                if not isinstance(pod, client.V1Pod):
                    logger.debug("Unexpected watch object type: %s", type(pod))
                    continue
                event = InstanceEvent(
                    kind=EventKind.parse(raw.get("type")),
                    instance=pod_to_instance(pod, self._label_key),
                )
                self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except Exception as e:
            logger.warning("Pod watch in %s failed: %s", self._namespace, e)
        finally:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, _STREAM_END)

    async def __aiter__(self) -> AsyncIterator[InstanceEvent]:
        while True:
            item = await self._queue.get()
            if item is _STREAM_END:
                return
            yield item

    async def close(self) -> None:
        self._watch.stop()


class KubernetesAdapter(ClusterStatePort):
    """Adapter implementing ClusterStatePort via the Kubernetes API."""

    def __init__(
        self,
        settings: Optional[KubernetesConfig] = None,
        api_client: Optional[client.ApiClient] = None,
    ) -> None:
        self._settings = settings or KubernetesConfig()
        self._api_client = api_client
        self._core: Optional[client.CoreV1Api] = (
            client.CoreV1Api(api_client) if api_client is not None else None
        )

    @property
    def label_key(self) -> str:
        return self._settings.label_key

    def connect(self) -> None:
        """Build the API client from configuration."""
        try:
            configuration = build_client_configuration(self._settings)
        except (k8s_config.ConfigException, OSError) as e:
            raise ClusterConnectionError(
                f"failed to configure Kubernetes client: {e}"
            ) from e
        self._api_client = client.ApiClient(configuration)
        self._core = client.CoreV1Api(self._api_client)

    async def _run(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    def _server_version(self) -> Any:
        return client.VersionApi(self._api_client).get_code()

    async def ensure_connected(self) -> None:
        if self._core is None:
            self.connect()
        try:
            await self._run(self._server_version)
            return
        except Exception as e:
            logger.warning("Connection lost (%s). Attempting to reconnect...", e)

        self.connect()
        try:
            await self._run(self._server_version)
        except Exception as e:
            raise ClusterConnectionError(
                f"Kubernetes API unreachable after reconnect: {e}"
            ) from e

    def _core_api(self) -> client.CoreV1Api:
        if self._core is None:
            self.connect()
        assert self._core is not None
        return self._core

    async def list_instances(self, namespace: str) -> list[WorkloadInstance]:
        core = self._core_api()
        try:
            pods = await self._run(core.list_namespaced_pod, namespace)
        except ApiException as e:
            raise QueryError(
                f"failed to list pods in namespace {namespace}: {e.reason}",
                namespace=namespace,
            ) from e
        return [pod_to_instance(pod, self.label_key) for pod in pods.items]

    async def get_instance(self, name: str, namespace: str) -> WorkloadInstance:
        core = self._core_api()
        try:
            pod = await self._run(core.read_namespaced_pod, name, namespace)
        except ApiException as e:
            raise QueryError(
                f"failed to get pod details: {e.reason}", namespace=namespace
            ) from e
        return pod_to_instance(pod, self.label_key)

    async def watch_instances(self, namespace: str) -> KubernetesPodStream:
        core = self._core_api()
        # The watch request itself is lazy; probe access so setup errors
        # surface here rather than as a silently closed stream.
        try:
            await self._run(core.list_namespaced_pod, namespace, limit=1)
        except ApiException as e:
            raise QueryError(
                f"failed to watch pods in namespace {namespace}: {e.reason}",
                namespace=namespace,
            ) from e
        loop = asyncio.get_running_loop()
        return KubernetesPodStream(core, namespace, self.label_key, loop).start()
