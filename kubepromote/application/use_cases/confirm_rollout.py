"""
Confirm Rollout Use Case

Architectural Intent:
- Watches pod lifecycle events after a version change was requested and
  reports when the target version is running
- Runs detached from the command that spawned it: the decision engines return
  to the operator immediately, the outcome arrives as a later notification
- Each watcher owns its own subscription and copies of its parameters; watchers
  share nothing but the injected ports

Design Decisions:
- No timeout: a watcher ends on confirmation or when the event stream closes
- A stream that closes or errors before confirmation is logged, not notified
- Failure to open the subscription is notified immediately as a setup error
- Notification and event-bus delivery errors are logged; the watcher keeps
  watching
"""

import asyncio
import logging
from typing import Optional

from kubepromote.domain.errors import PromoterError
from kubepromote.domain.events.promotion_events import (
    InstanceFailedEvent,
    RolloutConfirmedEvent,
    RolloutWatchAbortedEvent,
)
from kubepromote.domain.ports.cluster_state_port import ClusterStatePort
from kubepromote.domain.ports.event_bus_port import EventBusPort
from kubepromote.domain.ports.notification_port import NotificationPort
from kubepromote.domain.services.rollout_confirmation import (
    RolloutConfirmation,
    Verdict,
    WatchState,
)
from kubepromote.domain.value_objects.command_context import CommandContext

logger = logging.getLogger(__name__)


class ConfirmRollout:
    def __init__(
        self,
        cluster: ClusterStatePort,
        notifier: NotificationPort,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.cluster = cluster
        self.notifier = notifier
        self.event_bus = event_bus
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_watchers(self) -> int:
        return len(self._tasks)

    def spawn(
        self, namespace: str, target_version: str, context: CommandContext
    ) -> asyncio.Task:
        """Start a detached watcher and return its task."""
        task = asyncio.create_task(
            self.watch(namespace, target_version, context),
            name=f"confirm-{namespace}-{target_version}",
        )
        # The event loop only keeps weak references to tasks.
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    async def watch(
        self, namespace: str, target_version: str, context: CommandContext
    ) -> WatchState:
        tracker = RolloutConfirmation(namespace, target_version)

        try:
            stream = await self.cluster.watch_instances(namespace)
        except Exception as e:
            logger.error("Failed to watch pods in namespace `%s`: %s", namespace, e)
            await self._notify(
                self.notifier.notify_failure,
                context, f"Failed to watch pods in namespace `{namespace}`",
            )
            return WatchState.ABORTED

        try:
            async for event in stream:
                verdict = tracker.observe(event)
                instance = event.instance

                if verdict is Verdict.CONFIRMED:
                    logger.info(
                        "Pod %s confirmed version %s in %s",
                        instance.name, instance.version, namespace,
                    )
                    await self._notify(
                        self.notifier.notify_success,
                        context,
                        f"Pod `{instance.name}` with version `{instance.version}` "
                        f"in namespace `{namespace}` is successfully running.",
                    )
                    await self._publish(RolloutConfirmedEvent(
                        aggregate_id=namespace,
                        namespace=namespace,
                        instance=instance.name,
                        version=instance.version,
                    ))
                    break

                if verdict is Verdict.INSTANCE_FAILED:
                    logger.warning(
                        "Pod %s (version %s) in %s is %s",
                        instance.name, instance.version, namespace, instance.phase.value,
                    )
                    await self._notify(
                        self.notifier.notify_failure,
                        context,
                        f"Pod `{instance.name}` with version `{instance.version}` "
                        f"in namespace `{namespace}` has failed to start.",
                    )
                    await self._publish(InstanceFailedEvent(
                        aggregate_id=namespace,
                        namespace=namespace,
                        instance=instance.name,
                        version=instance.version,
                        phase=instance.phase.value,
                    ))
        except PromoterError as e:
            logger.warning("Pod watch in %s terminated: %s", namespace, e)
        finally:
            await stream.close()

        if tracker.state is WatchState.WATCHING:
            tracker.abort()
            logger.warning(
                "Watch for version %s in %s ended before confirmation",
                target_version, namespace,
            )
            await self._publish(RolloutWatchAbortedEvent(
                aggregate_id=namespace,
                namespace=namespace,
                version=target_version,
                reason="event stream closed",
            ))
        return tracker.state

    async def wait_all(self) -> None:
        """Wait for every watcher spawned by this instance to finish."""
        if not self._tasks:
            return
        results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Rollout watcher crashed: %s", result)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Rollout watcher %s crashed: %s", task.get_name(), error)

    async def _notify(self, send, context: CommandContext, message: str) -> None:
        try:
            await send(context, message)
        except Exception as e:
            logger.error("Failed to deliver watcher notification: %s", e)

    async def _publish(self, event) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish([event])
        except Exception as e:
            logger.error("Failed to publish %s: %s", type(event).__name__, e)
