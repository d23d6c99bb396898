"""Snapshot fan-out from the stepper thread to WebSocket observers.

The stepper thread publishes events into an ``EventBridge``; a single
asyncio task (``Broadcaster.run``) drains it and sends each snapshot to all
observers concurrently. A slow consumer only ever sees the newest pending
snapshot, and a slow or failing observer never delays the others.
"""

import asyncio
import logging
import time
from collections import deque
from contextlib import suppress
from typing import Deque, Optional

from arena.config.server import FAST_SENDS_TO_RECOVER, SEND_TIMEOUT_SECONDS, SLOW_SEND_SECONDS
from backend.observers import Observer, ObserverRegistry
from backend.simulation_runner import RunnerEvent, SnapshotReady, TickFailed
from backend.state_payloads import compress_payload, error_payload

logger = logging.getLogger("backend.broadcast")


def _handle_task_exception(task: asyncio.Task) -> None:
    """Handle exceptions from background tasks."""
    if task.cancelled():
        logger.debug(f"Task {task.get_name()} was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            f"Unhandled exception in task {task.get_name()}: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )


class EventBridge:
    """Thread-safe handoff of runner events into the event loop.

    ``publish`` may be called from any thread. At most one snapshot is kept
    pending: a newer snapshot replaces an undelivered one. Error events are
    never dropped.
    """

    def __init__(self) -> None:
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._events: Deque[RunnerEvent] = deque()
        self._pending_snapshot: Optional[SnapshotReady] = None
        self._wakeup: Optional[asyncio.Event] = None
        self.dropped_snapshots = 0

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to the loop that will consume events."""
        self._loop = loop
        self._wakeup = asyncio.Event()

    def publish(self, event: RunnerEvent) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._enqueue, event)
        except RuntimeError:
            # Loop closed between the check and the call during shutdown
            logger.debug("Event loop closed, dropping %s", type(event).__name__)

    def _enqueue(self, event: RunnerEvent) -> None:
        if isinstance(event, SnapshotReady):
            if self._pending_snapshot is not None:
                self._events.remove(self._pending_snapshot)
                self.dropped_snapshots += 1
            self._pending_snapshot = event
        self._events.append(event)
        self._wakeup.set()

    async def get(self) -> RunnerEvent:
        """Wait for the next event."""
        if self._wakeup is None:
            raise RuntimeError("EventBridge is not bound to an event loop")
        while not self._events:
            self._wakeup.clear()
            await self._wakeup.wait()
        event = self._events.popleft()
        if event is self._pending_snapshot:
            self._pending_snapshot = None
        return event

    def pending(self) -> int:
        return len(self._events)


class Broadcaster:
    """Drains an EventBridge and fans payloads out to the registry."""

    def __init__(
        self,
        bridge: EventBridge,
        registry: ObserverRegistry,
        slow_send_seconds: float = SLOW_SEND_SECONDS,
        send_timeout: float = SEND_TIMEOUT_SECONDS,
        fast_sends_to_recover: int = FAST_SENDS_TO_RECOVER,
    ) -> None:
        self.bridge = bridge
        self.registry = registry
        self.slow_send_seconds = slow_send_seconds
        self.send_timeout = send_timeout
        self.fast_sends_to_recover = fast_sends_to_recover
        self.frames_sent = 0
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.create_task(self.run(), name="arena_broadcast")
        self._task.add_done_callback(_handle_task_exception)
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    async def run(self) -> None:
        logger.info("broadcast: Task started")
        try:
            while True:
                event = await self.bridge.get()
                if isinstance(event, SnapshotReady):
                    await self.broadcast(event.payload)
                elif isinstance(event, TickFailed):
                    logger.warning(
                        "broadcast: Tick %d failed with %s: %s",
                        event.tick,
                        event.error_type,
                        event.message,
                    )
                    await self.broadcast(
                        error_payload(event.tick, event.error_type, event.message),
                        allow_compression=False,
                    )
        finally:
            logger.info("broadcast: Task ended")

    async def broadcast(self, payload: bytes, allow_compression: bool = True) -> int:
        """Send ``payload`` to every observer at once.

        Returns:
            The number of observers that received it
        """
        observers = self.registry.snapshot()
        if not observers:
            return 0

        compressed: Optional[bytes] = None
        if allow_compression and any(o.compressed for o in observers):
            compressed = compress_payload(payload)

        results = await asyncio.gather(
            *(
                self._send(o, compressed if (compressed is not None and o.compressed) else payload)
                for o in observers
            )
        )
        delivered = sum(1 for ok in results if ok)
        self.frames_sent += 1
        return delivered

    async def _send(self, observer: Observer, data: bytes) -> bool:
        start = time.perf_counter()
        try:
            await asyncio.wait_for(observer.websocket.send_bytes(data), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "broadcast: Observer %d timed out after %.1fs, removing", observer.id, self.send_timeout
            )
            self.registry.remove(observer)
            return False
        except Exception as e:
            logger.warning("broadcast: Error sending to observer %d, removing: %s", observer.id, e)
            self.registry.remove(observer)
            return False

        elapsed = time.perf_counter() - start
        if observer.record_send(elapsed, self.slow_send_seconds, self.fast_sends_to_recover):
            logger.info(
                "broadcast: Observer %d switched to %s frames (last send %.1f ms)",
                observer.id,
                "compressed" if observer.compressed else "plain",
                elapsed * 1000,
            )
        return True
