"""Background simulation runner thread.

One worker thread owns the world. Control requests reach it through a
command queue and results leave it as events handed to ``event_sink``, so
the stepper never touches the event loop and the event loop never touches
the world.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from arena.config.simulation_config import SimulationConfig
from arena.world import World
from backend.state_payloads import serialize_snapshot

logger = logging.getLogger(__name__)

STATUS_LOG_INTERVAL_SECONDS = 5.0
# Behind schedule by more than this, the loop stops trying to catch up
MAX_LAG_SECONDS = 0.1


class RunnerCommand(Enum):
    START = "start"
    STOP = "stop"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class SnapshotReady:
    tick: int
    payload: bytes


@dataclass(frozen=True)
class TickFailed:
    tick: int
    error_type: str
    message: str


RunnerEvent = Union[SnapshotReady, TickFailed]
EventSink = Callable[[RunnerEvent], None]


class SimulationRunner:
    """Runs a world on a fixed tick period in a background thread.

    Ticks never overlap: the same thread that sleeps between ticks runs
    them, and ``step_once`` takes the world lock. START and STOP are
    idempotent and the runner can be restarted after a STOP.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        event_sink: Optional[EventSink] = None,
        world: Optional[World] = None,
    ) -> None:
        self.world = world if world is not None else World(config)
        self.config = self.world.config
        self.event_sink = event_sink
        self.tick_period = self.config.tick_period

        self.lock = threading.Lock()
        self.thread: Optional[threading.Thread] = None
        self._commands: "queue.Queue[RunnerCommand]" = queue.Queue()
        self._running = threading.Event()
        self._closed = False

        # Observers that connect before the first tick still get a frame
        self._latest_snapshot: bytes = serialize_snapshot(self.world.snapshot())

        # Ticks-per-second tracking for the status line
        self._last_status_time = time.monotonic()
        self._status_tick_count = 0
        self.current_tps = 0.0

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def latest_snapshot(self) -> bytes:
        return self._latest_snapshot

    def start(self) -> None:
        """Start (or resume) ticking."""
        self._ensure_thread()
        self._commands.put(RunnerCommand.START)

    def stop(self) -> None:
        """Pause ticking; the thread stays alive for a later start."""
        if self.thread is not None and self.thread.is_alive():
            self._commands.put(RunnerCommand.STOP)

    def close(self, timeout: float = 2.0) -> None:
        """Shut the worker thread down and release the world."""
        if self._closed:
            return
        self._closed = True
        if self.thread is not None and self.thread.is_alive():
            self._commands.put(RunnerCommand.SHUTDOWN)
            self.thread.join(timeout=timeout)
            if self.thread.is_alive():
                logger.warning("Simulation loop did not exit within %.1fs", timeout)
        self._running.clear()
        self.world.close()

    def step_once(self) -> int:
        """Run a single tick synchronously in the calling thread."""
        return self._advance()

    def status(self) -> Dict[str, Any]:
        with self.lock:
            state = self.world.state
            return {
                "running": self.running,
                "tick": state.tick,
                "generation": state.generation,
                "population": state.population,
                "food": len(state.food),
                "season": state.season.value,
                "total_days": state.clock.total_days,
                "best_score": self.world.tracker.epoch_best_score,
                "historical_best_score": self.world.tracker.historical_best_score,
                "longest_lifespan": self.world.tracker.longest_lifespan,
                "deaths_by_cause": self.world.tracker.deaths_by_cause(),
                "transient_faults": state.stats.transient_faults,
                "feedback_skipped": state.stats.feedback_skipped,
                "ticks_per_second": self.current_tps,
            }

    def _ensure_thread(self) -> None:
        if self._closed:
            raise RuntimeError("SimulationRunner is closed")
        if self.thread is None or not self.thread.is_alive():
            self.thread = threading.Thread(target=self._run_loop, name="arena-stepper", daemon=True)
            self.thread.start()

    def _publish(self, event: RunnerEvent) -> None:
        if self.event_sink is None:
            return
        try:
            self.event_sink(event)
        except Exception as e:
            logger.error("Event sink failed for %s: %s", type(event).__name__, e, exc_info=True)

    def _advance(self) -> int:
        """One tick under the world lock; failures become TickFailed events."""
        with self.lock:
            try:
                tick = self.world.step()
                if tick % self.config.snapshot_interval == 0:
                    payload = serialize_snapshot(self.world.snapshot())
                    self._latest_snapshot = payload
                    event: RunnerEvent = SnapshotReady(tick, payload)
                else:
                    return tick
            except Exception as e:
                tick = self.world.state.tick
                logger.error("Simulation loop: Error updating world at tick %d: %s", tick, e, exc_info=True)
                event = TickFailed(tick, type(e).__name__, str(e))
        self._publish(event)
        return tick

    def _run_loop(self) -> None:
        """Main simulation loop."""
        logger.info("Simulation loop: Starting")
        ticks = 0
        # Drift correction: track when the next tick *should* start
        next_tick_time = time.monotonic()

        try:
            while True:
                if self.running:
                    timeout: Optional[float] = max(0.0, next_tick_time - time.monotonic())
                else:
                    timeout = None
                try:
                    command = self._commands.get(timeout=timeout)
                except queue.Empty:
                    command = None

                if command is RunnerCommand.SHUTDOWN:
                    break
                if command is RunnerCommand.START:
                    if not self.running:
                        self._running.set()
                        next_tick_time = time.monotonic()
                        logger.info("Simulation loop: Ticking every %.1f ms", self.tick_period * 1000)
                    continue
                if command is RunnerCommand.STOP:
                    if self.running:
                        self._running.clear()
                        logger.info("Simulation loop: Paused at tick %d", self.world.state.tick)
                    continue

                # Queue timed out: a tick is due
                next_tick_time += self.tick_period
                self._advance()
                ticks += 1
                self._log_status()

                lag = time.monotonic() - next_tick_time
                if lag > MAX_LAG_SECONDS:
                    # Falling too far behind; reset instead of running 0-delay ticks to catch up
                    next_tick_time = time.monotonic()
        except Exception as e:
            logger.error("Simulation loop: Fatal error, loop exiting: %s", e, exc_info=True)
        finally:
            self._running.clear()
            logger.info("Simulation loop: Ended after %d ticks", ticks)

    def _log_status(self) -> None:
        self._status_tick_count += 1
        now = time.monotonic()
        elapsed = now - self._last_status_time
        if elapsed < STATUS_LOG_INTERVAL_SECONDS:
            return
        self.current_tps = self._status_tick_count / elapsed
        self._status_tick_count = 0
        self._last_status_time = now

        state = self.world.state
        logger.info(
            "Simulation Status TPS=%.1f, Creatures=%d, Food=%d, Gen=%d, Season=%s, Best=%.2f",
            self.current_tps,
            state.population,
            len(state.food),
            state.generation,
            state.season.value,
            self.world.tracker.historical_best_score,
        )
