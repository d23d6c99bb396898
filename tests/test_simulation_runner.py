"""Tests for the background simulation runner."""

import time

import orjson
import pytest

from arena.config.simulation_config import SimulationConfig
from arena.exceptions import PolicyError
from backend.simulation_runner import SimulationRunner, SnapshotReady, TickFailed


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


@pytest.fixture
def config():
    return SimulationConfig(
        tick_period_ms=5,
        initial_population=10,
        initial_food=20,
        seed=99,
        learning_enabled=False,
        inline_training=True,
    )


@pytest.fixture
def events():
    return []


@pytest.fixture
def runner(config, events):
    r = SimulationRunner(config, event_sink=events.append)
    yield r
    r.close()


class TestStepOnce:
    def test_initial_snapshot_available_before_first_tick(self, runner):
        data = orjson.loads(runner.latest_snapshot)
        assert data["tick"] == 0
        assert len(data["creatures"]) == 10

    def test_step_publishes_snapshot(self, runner, events):
        assert runner.step_once() == 1
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, SnapshotReady)
        assert event.tick == 1
        assert runner.latest_snapshot == event.payload

    def test_snapshot_interval(self, events):
        config = SimulationConfig(
            initial_population=2, seed=1, learning_enabled=False, inline_training=True, snapshot_interval=3
        )
        runner = SimulationRunner(config, event_sink=events.append)
        for _ in range(6):
            runner.step_once()
        runner.close()
        assert [e.tick for e in events] == [3, 6]

    def test_tick_failure_becomes_event(self, runner, events, monkeypatch):
        def broken_step():
            raise PolicyError("network diverged")

        monkeypatch.setattr(runner.world, "step", broken_step)
        runner.step_once()
        assert events == [TickFailed(0, "PolicyError", "network diverged")]

    def test_sink_failure_does_not_stop_ticking(self, config):
        def bad_sink(event):
            raise RuntimeError("sink down")

        runner = SimulationRunner(config, event_sink=bad_sink)
        assert runner.step_once() == 1
        assert runner.step_once() == 2
        runner.close()


class TestRunLoop:
    def test_start_and_stop(self, runner, events):
        runner.start()
        assert _wait_for(lambda: len(events) >= 5)
        assert runner.running

        runner.stop()
        assert _wait_for(lambda: not runner.running)
        paused_at = runner.world.state.tick
        time.sleep(0.05)
        assert runner.world.state.tick == paused_at

    def test_start_is_idempotent(self, runner, events):
        runner.start()
        runner.start()
        assert _wait_for(lambda: len(events) >= 3)
        ticks = [e.tick for e in events]
        assert ticks == sorted(set(ticks))

    def test_restart_after_stop(self, runner, events):
        runner.start()
        assert _wait_for(lambda: len(events) >= 2)
        runner.stop()
        assert _wait_for(lambda: not runner.running)
        count = len(events)
        runner.start()
        assert _wait_for(lambda: len(events) > count)

    def test_close_joins_thread(self, config):
        runner = SimulationRunner(config)
        runner.start()
        assert _wait_for(lambda: runner.running)
        runner.close()
        assert not runner.thread.is_alive()
        assert not runner.running
        with pytest.raises(RuntimeError):
            runner.start()

    def test_status(self, runner):
        runner.step_once()
        status = runner.status()
        assert status["tick"] == 1
        assert status["population"] <= 10
        assert status["season"] == "spring"
        assert status["running"] is False
        assert isinstance(status["deaths_by_cause"], dict)
