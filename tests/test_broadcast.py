"""Tests for the event bridge, observer backpressure and snapshot fan-out."""

import asyncio
import threading

import orjson
import pytest

from backend.broadcast import Broadcaster, EventBridge
from backend.observers import Observer, ObserverRegistry
from backend.simulation_runner import SnapshotReady, TickFailed
from backend.state_payloads import decompress_payload


class RecordingSocket:
    def __init__(self, delay=0.0):
        self.delay = delay
        self.frames = []

    async def send_bytes(self, data):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.frames.append(data)


class FailingSocket:
    async def send_bytes(self, data):
        raise ConnectionResetError("peer went away")


def _snapshot(tick):
    return SnapshotReady(tick, orjson.dumps({"type": "snapshot", "tick": tick, "pad": "x" * 200}))


class TestObserver:
    def test_slow_send_switches_to_compressed(self):
        observer = Observer(websocket=None)
        assert observer.record_send(0.2, slow_threshold=0.05)
        assert observer.compressed
        assert observer.slow_sends == 1
        # Already compressed: no further switch
        assert not observer.record_send(0.2, slow_threshold=0.05)

    def test_recovers_after_consecutive_fast_sends(self):
        observer = Observer(websocket=None, compressed=True)
        switched = [observer.record_send(0.001, 0.05, recover_after=3) for _ in range(3)]
        assert switched == [False, False, True]
        assert not observer.compressed

    def test_pinned_observer_stays_compressed(self):
        observer = Observer(websocket=None, compressed=True, pinned=True)
        for _ in range(50):
            observer.record_send(0.001, 0.05, recover_after=3)
        assert observer.compressed

    def test_ids_are_unique(self):
        assert Observer(websocket=None).id != Observer(websocket=None).id


class TestObserverRegistry:
    def test_add_and_remove(self):
        registry = ObserverRegistry()
        observer = registry.add(RecordingSocket(), compressed=True)
        assert observer in registry
        assert observer.pinned
        assert len(registry) == 1
        assert registry.remove(observer)
        assert not registry.remove(observer)
        assert len(registry) == 0


class TestEventBridge:
    @pytest.mark.asyncio
    async def test_keeps_only_latest_snapshot(self):
        bridge = EventBridge()
        bridge.bind(asyncio.get_running_loop())
        for tick in (1, 2, 3):
            bridge.publish(_snapshot(tick))
        await asyncio.sleep(0)

        assert bridge.pending() == 1
        assert bridge.dropped_snapshots == 2
        event = await bridge.get()
        assert event.tick == 3

    @pytest.mark.asyncio
    async def test_errors_are_never_dropped(self):
        bridge = EventBridge()
        bridge.bind(asyncio.get_running_loop())
        bridge.publish(_snapshot(1))
        bridge.publish(TickFailed(1, "PolicyError", "boom"))
        bridge.publish(_snapshot(2))
        await asyncio.sleep(0)

        first = await bridge.get()
        second = await bridge.get()
        assert isinstance(first, TickFailed)
        assert second.tick == 2

    @pytest.mark.asyncio
    async def test_publish_from_another_thread(self):
        bridge = EventBridge()
        bridge.bind(asyncio.get_running_loop())
        thread = threading.Thread(target=bridge.publish, args=(_snapshot(7),))
        thread.start()
        event = await asyncio.wait_for(bridge.get(), timeout=2.0)
        thread.join()
        assert event.tick == 7

    def test_unbound_bridge_ignores_events(self):
        bridge = EventBridge()
        bridge.publish(_snapshot(1))
        assert bridge.pending() == 0


class TestBroadcaster:
    @pytest.mark.asyncio
    async def test_fan_out_to_all_observers(self):
        registry = ObserverRegistry()
        sockets = [RecordingSocket() for _ in range(3)]
        for socket in sockets:
            registry.add(socket)
        broadcaster = Broadcaster(EventBridge(), registry)

        delivered = await broadcaster.broadcast(b"frame")
        assert delivered == 3
        assert all(s.frames == [b"frame"] for s in sockets)

    @pytest.mark.asyncio
    async def test_failing_observer_is_removed(self):
        registry = ObserverRegistry()
        good = RecordingSocket()
        registry.add(good)
        bad = registry.add(FailingSocket())
        broadcaster = Broadcaster(EventBridge(), registry)

        assert await broadcaster.broadcast(b"frame") == 1
        assert bad not in registry
        assert good.frames == [b"frame"]

    @pytest.mark.asyncio
    async def test_hanging_observer_times_out(self):
        registry = ObserverRegistry()
        fast = RecordingSocket()
        registry.add(fast)
        hung = registry.add(RecordingSocket(delay=5.0))
        broadcaster = Broadcaster(EventBridge(), registry, send_timeout=0.1)

        assert await broadcaster.broadcast(b"frame") == 1
        assert hung not in registry
        assert fast.frames == [b"frame"]

    @pytest.mark.asyncio
    async def test_slow_observer_gets_compressed_frames(self):
        registry = ObserverRegistry()
        slow_socket = RecordingSocket(delay=0.06)
        slow = registry.add(slow_socket)
        fast_socket = RecordingSocket()
        registry.add(fast_socket)
        broadcaster = Broadcaster(EventBridge(), registry, slow_send_seconds=0.05)
        payload = _snapshot(1).payload

        await broadcaster.broadcast(payload)
        assert slow.compressed
        await broadcaster.broadcast(payload)

        assert slow_socket.frames[0] == payload
        assert decompress_payload(slow_socket.frames[1]) == payload
        assert fast_socket.frames == [payload, payload]

    @pytest.mark.asyncio
    async def test_run_forwards_snapshots_and_errors(self):
        registry = ObserverRegistry()
        socket = RecordingSocket()
        registry.add(socket, compressed=True)
        bridge = EventBridge()
        bridge.bind(asyncio.get_running_loop())
        broadcaster = Broadcaster(bridge, registry)
        broadcaster.start()

        bridge.publish(TickFailed(4, "PolicyError", "diverged"))
        bridge.publish(_snapshot(5))
        for _ in range(100):
            if len(socket.frames) >= 2:
                break
            await asyncio.sleep(0.01)
        await broadcaster.stop()

        error = orjson.loads(socket.frames[0])
        assert error == {"type": "error", "tick": 4, "errorType": "PolicyError", "message": "diverged"}
        snapshot = orjson.loads(decompress_payload(socket.frames[1]))
        assert snapshot["tick"] == 5
