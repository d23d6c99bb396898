"""Connected snapshot observers.

The registry is only touched from the event loop, so it needs no lock.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List

from arena.config.server import FAST_SENDS_TO_RECOVER, SLOW_SEND_SECONDS

logger = logging.getLogger(__name__)

_observer_ids = itertools.count(1)


@dataclass(eq=False)
class Observer:
    """One WebSocket connection receiving snapshots.

    Attributes:
        websocket: Anything with an async ``send_bytes``.
        compressed: Send gzip frames instead of plain JSON.
        pinned: The client asked for compression; never switch back.
        fast_sends: Consecutive sends under the slow threshold.
        slow_sends: Total sends over the slow threshold.
    """

    websocket: Any
    id: int = 0
    compressed: bool = False
    pinned: bool = False
    fast_sends: int = 0
    slow_sends: int = 0
    sent: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            self.id = next(_observer_ids)

    def record_send(
        self,
        elapsed: float,
        slow_threshold: float = SLOW_SEND_SECONDS,
        recover_after: int = FAST_SENDS_TO_RECOVER,
    ) -> bool:
        """Update backpressure state after a send.

        Returns:
            True if the observer switched representation
        """
        self.sent += 1
        if elapsed > slow_threshold:
            self.slow_sends += 1
            self.fast_sends = 0
            if not self.compressed:
                self.compressed = True
                return True
            return False

        self.fast_sends += 1
        if self.compressed and not self.pinned and self.fast_sends >= recover_after:
            self.compressed = False
            self.fast_sends = 0
            return True
        return False


class ObserverRegistry:
    """The fan-out set."""

    def __init__(self) -> None:
        self._observers: Dict[int, Observer] = {}

    def add(self, websocket: Any, compressed: bool = False) -> Observer:
        observer = Observer(websocket=websocket, compressed=compressed, pinned=compressed)
        self._observers[observer.id] = observer
        logger.info("Observer %d connected (%d total)", observer.id, len(self._observers))
        return observer

    def remove(self, observer: Observer) -> bool:
        """Drop an observer; returns False if it was already gone."""
        if self._observers.pop(observer.id, None) is None:
            return False
        logger.info("Observer %d removed (%d left)", observer.id, len(self._observers))
        return True

    def snapshot(self) -> List[Observer]:
        return list(self._observers.values())

    def __contains__(self, observer: object) -> bool:
        return isinstance(observer, Observer) and observer.id in self._observers

    def __iter__(self) -> Iterator[Observer]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._observers)
