"""Explicit state machines with declared transitions.

A policy is either IDLE or TRAINING. Training workers finish on their own
threads, so transitions are made under a lock, and a request that is not
allowed from the current state comes back as an ``Err`` rather than
silently overwriting the state.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, FrozenSet, Generic, Iterable, List, Mapping, TypeVar

from arena.result import Err, Ok, Result

S = TypeVar("S", bound=Enum)


@dataclass(frozen=True)
class StateTransition(Generic[S]):
    from_state: S
    to_state: S
    reason: str = ""


class StateMachine(Generic[S]):
    """Holds one state out of an enum and enforces the allowed moves.

    Args:
        initial_state: Starting state; must appear in ``transitions``
        transitions: Allowed target states for each state
        history_limit: Keep the last N transitions (0 disables history)
    """

    def __init__(
        self,
        initial_state: S,
        transitions: Mapping[S, Iterable[S]],
        history_limit: int = 0,
    ) -> None:
        if initial_state not in transitions:
            raise ValueError(f"{initial_state} has no entry in the transition table")
        self._state = initial_state
        self._allowed: Dict[S, FrozenSet[S]] = {
            state: frozenset(targets) for state, targets in transitions.items()
        }
        self._history_limit = history_limit
        self._history: List[StateTransition[S]] = []
        self._lock = threading.Lock()

    @property
    def state(self) -> S:
        return self._state

    @property
    def history(self) -> List[StateTransition[S]]:
        with self._lock:
            return list(self._history)

    def can_transition(self, target: S) -> bool:
        return target in self._allowed.get(self._state, frozenset())

    def try_transition(self, target: S, reason: str = "") -> Result[S, str]:
        """Move to ``target`` if allowed.

        Returns:
            Ok(target), or Err describing the rejected move
        """
        with self._lock:
            current = self._state
            if not self.can_transition(target):
                allowed = sorted(t.name for t in self._allowed.get(current, ()))
                return Err(f"{current.name} -> {target.name} not allowed (allowed: {allowed})")
            self._state = target
            if self._history_limit:
                self._history.append(StateTransition(current, target, reason))
                del self._history[: -self._history_limit]
            return Ok(target)

    def transition(self, target: S, reason: str = "") -> S:
        """Like ``try_transition`` but raises ValueError on a rejected move."""
        result = self.try_transition(target, reason)
        if result.is_err():
            raise ValueError(result.error)
        return result.unwrap()

    def __repr__(self) -> str:
        return f"StateMachine({self._state.name})"


class PolicyState(Enum):
    """Training lifecycle of a decision policy."""

    IDLE = auto()
    TRAINING = auto()


POLICY_STATE_TRANSITIONS: Dict[PolicyState, List[PolicyState]] = {
    PolicyState.IDLE: [PolicyState.TRAINING],
    PolicyState.TRAINING: [PolicyState.IDLE],
}


def create_policy_state_machine(history_limit: int = 0) -> StateMachine[PolicyState]:
    return StateMachine(PolicyState.IDLE, POLICY_STATE_TRANSITIONS, history_limit=history_limit)
