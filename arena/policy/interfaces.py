"""Decision policy contract.

The core only talks to policies through this narrow interface: pick an
action for a sensed-state vector, take feedback for online learning, and
produce mutated or crossed-over copies at reproduction. How a policy
represents or trains itself is its own business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from arena.actions import Action
from arena.result import Result
from arena.state_machine import PolicyState

Vector = Sequence[float]


@dataclass(frozen=True)
class Feedback:
    """One experienced transition.

    Attributes:
        observation: Input vector the action was chosen from.
        action: The action taken.
        reward: Reward signal for the transition.
        next_observation: Input vector after the action.
        terminal: True when the transition ended the creature's life.
        urgent: Request a training pass right away instead of waiting for
            the regular replay cadence (used for feeding and predation).
    """

    observation: tuple[float, ...]
    action: Action
    reward: float
    next_observation: tuple[float, ...]
    terminal: bool = False
    urgent: bool = False


@dataclass(frozen=True)
class PolicyParameters:
    """Exported policy state used to restore the best policy across epochs."""

    kind: str
    weights: tuple[np.ndarray, ...] = field(default_factory=tuple)
    epsilon: float = 1.0


@runtime_checkable
class DecisionPolicy(Protocol):
    """Capability mapping sensed state to movement actions."""

    @property
    def state(self) -> PolicyState: ...

    def select_action(self, vector: Vector) -> Action: ...

    def ingest_feedback(self, feedback: Feedback) -> Result[None, str]: ...

    def clone_with_mutation(self, rate: float) -> "DecisionPolicy": ...

    def crossover(self, other: "DecisionPolicy", mutation_rate: float) -> "DecisionPolicy": ...

    def export_parameters(self) -> PolicyParameters: ...

    def import_parameters(self, params: PolicyParameters) -> None: ...
