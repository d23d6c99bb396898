"""Uniform random policy with no learning."""

from __future__ import annotations

import random
from typing import Sequence

from arena.actions import Action, DISCRETE_ACTIONS
from arena.policy.interfaces import DecisionPolicy, Feedback, PolicyParameters
from arena.result import Result, ok
from arena.sensing import validate_vector
from arena.state_machine import PolicyState

POLICY_KIND = "random"


class RandomPolicy:
    """Picks a discrete action uniformly at random from its own seeded rng."""

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    @property
    def state(self) -> PolicyState:
        return PolicyState.IDLE

    def select_action(self, vector: Sequence[float]) -> Action:
        validate_vector(vector)
        return Action.from_index(self._rng.randrange(len(DISCRETE_ACTIONS)))

    def ingest_feedback(self, feedback: Feedback) -> Result[None, str]:
        return ok()

    def clone_with_mutation(self, rate: float) -> "RandomPolicy":
        return RandomPolicy(random.Random(self._rng.getrandbits(64)))

    def crossover(self, other: DecisionPolicy, mutation_rate: float) -> "RandomPolicy":
        return self.clone_with_mutation(mutation_rate)

    def export_parameters(self) -> PolicyParameters:
        return PolicyParameters(kind=POLICY_KIND)

    def import_parameters(self, params: PolicyParameters) -> None:
        pass
