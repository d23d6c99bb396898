"""Construction of decision policies for a world."""

from __future__ import annotations

import logging
import random
from typing import Optional

import numpy as np

from arena.exceptions import PolicyError
from arena.policy.dqn import DQNPolicy, policy_from_parameters
from arena.policy.interfaces import DecisionPolicy, PolicyParameters
from arena.policy.random_policy import RandomPolicy
from arena.policy.training import InlineTrainingExecutor, TrainingExecutor

logger = logging.getLogger(__name__)


class PolicyFactory:
    """Builds policies that share one training executor.

    Every rng handed to a policy is derived from the world rng, so a seeded
    world produces the same policies on every run.

    Args:
        rng: The world's random source
        learning_enabled: Build DQN policies (True) or random policies
        inline_training: Train synchronously instead of on a thread pool
    """

    def __init__(
        self, rng: random.Random, learning_enabled: bool = True, inline_training: bool = False
    ) -> None:
        self._rng = rng
        self.learning_enabled = learning_enabled
        self.executor = InlineTrainingExecutor() if inline_training else TrainingExecutor()

    def _numpy_rng(self) -> np.random.Generator:
        return np.random.default_rng(self._rng.getrandbits(64))

    def create(self) -> DecisionPolicy:
        """A fresh, untrained policy."""
        if not self.learning_enabled:
            return RandomPolicy(random.Random(self._rng.getrandbits(64)))
        return DQNPolicy.fresh(self._numpy_rng(), self.executor)

    def from_parameters(
        self, params: Optional[PolicyParameters], mutation_rate: float
    ) -> DecisionPolicy:
        """A mutated descendant of stored parameters, or a fresh policy.

        Falls back to a fresh policy when there is nothing usable to restore.
        """
        if params is None or not self.learning_enabled:
            return self.create()
        try:
            base = policy_from_parameters(params, self._numpy_rng(), self.executor)
        except PolicyError as exc:
            logger.warning("Stored policy parameters unusable, using a fresh policy: %s", exc)
            return self.create()
        if base is None:
            return self.create()
        return base.clone_with_mutation(mutation_rate)

    def shutdown(self) -> None:
        self.executor.shutdown()
