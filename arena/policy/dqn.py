"""Deep Q-learning decision policy.

Each creature owns one ``DQNPolicy``. Actions are chosen epsilon-greedily
from the Q network; feedback is stored in a bounded replay memory and every
``train_every`` feedbacks a minibatch replay is scheduled on the training
executor.

Training never mutates the network that ``select_action`` reads: the job
fits a copy and swaps it in under the lock when done. While a job is in
flight the policy is TRAINING and further training requests come back as
``Err`` so the caller can count and skip them.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, List, Optional, Sequence

import numpy as np

from arena.actions import Action, DISCRETE_ACTIONS
from arena.exceptions import PolicyError
from arena.policy.interfaces import DecisionPolicy, Feedback, PolicyParameters
from arena.policy.q_network import QNetwork
from arena.result import Err, Result, ok
from arena.sensing import OBSERVATION_SIZE, validate_vector
from arena.state_machine import PolicyState, create_policy_state_machine

logger = logging.getLogger(__name__)

POLICY_KIND = "dqn"

# Learning hyperparameters
GAMMA = 0.95
EPSILON_START = 1.0
EPSILON_MIN = 0.01
EPSILON_DECAY = 0.995
LEARNING_RATE = 0.01
BATCH_SIZE = 64
MEMORY_LIMIT = 5000
TRAIN_EVERY = 10


class DQNPolicy:
    """Epsilon-greedy Q-learning policy backed by a small numpy network."""

    def __init__(
        self,
        network: QNetwork,
        rng: np.random.Generator,
        executor,
        epsilon: float = EPSILON_START,
        *,
        gamma: float = GAMMA,
        epsilon_min: float = EPSILON_MIN,
        epsilon_decay: float = EPSILON_DECAY,
        learning_rate: float = LEARNING_RATE,
        batch_size: int = BATCH_SIZE,
        memory_limit: int = MEMORY_LIMIT,
        train_every: int = TRAIN_EVERY,
    ) -> None:
        if network.input_size != OBSERVATION_SIZE or network.output_size != len(DISCRETE_ACTIONS):
            raise PolicyError(
                f"Network shape {network.input_size}->{network.output_size} does not match "
                f"{OBSERVATION_SIZE}->{len(DISCRETE_ACTIONS)}"
            )
        self._network = network
        self._rng = rng
        self._executor = executor
        self._lock = threading.Lock()
        self._machine = create_policy_state_machine()

        self.epsilon = epsilon
        self.gamma = gamma
        self.epsilon_min = epsilon_min
        self.epsilon_decay = epsilon_decay
        self.learning_rate = learning_rate
        self.batch_size = batch_size
        self.train_every = train_every

        self._memory: Deque[Feedback] = deque(maxlen=memory_limit)
        self._since_replay = 0
        self.training_passes = 0

    @classmethod
    def fresh(cls, rng: np.random.Generator, executor, **kwargs) -> "DQNPolicy":
        return cls(QNetwork.random(rng), rng, executor, **kwargs)

    @property
    def state(self) -> PolicyState:
        return self._machine.state

    @property
    def memory_size(self) -> int:
        return len(self._memory)

    @property
    def network(self) -> QNetwork:
        with self._lock:
            return self._network

    def select_action(self, vector: Sequence[float]) -> Action:
        validate_vector(vector)
        if self._rng.random() <= self.epsilon:
            return Action.from_index(int(self._rng.integers(len(DISCRETE_ACTIONS))))
        q_values = self.network.predict(np.asarray(vector, dtype=float))[0]
        if not np.all(np.isfinite(q_values)):
            raise PolicyError("Q network produced non-finite values")
        return Action.from_index(int(np.argmax(q_values)))

    def ingest_feedback(self, feedback: Feedback) -> Result[None, str]:
        """Store a transition and schedule a replay when one is due.

        Returns:
            Ok(None), or Err when a due replay was rejected because a
            training pass is already in flight
        """
        if feedback.action.index is None:
            return Err(f"{feedback.action.kind.name} actions cannot be learned by a Q network")
        validate_vector(feedback.observation)
        validate_vector(feedback.next_observation)

        self._memory.append(feedback)
        self._since_replay += 1
        if not feedback.urgent and self._since_replay < self.train_every:
            return ok()
        self._since_replay = 0
        return self.request_training()

    def request_training(self) -> Result[None, str]:
        """Schedule one replay pass on the executor."""
        if not self._memory:
            return ok()
        transition = self._machine.try_transition(PolicyState.TRAINING, "replay")
        if transition.is_err():
            return Err("policy is already training")

        # Sample in the caller so the worker never touches the memory deque
        batch = self._sample_batch()
        snapshot = self.network.copy()
        self._executor.submit(self._train, snapshot, batch)
        return ok()

    def _sample_batch(self) -> List[Feedback]:
        if len(self._memory) <= self.batch_size:
            return list(self._memory)
        indices = self._rng.choice(len(self._memory), size=self.batch_size, replace=False)
        return [self._memory[int(i)] for i in indices]

    def _train(self, network: QNetwork, batch: List[Feedback]) -> None:
        try:
            states = np.array([f.observation for f in batch], dtype=float)
            next_states = np.array([f.next_observation for f in batch], dtype=float)
            actions = np.array([f.action.index for f in batch], dtype=int)
            rewards = np.array([f.reward for f in batch], dtype=float)
            terminal = np.array([f.terminal for f in batch], dtype=bool)

            targets = network.predict(states)
            future = network.predict(next_states).max(axis=1)
            targets[np.arange(len(batch)), actions] = np.where(
                terminal, rewards, rewards + self.gamma * future
            )
            loss = network.fit(states, targets, self.learning_rate)

            with self._lock:
                self._network = network
                if self.epsilon > self.epsilon_min:
                    self.epsilon = max(self.epsilon_min, self.epsilon * self.epsilon_decay)
                self.training_passes += 1
            logger.debug("Replay on %d transitions, loss=%.4f", len(batch), loss)
        finally:
            self._machine.try_transition(PolicyState.IDLE, "replay finished")

    def _child_rng(self) -> np.random.Generator:
        return np.random.default_rng(int(self._rng.integers(2**63)))

    def clone_with_mutation(self, rate: float) -> "DQNPolicy":
        """Offspring policy: mutated copy of the network, same exploration rate."""
        if rate < 0:
            raise PolicyError(f"Mutation rate must be non-negative, got {rate}")
        child_rng = self._child_rng()
        return DQNPolicy(
            self.network.mutated(rate, child_rng),
            child_rng,
            self._executor,
            epsilon=self.epsilon,
            gamma=self.gamma,
            epsilon_min=self.epsilon_min,
            epsilon_decay=self.epsilon_decay,
            learning_rate=self.learning_rate,
            batch_size=self.batch_size,
            memory_limit=self._memory.maxlen,
            train_every=self.train_every,
        )

    def crossover(self, other: DecisionPolicy, mutation_rate: float) -> "DQNPolicy":
        if not isinstance(other, DQNPolicy):
            raise PolicyError(f"Cannot cross a DQN policy with {type(other).__name__}")
        child_rng = self._child_rng()
        network = self.network.crossover(other.network, mutation_rate, child_rng)
        return DQNPolicy(
            network,
            child_rng,
            self._executor,
            epsilon=(self.epsilon + other.epsilon) / 2.0,
            gamma=self.gamma,
            epsilon_min=self.epsilon_min,
            epsilon_decay=self.epsilon_decay,
            learning_rate=self.learning_rate,
            batch_size=self.batch_size,
            memory_limit=self._memory.maxlen,
            train_every=self.train_every,
        )

    def export_parameters(self) -> PolicyParameters:
        with self._lock:
            return PolicyParameters(
                kind=POLICY_KIND, weights=self._network.to_arrays(), epsilon=self.epsilon
            )

    def import_parameters(self, params: PolicyParameters) -> None:
        if params.kind != POLICY_KIND:
            raise PolicyError(f"Cannot load {params.kind!r} parameters into a DQN policy")
        network = QNetwork.from_arrays(params.weights)
        if network.shapes() != self.network.shapes():
            raise PolicyError("Stored parameters do not match the network architecture")
        with self._lock:
            self._network = network
            self.epsilon = params.epsilon

    def __repr__(self) -> str:
        return f"DQNPolicy(epsilon={self.epsilon:.3f}, memory={len(self._memory)}, state={self.state.name})"


def policy_from_parameters(
    params: PolicyParameters, rng: np.random.Generator, executor
) -> Optional[DQNPolicy]:
    """Rebuild a DQN policy from exported parameters (None for other kinds)."""
    if params.kind != POLICY_KIND:
        return None
    return DQNPolicy(QNetwork.from_arrays(params.weights), rng, executor, epsilon=params.epsilon)
