"""Small feed-forward Q network on numpy.

Architecture:
    Input layer: 12 neurons (normalized observation)
    Hidden layers: 16 and 8 neurons, ReLU
    Output layer: 4 neurons, linear (one Q value per discrete action)

A network is treated as a value: training works on a copy and the caller
swaps the trained copy in, so readers never see a half-updated network.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from arena.exceptions import PolicyError

LAYER_SIZES: Tuple[int, ...] = (12, 16, 8, 4)
WEIGHT_LIMIT = 5.0
GRADIENT_CLIP = 1.0


class QNetwork:
    """Multi-layer perceptron with ReLU hidden layers and a linear head."""

    def __init__(self, weights: List[np.ndarray], biases: List[np.ndarray]) -> None:
        if len(weights) != len(biases):
            raise PolicyError("weights and biases must have the same number of layers")
        for w, b in zip(weights, biases):
            if w.ndim != 2 or b.ndim != 1 or w.shape[1] != b.shape[0]:
                raise PolicyError(f"Layer shape mismatch: weights {w.shape}, bias {b.shape}")
        self.weights = weights
        self.biases = biases

    @classmethod
    def random(cls, rng: np.random.Generator, layer_sizes: Sequence[int] = LAYER_SIZES) -> "QNetwork":
        """He-initialised network."""
        weights = []
        biases = []
        for fan_in, fan_out in zip(layer_sizes[:-1], layer_sizes[1:]):
            weights.append(rng.normal(0.0, np.sqrt(2.0 / fan_in), size=(fan_in, fan_out)))
            biases.append(np.zeros(fan_out))
        return cls(weights, biases)

    @property
    def input_size(self) -> int:
        return self.weights[0].shape[0]

    @property
    def output_size(self) -> int:
        return self.weights[-1].shape[1]

    def copy(self) -> "QNetwork":
        return QNetwork([w.copy() for w in self.weights], [b.copy() for b in self.biases])

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        """Q values for a batch (or a single vector) of inputs."""
        activations, _ = self._forward(np.atleast_2d(np.asarray(inputs, dtype=float)))
        return activations[-1]

    def _forward(self, x: np.ndarray):
        activations = [x]
        pre_activations = []
        last = len(self.weights) - 1
        for index, (w, b) in enumerate(zip(self.weights, self.biases)):
            z = activations[-1] @ w + b
            pre_activations.append(z)
            activations.append(z if index == last else np.maximum(z, 0.0))
        return activations, pre_activations

    def fit(self, inputs: np.ndarray, targets: np.ndarray, learning_rate: float) -> float:
        """One gradient step on mean squared error, in place.

        Returns:
            The loss before the update
        """
        x = np.atleast_2d(np.asarray(inputs, dtype=float))
        y = np.atleast_2d(np.asarray(targets, dtype=float))
        activations, pre_activations = self._forward(x)
        output = activations[-1]
        loss = float(np.mean((output - y) ** 2))

        delta = 2.0 * (output - y) / y.size
        for index in range(len(self.weights) - 1, -1, -1):
            grad_w = np.clip(activations[index].T @ delta, -GRADIENT_CLIP, GRADIENT_CLIP)
            grad_b = np.clip(delta.sum(axis=0), -GRADIENT_CLIP, GRADIENT_CLIP)
            if index > 0:
                delta = (delta @ self.weights[index].T) * (pre_activations[index - 1] > 0)
            self.weights[index] -= learning_rate * grad_w
            self.biases[index] -= learning_rate * grad_b
        return loss

    def mutated(self, rate: float, rng: np.random.Generator) -> "QNetwork":
        """Copy with gaussian noise of standard deviation ``rate`` on every parameter."""
        weights = [
            np.clip(w + rng.normal(0.0, rate, size=w.shape), -WEIGHT_LIMIT, WEIGHT_LIMIT)
            for w in self.weights
        ]
        biases = [
            np.clip(b + rng.normal(0.0, rate, size=b.shape), -WEIGHT_LIMIT, WEIGHT_LIMIT)
            for b in self.biases
        ]
        return QNetwork(weights, biases)

    def crossover(self, other: "QNetwork", mutation_rate: float, rng: np.random.Generator) -> "QNetwork":
        """Average two parents' parameters, then mutate."""
        if self.shapes() != other.shapes():
            raise PolicyError("Cannot cross networks with different architectures")
        child = QNetwork(
            [(a + b) / 2.0 for a, b in zip(self.weights, other.weights)],
            [(a + b) / 2.0 for a, b in zip(self.biases, other.biases)],
        )
        return child.mutated(mutation_rate, rng)

    def shapes(self) -> List[tuple]:
        return [w.shape for w in self.weights] + [b.shape for b in self.biases]

    def to_arrays(self) -> tuple[np.ndarray, ...]:
        """Flatten into (w0, b0, w1, b1, ...) copies."""
        arrays: list[np.ndarray] = []
        for w, b in zip(self.weights, self.biases):
            arrays.extend((w.copy(), b.copy()))
        return tuple(arrays)

    @classmethod
    def from_arrays(cls, arrays: Sequence[np.ndarray]) -> "QNetwork":
        if len(arrays) % 2 != 0 or not arrays:
            raise PolicyError(f"Expected an even, non-zero number of arrays, got {len(arrays)}")
        weights = [np.array(a, dtype=float) for a in arrays[0::2]]
        biases = [np.array(a, dtype=float) for a in arrays[1::2]]
        return cls(weights, biases)
