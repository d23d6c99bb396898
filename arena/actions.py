"""Movement actions chosen by decision policies.

``Action`` is a closed tagged variant: an ``ActionKind`` plus an optional
force payload for continuous steering. Discrete kinds map onto the indices
used by Q-learning policies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from arena.math_utils import Vector2


class ActionKind(Enum):
    RIGHT = "right"
    LEFT = "left"
    DOWN = "down"
    UP = "up"
    STEER = "steer"  # Continuous force carried in the payload
    REST = "rest"  # No force this tick


# Order matters: index i is output neuron i of a Q network
DISCRETE_ACTIONS: tuple[ActionKind, ...] = (
    ActionKind.RIGHT,
    ActionKind.LEFT,
    ActionKind.DOWN,
    ActionKind.UP,
)


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    force: Optional[tuple[float, float]] = None

    def __post_init__(self) -> None:
        if self.kind is ActionKind.STEER and self.force is None:
            raise ValueError("STEER actions need a force payload")

    @classmethod
    def steer(cls, fx: float, fy: float) -> "Action":
        return cls(ActionKind.STEER, (float(fx), float(fy)))

    @classmethod
    def from_index(cls, index: int) -> "Action":
        """Build the discrete action for a Q-network output index."""
        return cls(DISCRETE_ACTIONS[index])

    @property
    def index(self) -> Optional[int]:
        """Q-network output index, or None for non-discrete actions."""
        try:
            return DISCRETE_ACTIONS.index(self.kind)
        except ValueError:
            return None


REST = Action(ActionKind.REST)


def action_to_force(action: Action) -> Vector2:
    """Translate an action into the raw force it applies (before smoothing)."""
    match action.kind:
        case ActionKind.RIGHT:
            return Vector2(1.0, 0.0)
        case ActionKind.LEFT:
            return Vector2(-1.0, 0.0)
        case ActionKind.DOWN:
            return Vector2(0.0, 1.0)
        case ActionKind.UP:
            return Vector2(0.0, -1.0)
        case ActionKind.STEER:
            fx, fy = action.force
            return Vector2(fx, fy)
        case ActionKind.REST:
            return Vector2(0.0, 0.0)
