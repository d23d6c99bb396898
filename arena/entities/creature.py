"""Creatures: autonomous agents driven by an owned decision policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from arena.config.creatures import (
    INITIAL_ENERGY,
    INITIAL_SIZE,
    MIN_SIZE,
    OLFACTORY_MAX_RANGE,
    OLFACTORY_MIN_RANGE,
    OLFACTORY_SIZE_CEILING,
    SPEED_MULTIPLIER,
)
from arena.math_utils import Vector2, clamp, map_range

if TYPE_CHECKING:
    from arena.actions import Action
    from arena.policy.interfaces import DecisionPolicy
    from arena.sensing import Observation


class DeathCause(Enum):
    SHRUNK = "shrunk"  # Size fell to the minimum
    EXHAUSTED = "exhausted"  # Energy ran out
    EATEN = "eaten"
    CORNERED = "cornered"
    IMMOBILE = "immobile"
    BORDER_DWELL = "border_dwell"
    BORDER = "border"  # Crossed a lethal boundary


@dataclass(eq=False)
class Creature:
    """A creature in the arena.

    Invariants:
        - ``size >= min_size`` at all times; a creature whose size reaches
          ``min_size`` is marked dead and removed at the end of the tick.
        - ``age_counter`` strictly increases while the creature is alive.
        - ``policy`` is owned exclusively by this creature and released
          (set to None) when it dies.

    ``last_observation``/``last_action`` hold the transition started this
    tick; the next tick completes it with a reward and feeds it back to the
    policy. ``last_score`` is the fitness score when that transition began,
    so the reward is the score gained over the tick.
    """

    id: str
    pos: Vector2
    size: float = INITIAL_SIZE
    color: str = "red"
    energy: float = INITIAL_ENERGY
    policy: Optional["DecisionPolicy"] = None
    min_size: float = MIN_SIZE
    speed_multiplier: float = SPEED_MULTIPLIER
    vel: Vector2 = field(default_factory=Vector2)
    acc: Vector2 = field(default_factory=Vector2)

    # Biological counters
    age_counter: int = 0
    time_since_last_meal: int = 0
    food_eaten: int = 0
    prey_eaten: int = 0
    reproductions: int = 0

    # Dwell timers
    corner_timer: int = 0
    immobile_timer: int = 0
    border_timer: int = 0
    touching_border: bool = False

    alive: bool = True
    death_cause: Optional[DeathCause] = None

    last_observation: Optional["Observation"] = None
    last_action: Optional["Action"] = None
    last_score: float = 0.0

    def __post_init__(self) -> None:
        self.size = max(self.size, self.min_size)

    @property
    def olfactory_range(self) -> float:
        """Sensing radius, mapped linearly from size."""
        return clamp(
            map_range(
                self.size,
                self.min_size,
                OLFACTORY_SIZE_CEILING,
                OLFACTORY_MIN_RANGE,
                OLFACTORY_MAX_RANGE,
            ),
            OLFACTORY_MIN_RANGE,
            OLFACTORY_MAX_RANGE,
        )

    @property
    def speed(self) -> float:
        return self.vel.length()

    @property
    def fitness_score(self) -> float:
        """Score under the default fitness weights."""
        from arena.fitness import fitness_score

        return fitness_score(self)

    def set_size(self, size: float) -> None:
        """Assign a new size, floored at ``min_size``."""
        self.size = max(size, self.min_size)

    def feed(self, size_gain: float, energy_gain: float) -> None:
        """Apply the effects of a meal."""
        self.size += size_gain
        self.energy += energy_gain
        self.time_since_last_meal = 0

    def kill(self, cause: DeathCause) -> None:
        """Mark the creature dead; the first recorded cause wins."""
        if not self.alive:
            return
        self.alive = False
        self.death_cause = cause

    def release_policy(self) -> Optional["DecisionPolicy"]:
        policy, self.policy = self.policy, None
        self.last_observation = None
        self.last_action = None
        return policy

    def __repr__(self) -> str:
        return (
            f"Creature(id={self.id[:8]}, size={self.size:.1f}, color={self.color}, "
            f"energy={self.energy:.1f}, age={self.age_counter})"
        )
