"""Food items: drifting resources that expire after a fixed lifetime."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from arena.config.food import (
    FOOD_DRIFT_JITTER,
    FOOD_INITIAL_SPEED,
    FOOD_LIFETIME_TICKS,
    FOOD_MAX_SPEED,
    GROWTH_FOOD_CHANCE,
    GROWTH_FOOD_ENERGY_GAIN,
    GROWTH_FOOD_SIZE_GAIN,
    NORMAL_FOOD_ENERGY_GAIN,
    NORMAL_FOOD_SIZE_GAIN,
)
from arena.config.simulation_config import ArenaConfig
from arena.entities.ids import new_entity_id
from arena.math_utils import Vector2, clamp


class FoodKind(Enum):
    NORMAL = "normal"
    GROWTH = "growth"

    @property
    def size_gain(self) -> float:
        return GROWTH_FOOD_SIZE_GAIN if self is FoodKind.GROWTH else NORMAL_FOOD_SIZE_GAIN

    @property
    def energy_gain(self) -> float:
        return GROWTH_FOOD_ENERGY_GAIN if self is FoodKind.GROWTH else NORMAL_FOOD_ENERGY_GAIN


@dataclass(eq=False)
class Food:
    """A food item.

    Lifetime only ever decreases; the item is removed once it reaches zero
    or once a creature consumes it.
    """

    id: str
    pos: Vector2
    vel: Vector2
    kind: FoodKind = FoodKind.NORMAL
    lifetime: int = FOOD_LIFETIME_TICKS
    consumed: bool = False

    @classmethod
    def spawn(
        cls,
        rng: random.Random,
        arena: ArenaConfig,
        lifetime: int = FOOD_LIFETIME_TICKS,
        growth_chance: float = GROWTH_FOOD_CHANCE,
    ) -> "Food":
        """Create a food item at a uniformly random position."""
        return cls(
            id=new_entity_id(rng),
            pos=Vector2(rng.uniform(0, arena.width), rng.uniform(0, arena.height)),
            vel=Vector2(
                rng.uniform(-FOOD_INITIAL_SPEED, FOOD_INITIAL_SPEED),
                rng.uniform(-FOOD_INITIAL_SPEED, FOOD_INITIAL_SPEED),
            ),
            kind=FoodKind.GROWTH if rng.random() < growth_chance else FoodKind.NORMAL,
            lifetime=lifetime,
        )

    def drift(self, rng: random.Random, arena: ArenaConfig) -> None:
        """Integrate one tick of random-walk motion, reflecting at the walls."""
        self.pos.x += self.vel.x
        self.pos.y += self.vel.y
        self.vel.x = clamp(
            self.vel.x + rng.uniform(-FOOD_DRIFT_JITTER, FOOD_DRIFT_JITTER),
            -FOOD_MAX_SPEED,
            FOOD_MAX_SPEED,
        )
        self.vel.y = clamp(
            self.vel.y + rng.uniform(-FOOD_DRIFT_JITTER, FOOD_DRIFT_JITTER),
            -FOOD_MAX_SPEED,
            FOOD_MAX_SPEED,
        )

        if self.pos.x < 0 or self.pos.x > arena.width:
            self.vel.x = -self.vel.x
            self.pos.x = clamp(self.pos.x, 0, arena.width)
        if self.pos.y < 0 or self.pos.y > arena.height:
            self.vel.y = -self.vel.y
            self.pos.y = clamp(self.pos.y, 0, arena.height)

    def age(self) -> bool:
        """Decrement lifetime; returns True once the item has expired."""
        self.lifetime -= 1
        return self.lifetime <= 0

    @property
    def available(self) -> bool:
        return not self.consumed and self.lifetime > 0
