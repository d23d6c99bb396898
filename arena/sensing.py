"""Spatial sensing: nearest food, prey and predator within olfactory range.

Every query is a single linear scan over the candidate list; the first
minimum found wins ties, and iteration follows list order, so results are
deterministic for a given world state. At tens of entities this O(n) per
creature per tick is cheaper than maintaining an index.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from arena.config.creatures import INITIAL_ENERGY, OLFACTORY_SIZE_CEILING
from arena.config.simulation_config import ArenaConfig
from arena.entities import Creature, Food, FoodKind
from arena.exceptions import ObservationError

OBSERVATION_SIZE = 12


def _nearest(origin: Creature, candidates: Iterable, max_range: float):
    nearest = None
    range_sq = max_range * max_range
    nearest_dist_sq = float("inf")
    ox = origin.pos.x
    oy = origin.pos.y
    for candidate in candidates:
        dx = candidate.pos.x - ox
        dy = candidate.pos.y - oy
        dist_sq = dx * dx + dy * dy
        # Strict comparison keeps the first minimum on ties
        if dist_sq <= range_sq and dist_sq < nearest_dist_sq:
            nearest = candidate
            nearest_dist_sq = dist_sq
    return nearest


def nearest_food(
    creature: Creature,
    food: Iterable[Food],
    max_range: Optional[float] = None,
    kind: Optional[FoodKind] = None,
) -> Optional[Food]:
    """Closest available food item, optionally restricted to one kind."""
    radius = creature.olfactory_range if max_range is None else max_range
    candidates = (f for f in food if f.available and (kind is None or f.kind is kind))
    return _nearest(creature, candidates, radius)


def nearest_prey(
    creature: Creature, creatures: Iterable[Creature], max_range: Optional[float] = None
) -> Optional[Creature]:
    """Closest live creature of another color that is strictly smaller."""
    radius = creature.olfactory_range if max_range is None else max_range
    candidates = (
        c
        for c in creatures
        if c is not creature and c.alive and c.size < creature.size and c.color != creature.color
    )
    return _nearest(creature, candidates, radius)


def nearest_predator(
    creature: Creature, creatures: Iterable[Creature], max_range: Optional[float] = None
) -> Optional[Creature]:
    """Closest live creature of another color that is strictly larger."""
    radius = creature.olfactory_range if max_range is None else max_range
    candidates = (
        c
        for c in creatures
        if c is not creature and c.alive and c.size > creature.size and c.color != creature.color
    )
    return _nearest(creature, candidates, radius)


@dataclass(frozen=True)
class Observation:
    """What a creature perceives at one tick.

    Offsets point from the creature to the target and are zero when nothing
    of that class is within range.
    """

    food_dx: float
    food_dy: float
    prey_dx: float
    prey_dy: float
    predator_dx: float
    predator_dy: float
    size: float
    energy: float
    dist_left: float
    dist_right: float
    dist_top: float
    dist_bottom: float

    def as_vector(self, arena: ArenaConfig) -> tuple[float, ...]:
        """Normalized 12-element input vector for decision policies."""
        w = float(arena.width)
        h = float(arena.height)
        return (
            self.food_dx / w,
            self.food_dy / h,
            self.prey_dx / w,
            self.prey_dy / h,
            self.predator_dx / w,
            self.predator_dy / h,
            self.size / OLFACTORY_SIZE_CEILING,
            self.energy / (10.0 * INITIAL_ENERGY),
            self.dist_left / w,
            self.dist_right / w,
            self.dist_top / h,
            self.dist_bottom / h,
        )


def sense(
    creature: Creature,
    creatures: Sequence[Creature],
    food: Sequence[Food],
    arena: ArenaConfig,
) -> Observation:
    """Build the observation for ``creature`` from the current world lists."""
    closest_food = nearest_food(creature, food)
    closest_prey = nearest_prey(creature, creatures)
    closest_predator = nearest_predator(creature, creatures)

    def offset(target) -> tuple[float, float]:
        if target is None:
            return 0.0, 0.0
        return target.pos.x - creature.pos.x, target.pos.y - creature.pos.y

    food_dx, food_dy = offset(closest_food)
    prey_dx, prey_dy = offset(closest_prey)
    predator_dx, predator_dy = offset(closest_predator)

    return Observation(
        food_dx=food_dx,
        food_dy=food_dy,
        prey_dx=prey_dx,
        prey_dy=prey_dy,
        predator_dx=predator_dx,
        predator_dy=predator_dy,
        size=creature.size,
        energy=creature.energy,
        dist_left=creature.pos.x,
        dist_right=arena.width - creature.pos.x,
        dist_top=creature.pos.y,
        dist_bottom=arena.height - creature.pos.y,
    )


def validate_vector(vector: Sequence[float], expected_size: int = OBSERVATION_SIZE) -> None:
    """Raise ObservationError if ``vector`` cannot be fed to a policy."""
    if len(vector) != expected_size:
        raise ObservationError(f"Expected {expected_size} inputs, got {len(vector)}")
    for index, value in enumerate(vector):
        if not math.isfinite(value):
            raise ObservationError(f"Input {index} is not finite: {value!r}")
