"""Per-tick movement, energy and aging rules for creatures and food.

Functions here mutate one entity at a time and never remove anything:
deaths are recorded on the creature (``Creature.kill``) and the world
compacts its lists once at the end of the tick.
"""

from __future__ import annotations

import random
from typing import Optional

from arena.config.creatures import (
    ENERGY_DRAIN_PER_SPEED,
    FORCE_SMOOTHING,
    STARVATION_SIZE_LOSS,
    STARVATION_TICKS,
)
from arena.config.simulation_config import ArenaConfig, BorderPolicy
from arena.entities import Creature, DeathCause, Food
from arena.math_utils import Vector2, clamp


def apply_force(creature: Creature, force: Vector2, smoothing: float = FORCE_SMOOTHING) -> None:
    """Accumulate a smoothed steering force for the next integration."""
    creature.acc.x += force.x * smoothing
    creature.acc.y += force.y * smoothing


def _resolve_axis(pos: float, vel: float, limit: float, policy: BorderPolicy):
    """Apply the border policy along one axis.

    Returns:
        (position, velocity, touching, crossed)
    """
    if 0.0 < pos < limit:
        return pos, vel, False, False
    if policy is BorderPolicy.LETHAL:
        crossed = pos < 0.0 or pos > limit
        return pos, vel, True, crossed
    pos = clamp(pos, 0.0, limit)
    vel = -vel if policy is BorderPolicy.REFLECT else 0.0
    return pos, vel, True, False


def integrate(creature: Creature, arena: ArenaConfig) -> None:
    """Advance position by one tick and update the dwell timers.

    Under a lethal border policy a creature that ends the tick outside the
    arena is killed on the spot.
    """
    max_speed = creature.speed_multiplier * arena.frame_rate_multiplier
    vel = creature.vel
    vel.x = clamp(vel.x + creature.acc.x, -max_speed, max_speed)
    vel.y = clamp(vel.y + creature.acc.y, -max_speed, max_speed)
    creature.acc.update(0.0, 0.0)

    old_x = creature.pos.x
    old_y = creature.pos.y
    x = old_x + vel.x
    y = old_y + vel.y

    x, vel.x, touch_x, crossed_x = _resolve_axis(x, vel.x, arena.width, arena.border_policy)
    y, vel.y, touch_y, crossed_y = _resolve_axis(y, vel.y, arena.height, arena.border_policy)
    creature.pos.update(x, y)
    creature.touching_border = touch_x or touch_y

    if crossed_x or crossed_y:
        creature.kill(DeathCause.BORDER)
        return

    t = arena.corner_threshold
    in_corner = (x < t or x > arena.width - t) and (y < t or y > arena.height - t)
    creature.corner_timer = creature.corner_timer + 1 if in_corner else 0

    dx = x - old_x
    dy = y - old_y
    moved_sq = dx * dx + dy * dy
    still = moved_sq < arena.immobile_distance * arena.immobile_distance
    creature.immobile_timer = creature.immobile_timer + 1 if still else 0

    creature.border_timer = creature.border_timer + 1 if creature.touching_border else 0


def drain_energy(creature: Creature, drain_per_speed: float = ENERGY_DRAIN_PER_SPEED) -> None:
    creature.energy -= creature.speed * drain_per_speed


def age_creature(creature: Creature, starvation_ticks: int = STARVATION_TICKS) -> None:
    """Advance the age and hunger counters; a long fast costs one size unit."""
    creature.age_counter += 1
    creature.time_since_last_meal += 1
    if creature.time_since_last_meal >= starvation_ticks:
        creature.set_size(creature.size - STARVATION_SIZE_LOSS)
        creature.time_since_last_meal = 0


def check_death(creature: Creature, arena: ArenaConfig) -> Optional[DeathCause]:
    """The reason this creature should die now, or None."""
    if not creature.alive:
        return creature.death_cause
    if creature.size <= creature.min_size:
        return DeathCause.SHRUNK
    if creature.energy <= 0:
        return DeathCause.EXHAUSTED
    if arena.border_policy is BorderPolicy.LETHAL:
        return None
    if creature.corner_timer >= arena.corner_timeout_ticks:
        return DeathCause.CORNERED
    if creature.immobile_timer >= arena.immobile_timeout_ticks:
        return DeathCause.IMMOBILE
    if creature.border_timer >= arena.border_timeout_ticks:
        return DeathCause.BORDER_DWELL
    return None


def step_food(food: Food, rng: random.Random, arena: ArenaConfig) -> bool:
    """Drift and age one food item; returns True once it has expired."""
    food.drift(rng, arena)
    return food.age()
