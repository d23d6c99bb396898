"""Mitosis: mature creatures split into a litter of offspring.

A parent at or above maturity size divides 90% of its size evenly among
``n`` offspring (``n`` set by the season), placed on a circle around it,
and keeps a third of its pre-split size. Each offspring draws its own color
and its own policy mutation rate.
"""

from __future__ import annotations

import logging
import math
import random
from typing import List, Mapping

from arena.colors import ColorMutationWindow, mutation_probability
from arena.config.creatures import (
    OFFSPRING_SIZE_FRACTION,
    PARENT_SIZE_DIVISOR,
    POLICY_MUTATION_RATE_MAX,
    POLICY_MUTATION_RATE_MIN,
)
from arena.config.simulation_config import ArenaConfig, CreatureConfig
from arena.entities import Creature, new_entity_id
from arena.exceptions import GeneticsError, PolicyError
from arena.math_utils import Vector2, clamp
from arena.policy.factory import PolicyFactory
from arena.policy.interfaces import DecisionPolicy
from arena.seasons import Season

logger = logging.getLogger(__name__)


def is_mature(creature: Creature, maturity_size: float) -> bool:
    return creature.alive and creature.size >= maturity_size


def child_color(
    parent_color: str,
    color_counts: Mapping[str, int],
    population: int,
    rng: random.Random,
    window: ColorMutationWindow,
) -> str:
    """Inherit the parent's color or take the current mutant color."""
    share = color_counts.get(parent_color, 0) / population if population > 0 else 0.0
    if rng.random() < mutation_probability(share):
        return window.next_color(rng)
    return parent_color


def _child_policy(
    parent: Creature, rng: random.Random, factory: PolicyFactory
) -> DecisionPolicy:
    rate = rng.uniform(POLICY_MUTATION_RATE_MIN, POLICY_MUTATION_RATE_MAX)
    if parent.policy is None:
        return factory.create()
    try:
        return parent.policy.clone_with_mutation(rate)
    except PolicyError as exc:
        logger.warning("Could not clone policy of %s, using a fresh one: %s", parent, exc)
        return factory.create()


def reproduce(
    parent: Creature,
    *,
    season: Season,
    color_counts: Mapping[str, int],
    population: int,
    rng: random.Random,
    window: ColorMutationWindow,
    factory: PolicyFactory,
    arena: ArenaConfig,
    creature_config: CreatureConfig,
) -> List[Creature]:
    """Split ``parent`` into a litter and return the offspring.

    ``color_counts`` and ``population`` describe the live population at the
    start of the reproduction pass; they are not updated per birth.

    Raises:
        GeneticsError: If the litter size for the season is not positive
    """
    litter = season.offspring_count(rng)
    if litter <= 0:
        raise GeneticsError(f"Season {season.value} produced a litter of {litter}")

    pre_split_size = parent.size
    offspring_size = pre_split_size * OFFSPRING_SIZE_FRACTION / litter

    offspring: List[Creature] = []
    for _ in range(litter):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        pos = Vector2(
            clamp(parent.pos.x + math.cos(angle) * pre_split_size, 0.0, arena.width),
            clamp(parent.pos.y + math.sin(angle) * pre_split_size, 0.0, arena.height),
        )
        child = Creature(
            id=new_entity_id(rng),
            pos=pos,
            size=offspring_size,
            color=child_color(parent.color, color_counts, population, rng, window),
            energy=creature_config.initial_energy,
            policy=_child_policy(parent, rng, factory),
            min_size=creature_config.min_size,
            speed_multiplier=creature_config.speed_multiplier,
        )
        offspring.append(child)

    parent.set_size(pre_split_size / PARENT_SIZE_DIVISOR)
    parent.reproductions += 1
    logger.debug(
        "%s split into %d offspring of size %.2f in %s",
        parent,
        litter,
        offspring_size,
        season.value,
    )
    return offspring
