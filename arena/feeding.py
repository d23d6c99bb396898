"""Feeding and predation resolution.

Both passes mark instead of removing: eaten food is flagged ``consumed``
and eaten creatures are killed with ``DeathCause.EATEN``. The world drops
marked entities in its single compaction at the end of the tick, so no list
is mutated while it is being iterated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from arena.config.creatures import PREY_ENERGY_PER_SIZE, PREY_SIZE_TRANSFER
from arena.config.simulation_config import ArenaConfig
from arena.entities import Creature, DeathCause, Food, FoodKind
from arena.policy.interfaces import Feedback
from arena.result import Result

logger = logging.getLogger(__name__)

# Energy is scaled down so one meal's energy counts about as much as its size
ENERGY_REWARD_SCALE = 100.0


@dataclass(frozen=True)
class FeedingEvent:
    creature_id: str
    food_id: str
    kind: FoodKind
    size_gain: float
    energy_gain: float

    @property
    def reward(self) -> float:
        return self.size_gain + self.energy_gain / ENERGY_REWARD_SCALE


@dataclass(frozen=True)
class PredationEvent:
    predator_id: str
    prey_id: str
    size_gain: float
    energy_gain: float

    @property
    def reward(self) -> float:
        return self.size_gain + self.energy_gain / ENERGY_REWARD_SCALE


def resolve_feeding(creature: Creature, food_items: Sequence[Food]) -> Optional[FeedingEvent]:
    """Let ``creature`` eat at most one food item in reach.

    Scans from the end of the list and takes the first available item whose
    distance is strictly less than the creature's size.
    """
    if not creature.alive:
        return None
    cx = creature.pos.x
    cy = creature.pos.y
    reach_sq = creature.size * creature.size
    for food in reversed(food_items):
        if not food.available:
            continue
        dx = food.pos.x - cx
        dy = food.pos.y - cy
        if dx * dx + dy * dy < reach_sq:
            size_gain = food.kind.size_gain
            energy_gain = food.kind.energy_gain
            creature.feed(size_gain, energy_gain)
            creature.food_eaten += 1
            food.consumed = True
            return FeedingEvent(creature.id, food.id, food.kind, size_gain, energy_gain)
    return None


def resolve_predation(creatures: Sequence[Creature]) -> List[PredationEvent]:
    """One predation pass over the live population.

    Attackers are visited from the end of the list; each scans potential
    victims from the end as well and eats the first one in reach that is
    strictly smaller and of a different color. An attacker eats at most once
    per tick, and a creature eaten earlier in the pass can neither attack nor
    be eaten again.
    """
    events: List[PredationEvent] = []
    for attacker in reversed(creatures):
        if not attacker.alive:
            continue
        reach_sq = attacker.size * attacker.size
        for victim in reversed(creatures):
            if victim is attacker or not victim.alive:
                continue
            if victim.size >= attacker.size or victim.color == attacker.color:
                continue
            dx = victim.pos.x - attacker.pos.x
            dy = victim.pos.y - attacker.pos.y
            if dx * dx + dy * dy >= reach_sq:
                continue

            size_gain = victim.size * PREY_SIZE_TRANSFER
            energy_gain = victim.size * PREY_ENERGY_PER_SIZE
            victim.kill(DeathCause.EATEN)
            attacker.feed(size_gain, energy_gain)
            attacker.prey_eaten += 1
            events.append(PredationEvent(attacker.id, victim.id, size_gain, energy_gain))
            logger.debug("%s ate %s", attacker, victim)
            break
    return events


def submit_event_feedback(
    creature: Creature, reward: float, next_vector: tuple[float, ...], arena: ArenaConfig
) -> Optional[Result[None, str]]:
    """Report a meal to the creature's policy as an urgent transition.

    Returns:
        The policy's answer, or None when there was no transition to report
    """
    if creature.policy is None or creature.last_observation is None or creature.last_action is None:
        return None
    feedback = Feedback(
        observation=creature.last_observation.as_vector(arena),
        action=creature.last_action,
        reward=reward,
        next_observation=next_vector,
        urgent=True,
    )
    return creature.policy.ingest_feedback(feedback)
