"""Fitness scoring, best-policy bookkeeping and epoch resets.

The tracker remembers the parameters of the best-scoring creature of the
current epoch and of all time. When the population dies out the epoch
manager starts a new generation reseeded from the all-time best.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Iterable, Optional

from arena.config.creatures import INITIAL_ENERGY
from arena.config.simulation_config import FitnessWeights
from arena.entities import Creature, DeathCause
from arena.policy.interfaces import PolicyParameters

if TYPE_CHECKING:
    from arena.world import World

logger = logging.getLogger(__name__)


def fitness_score(
    creature: Creature,
    weights: Optional[FitnessWeights] = None,
    initial_energy: float = INITIAL_ENERGY,
) -> float:
    """Score a creature by how long it lived and how much it ate and bred.

    Prey count ``prey_multiplier`` times as much as plain food.
    """
    w = weights or FitnessWeights()
    score = (
        w.age * creature.age_counter
        + w.food * creature.food_eaten
        + w.prey_multiplier * w.food * creature.prey_eaten
        + w.reproduction * creature.reproductions
    )
    if w.scale_by_energy and initial_energy > 0:
        score *= min(1.0, max(0.0, creature.energy) / initial_energy)
    return score


class FitnessTracker:
    """Best scores, longest lifespan and death counts.

    Attributes:
        epoch_best_score: Best score seen in the current epoch.
        epoch_best_parameters: Policy parameters of that creature.
        historical_best_score: Best score across all epochs.
        historical_best_parameters: Policy parameters used to reseed.
        longest_lifespan: Highest age reached at death.
        longest_lifespan_count: Creatures that died at exactly that age.
        deaths: Death totals per cause.
    """

    def __init__(self, weights: Optional[FitnessWeights] = None, initial_energy: float = INITIAL_ENERGY):
        self.weights = weights or FitnessWeights()
        self.initial_energy = initial_energy
        self.epoch_best_score = 0.0
        self.epoch_best_parameters: Optional[PolicyParameters] = None
        self.historical_best_score = 0.0
        self.historical_best_parameters: Optional[PolicyParameters] = None
        self.longest_lifespan = 0
        self.longest_lifespan_count = 0
        self.deaths: Counter[DeathCause] = Counter()

    def score(self, creature: Creature) -> float:
        return fitness_score(creature, self.weights, self.initial_energy)

    def _consider(self, creature: Creature) -> None:
        if creature.policy is None:
            return
        score = self.score(creature)
        if score <= self.epoch_best_score:
            return
        params = creature.policy.export_parameters()
        self.epoch_best_score = score
        self.epoch_best_parameters = params
        if score > self.historical_best_score:
            self.historical_best_score = score
            self.historical_best_parameters = params
            logger.debug("New historical best score %.2f by %s", score, creature)

    def observe(self, creatures: Iterable[Creature]) -> None:
        """Update the best scores from the live population."""
        for creature in creatures:
            if creature.alive:
                self._consider(creature)

    def record_death(self, creature: Creature) -> None:
        """Book a death; call before the creature's policy is released."""
        self._consider(creature)
        if creature.death_cause is not None:
            self.deaths[creature.death_cause] += 1
        if creature.age_counter > self.longest_lifespan:
            self.longest_lifespan = creature.age_counter
            self.longest_lifespan_count = 1
        elif creature.age_counter == self.longest_lifespan:
            self.longest_lifespan_count += 1

    def start_epoch(self) -> None:
        self.epoch_best_score = 0.0
        self.epoch_best_parameters = None

    def deaths_by_cause(self) -> dict[str, int]:
        return {cause.value: count for cause, count in self.deaths.items()}


class EpochManager:
    """Starts a new generation when the population is extinct."""

    def __init__(self, tracker: FitnessTracker) -> None:
        self.tracker = tracker

    def reset(self, world: "World") -> bool:
        """Reseed ``world`` if it has no live creatures.

        Returns:
            True if a new epoch was started
        """
        state = world.state
        if world.config.initial_population == 0 or any(c.alive for c in state.creatures):
            return False

        state.generation += 1
        best_score = self.tracker.historical_best_score
        self.tracker.start_epoch()
        state.clock.reset()
        state.food.clear()
        state.creatures.clear()
        world.spawn_food(world.config.initial_food)
        world.seed_population(self.tracker.historical_best_parameters)

        logger.info(
            "Population extinct, starting generation %d (historical best %.2f, %s)",
            state.generation,
            best_score,
            "reseeded from best" if self.tracker.historical_best_parameters else "fresh policies",
        )
        return True
