"""The simulated world and its tick.

``World`` is an explicit object: it owns the configuration, the random
sources, the policy factory and all mutable state. Nothing lives in module
globals, so several worlds can run side by side (tests do this).

One call to ``World.step`` advances the world by exactly one tick, in this
order:

    1. clock (season, food respawn)
    2. food drift and aging
    3. creature physics, energy drain and aging
    4. sensing and action selection (completes last tick's transition)
    5. feeding
    6. predation
    7. reproduction (color counts taken once, before the pass)
    8. death marking (fitness bookkeeping, terminal feedback)
    9. compaction of both entity lists
   10. fitness observation
   11. epoch reset if the population is extinct

Entities are never removed mid-pass; they are marked and dropped in the
single compaction step.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from arena.actions import action_to_force
from arena.colors import ColorMutationWindow, random_initial_color
from arena.config.creatures import POLICY_MUTATION_RATE_MAX, POLICY_MUTATION_RATE_MIN
from arena.config.simulation_config import SimulationConfig
from arena.entities import Creature, Food, new_entity_id
from arena.exceptions import GeneticsError, ObservationError, PolicyError
from arena.feeding import resolve_feeding, resolve_predation, submit_event_feedback
from arena.fitness import EpochManager, FitnessTracker
from arena.math_utils import Vector2
from arena.physics import age_creature, apply_force, check_death, drain_energy, integrate, step_food
from arena.policy.factory import PolicyFactory
from arena.policy.interfaces import Feedback, PolicyParameters
from arena.reproduction import is_mature, reproduce
from arena.result import Result
from arena.seasons import WorldClock
from arena.sensing import sense, validate_vector
from arena.snapshot import WorldSnapshot, build_snapshot

logger = logging.getLogger(__name__)

DEATH_REWARD = -1.0


@dataclass
class WorldStats:
    """Running counters since the world was created."""

    ticks: int = 0
    births: int = 0
    deaths: int = 0
    meals: int = 0
    kills: int = 0
    epochs: int = 0
    transient_faults: int = 0
    feedback_skipped: int = 0


@dataclass
class WorldState:
    """All mutable state of one world."""

    creatures: List[Creature] = field(default_factory=list)
    food: List[Food] = field(default_factory=list)
    clock: WorldClock = field(default_factory=WorldClock)
    mutation_window: ColorMutationWindow = field(default_factory=ColorMutationWindow)
    generation: int = 1
    tick: int = 0
    stats: WorldStats = field(default_factory=WorldStats)

    @property
    def season(self):
        return self.clock.season

    @property
    def population(self) -> int:
        return sum(1 for c in self.creatures if c.alive)


class World:
    """A creature arena.

    Args:
        config: Simulation configuration (defaults when None)
        rng: Random source; seeded from ``config.seed`` when None
        populate: Seed the initial population and food right away
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[random.Random] = None,
        populate: bool = True,
    ) -> None:
        self.config = (config or SimulationConfig()).validate()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.policies = PolicyFactory(
            self.rng,
            learning_enabled=self.config.learning_enabled,
            inline_training=self.config.inline_training,
        )
        self.tracker = FitnessTracker(self.config.fitness, self.config.creatures.initial_energy)
        self.epochs = EpochManager(self.tracker)
        self.state = WorldState()

        if populate:
            self.spawn_food(self.config.initial_food)
            self.seed_population()

    # ------------------------------------------------------------------
    # Population management
    # ------------------------------------------------------------------

    def seed_population(
        self, parameters: Optional[PolicyParameters] = None, count: Optional[int] = None
    ) -> List[Creature]:
        """Add a founding population.

        With ``parameters`` every founder gets its own mutated copy of them,
        otherwise a fresh policy.
        """
        n = self.config.initial_population if count is None else count
        cfg = self.config.creatures
        founders = []
        for _ in range(n):
            if parameters is not None:
                rate = self.rng.uniform(POLICY_MUTATION_RATE_MIN, POLICY_MUTATION_RATE_MAX)
                policy = self.policies.from_parameters(parameters, rate)
            else:
                policy = self.policies.create()
            founders.append(
                Creature(
                    id=new_entity_id(self.rng),
                    pos=Vector2(
                        self.rng.uniform(0, self.config.arena.width),
                        self.rng.uniform(0, self.config.arena.height),
                    ),
                    size=cfg.initial_size,
                    color=random_initial_color(self.rng),
                    energy=cfg.initial_energy,
                    policy=policy,
                    min_size=cfg.min_size,
                    speed_multiplier=cfg.speed_multiplier,
                )
            )
        self.state.creatures.extend(founders)
        return founders

    def spawn_food(self, count: int = 1) -> List[Food]:
        items = [
            Food.spawn(
                self.rng,
                self.config.arena,
                lifetime=self.config.food.lifetime_ticks,
                growth_chance=self.config.food.growth_chance,
            )
            for _ in range(count)
        ]
        self.state.food.extend(items)
        return items

    def add_creature(self, creature: Creature) -> Creature:
        """Place an existing creature into the world, giving it a policy if it has none."""
        if creature.policy is None:
            creature.policy = self.policies.create()
        self.state.creatures.append(creature)
        return creature

    def color_counts(self) -> Counter[str]:
        """Live creatures per color."""
        return Counter(c.color for c in self.state.creatures if c.alive)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def step(self) -> int:
        """Advance the world by one tick.

        Returns:
            The new tick number
        """
        state = self.state
        arena = self.config.arena
        state.tick += 1
        state.stats.ticks += 1

        if state.clock.advance():
            self.spawn_food(1)

        for food in state.food:
            step_food(food, self.rng, arena)

        # Offspring born this tick are appended later and skip this pass
        for creature in list(state.creatures):
            if not creature.alive:
                continue
            integrate(creature, arena)
            drain_energy(creature, self.config.creatures.energy_drain_per_speed)
            age_creature(creature, self.config.creatures.starvation_ticks)
            if creature.alive:
                self._decide(creature)

        self._feed()
        self._reproduce()
        self._mark_deaths()

        state.creatures[:] = [c for c in state.creatures if c.alive]
        state.food[:] = [f for f in state.food if f.available]

        self.tracker.observe(state.creatures)

        if self.epochs.reset(self):
            state.stats.epochs += 1
        return state.tick

    def _decide(self, creature: Creature) -> None:
        state = self.state
        arena = self.config.arena
        try:
            observation = sense(creature, state.creatures, state.food, arena)
            vector = observation.as_vector(arena)
            validate_vector(vector)
            self._complete_transition(creature, vector)
            action = creature.policy.select_action(vector)
        except (ObservationError, PolicyError) as exc:
            state.stats.transient_faults += 1
            logger.warning("Decision failed for %s, keeping previous force: %s", creature, exc)
            if creature.last_action is not None:
                apply_force(creature, action_to_force(creature.last_action))
            return

        apply_force(creature, action_to_force(action))
        creature.last_observation = observation
        creature.last_action = action
        creature.last_score = self.tracker.score(creature)

    def _complete_transition(
        self, creature: Creature, next_vector: tuple[float, ...], terminal: bool = False
    ) -> None:
        """Feed the transition started last tick back to the creature's policy."""
        if creature.policy is None or creature.last_observation is None or creature.last_action is None:
            return
        if terminal:
            reward = DEATH_REWARD
        else:
            reward = self.tracker.score(creature) - creature.last_score
        feedback = Feedback(
            observation=creature.last_observation.as_vector(self.config.arena),
            action=creature.last_action,
            reward=reward,
            next_observation=next_vector,
            terminal=terminal,
        )
        self._count_feedback(creature.policy.ingest_feedback(feedback))

    def _count_feedback(self, result: Optional[Result[None, str]]) -> None:
        if result is not None and result.is_err():
            self.state.stats.feedback_skipped += 1
            logger.debug("Feedback skipped: %s", result.error)

    def _report_meal(self, creature: Creature, reward: float) -> None:
        arena = self.config.arena
        try:
            next_vector = sense(creature, self.state.creatures, self.state.food, arena).as_vector(arena)
            self._count_feedback(submit_event_feedback(creature, reward, next_vector, arena))
        except (ObservationError, PolicyError) as exc:
            self.state.stats.transient_faults += 1
            logger.warning("Meal feedback failed for %s: %s", creature, exc)

    def _feed(self) -> None:
        state = self.state
        for creature in state.creatures:
            event = resolve_feeding(creature, state.food)
            if event is not None:
                state.stats.meals += 1
                self._report_meal(creature, event.reward)

        predators = {c.id: c for c in state.creatures}
        for event in resolve_predation(state.creatures):
            state.stats.kills += 1
            self._report_meal(predators[event.predator_id], event.reward)

    def _reproduce(self) -> None:
        state = self.state
        maturity = self.config.creatures.maturity_size
        counts = self.color_counts()
        population = sum(counts.values())
        births: List[Creature] = []
        for creature in state.creatures:
            if not is_mature(creature, maturity):
                continue
            try:
                births.extend(
                    reproduce(
                        creature,
                        season=state.season,
                        color_counts=counts,
                        population=population,
                        rng=self.rng,
                        window=state.mutation_window,
                        factory=self.policies,
                        arena=self.config.arena,
                        creature_config=self.config.creatures,
                    )
                )
            except GeneticsError as exc:
                state.stats.transient_faults += 1
                logger.warning("Reproduction failed for %s: %s", creature, exc)
        state.creatures.extend(births)
        state.stats.births += len(births)

    def _mark_deaths(self) -> None:
        arena = self.config.arena
        for creature in self.state.creatures:
            cause = check_death(creature, arena)
            if cause is None:
                continue
            creature.kill(cause)
            self._bury(creature)

    def _bury(self, creature: Creature) -> None:
        self.tracker.record_death(creature)
        if creature.last_observation is not None:
            self._complete_transition(
                creature, creature.last_observation.as_vector(self.config.arena), terminal=True
            )
        creature.release_policy()
        self.state.stats.deaths += 1
        logger.debug("%s died: %s", creature, creature.death_cause.value)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def snapshot(self) -> WorldSnapshot:
        return build_snapshot(self)

    def close(self) -> None:
        """Release the training executor; in-flight jobs are not waited on."""
        self.policies.shutdown()
