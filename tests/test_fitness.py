"""Tests for fitness scoring, best tracking and epoch resets."""

import random

import pytest

from arena.config.simulation_config import FitnessWeights, SimulationConfig
from arena.entities import DeathCause
from arena.fitness import FitnessTracker, fitness_score
from arena.policy.random_policy import RandomPolicy
from arena.seasons import Season
from arena.world import World


class TestFitnessScore:
    def test_weighted_sum(self, make_creature):
        c = make_creature()
        c.age_counter = 100
        c.food_eaten = 3
        c.prey_eaten = 2
        c.reproductions = 1
        assert fitness_score(c) == pytest.approx(1.0 + 3 + 4 + 3)

    def test_energy_scaling(self, make_creature):
        c = make_creature(energy=50)
        c.food_eaten = 4
        weights = FitnessWeights(scale_by_energy=True)
        assert fitness_score(c, weights, initial_energy=100) == pytest.approx(2.0)

    def test_creature_property_uses_defaults(self, make_creature):
        c = make_creature()
        c.food_eaten = 2
        assert c.fitness_score == pytest.approx(2.0)


class TestFitnessTracker:
    def test_observe_tracks_epoch_and_historical_best(self, make_creature):
        tracker = FitnessTracker()
        c = make_creature(policy=RandomPolicy(random.Random(0)))
        c.food_eaten = 5
        tracker.observe([c])
        assert tracker.epoch_best_score == 5
        assert tracker.historical_best_score == 5
        assert tracker.historical_best_parameters.kind == "random"

        tracker.start_epoch()
        assert tracker.epoch_best_score == 0
        assert tracker.epoch_best_parameters is None
        assert tracker.historical_best_score == 5

    def test_record_death_books_cause_and_lifespan(self, make_creature):
        tracker = FitnessTracker()
        a = make_creature(policy=RandomPolicy(random.Random(0)))
        b = make_creature(policy=RandomPolicy(random.Random(1)))
        for creature, cause in ((a, DeathCause.EATEN), (b, DeathCause.EXHAUSTED)):
            creature.age_counter = 300
            creature.kill(cause)
            tracker.record_death(creature)
        assert tracker.longest_lifespan == 300
        assert tracker.longest_lifespan_count == 2
        assert tracker.deaths_by_cause() == {"eaten": 1, "exhausted": 1}

    def test_creatures_without_policy_are_not_candidates(self, make_creature):
        tracker = FitnessTracker()
        c = make_creature()
        c.food_eaten = 10
        tracker.observe([c])
        assert tracker.historical_best_parameters is None


class TestEpochReset:
    def _world(self):
        config = SimulationConfig(
            initial_population=6, initial_food=4, seed=11, learning_enabled=False, inline_training=True
        )
        return World(config)

    def test_no_reset_while_population_alive(self):
        world = self._world()
        assert not world.epochs.reset(world)
        assert world.state.generation == 1
        world.close()

    def test_reset_reseeds_once(self):
        world = self._world()
        world.state.clock.time_counter = 5000
        world.state.clock.season = Season.WINTER
        for creature in world.state.creatures:
            creature.kill(DeathCause.EXHAUSTED)
        world.state.creatures.clear()

        assert world.epochs.reset(world)
        assert world.state.generation == 2
        assert world.state.population == 6
        assert len(world.state.food) == 4
        assert world.state.clock.time_counter == 0
        assert world.state.season is Season.SPRING
        assert world.tracker.epoch_best_score == 0

        # A second call right after is a no-op
        assert not world.epochs.reset(world)
        assert world.state.generation == 2
        world.close()

    def test_reseed_from_historical_best(self):
        config = SimulationConfig(
            initial_population=4, initial_food=0, seed=3, learning_enabled=True, inline_training=True
        )
        world = World(config)
        best = world.state.creatures[0]
        best.food_eaten = 10
        world.tracker.observe(world.state.creatures)
        params = world.tracker.historical_best_parameters
        assert params is not None and params.kind == "dqn"

        world.state.creatures.clear()
        assert world.epochs.reset(world)
        assert world.state.population == 4
        for creature in world.state.creatures:
            exported = creature.policy.export_parameters()
            assert exported.kind == "dqn"
            # Each founder is a mutated copy, not the stored arrays themselves
            assert exported.weights[0] is not params.weights[0]
        world.close()
