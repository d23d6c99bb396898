"""Tests for mitosis and offspring inheritance."""

import random
from unittest.mock import MagicMock

import pytest

from arena.colors import ColorMutationWindow
from arena.config.simulation_config import ArenaConfig, CreatureConfig
from arena.exceptions import PolicyError
from arena.policy.factory import PolicyFactory
from arena.policy.random_policy import RandomPolicy
from arena.reproduction import child_color, is_mature, reproduce
from arena.seasons import Season


@pytest.fixture
def factory(seeded_rng):
    f = PolicyFactory(seeded_rng, learning_enabled=False, inline_training=True)
    yield f
    f.shutdown()


def _split(parent, season, rng, factory, counts=None, population=1, window=None):
    return reproduce(
        parent,
        season=season,
        color_counts=counts or {parent.color: 1},
        population=population,
        rng=rng,
        window=window or ColorMutationWindow(),
        factory=factory,
        arena=ArenaConfig(),
        creature_config=CreatureConfig(),
    )


class TestMaturity:
    def test_threshold_is_inclusive(self, make_creature):
        assert is_mature(make_creature(size=37.5), 37.5)
        assert not is_mature(make_creature(size=37.4), 37.5)

    def test_dead_creatures_do_not_reproduce(self, make_creature):
        c = make_creature(size=40)
        c.alive = False
        assert not is_mature(c, 37.5)


class TestReproduce:
    def test_spring_litter(self, make_creature, seeded_rng, factory):
        parent = make_creature(x=900, y=400, size=37.5, policy=RandomPolicy(random.Random(1)))
        offspring = _split(parent, Season.SPRING, seeded_rng, factory)
        assert len(offspring) == 5
        for child in offspring:
            assert child.size == pytest.approx(6.75)
            assert child.policy is not None
            assert child.policy is not parent.policy
        assert parent.size == pytest.approx(12.5)
        assert parent.reproductions == 1

    def test_biomass_is_ninety_percent_of_parent(self, make_creature, seeded_rng, factory):
        parent = make_creature(x=900, y=400, size=45.0, policy=RandomPolicy(random.Random(1)))
        offspring = _split(parent, Season.SUMMER, seeded_rng, factory)
        assert len(offspring) == 4
        assert sum(c.size for c in offspring) == pytest.approx(0.9 * 45.0)
        assert parent.size == pytest.approx(15.0)

    def test_winter_and_autumn_litters(self, make_creature, factory):
        rng = random.Random(9)
        winter_parent = make_creature(x=900, y=400, size=40)
        assert len(_split(winter_parent, Season.WINTER, rng, factory)) == 3
        sizes = set()
        for _ in range(30):
            autumn_parent = make_creature(x=900, y=400, size=40)
            sizes.add(len(_split(autumn_parent, Season.AUTUMN, rng, factory)))
        assert sizes <= {3, 4}
        assert len(sizes) == 2

    def test_offspring_placed_around_parent_and_inside_arena(self, make_creature, seeded_rng, factory):
        arena = ArenaConfig()
        parent = make_creature(x=900, y=400, size=37.5)
        for child in _split(parent, Season.SPRING, seeded_rng, factory):
            assert child.pos.distance_to(parent.pos) == pytest.approx(37.5)

        cornered = make_creature(x=5, y=5, size=37.5)
        for child in _split(cornered, Season.SPRING, seeded_rng, factory):
            assert 0 <= child.pos.x <= arena.width
            assert 0 <= child.pos.y <= arena.height

    def test_parent_size_floored_at_minimum(self, make_creature, seeded_rng, factory):
        parent = make_creature(x=900, y=400, size=12.0)
        _split(parent, Season.SPRING, seeded_rng, factory)
        assert parent.size == parent.min_size

    def test_failed_clone_falls_back_to_fresh_policy(self, make_creature, seeded_rng, factory):
        broken = MagicMock()
        broken.clone_with_mutation.side_effect = PolicyError("boom")
        parent = make_creature(x=900, y=400, size=37.5, policy=broken)
        offspring = _split(parent, Season.SPRING, seeded_rng, factory)
        assert len(offspring) == 5
        assert all(isinstance(c.policy, RandomPolicy) for c in offspring)

    def test_clone_receives_rate_in_range(self, make_creature, seeded_rng, factory):
        policy = MagicMock()
        parent = make_creature(x=900, y=400, size=37.5, policy=policy)
        _split(parent, Season.SPRING, seeded_rng, factory)
        assert policy.clone_with_mutation.call_count == 5
        for call in policy.clone_with_mutation.call_args_list:
            rate = call.args[0]
            assert 0.01 <= rate <= 0.06


class TestChildColor:
    def test_rare_color_is_inherited(self):
        rng = random.Random(0)
        window = ColorMutationWindow()
        colors = {child_color("red", {"red": 0}, 100, rng, window) for _ in range(50)}
        assert colors == {"red"}

    def test_dominant_color_mutates_into_shared_window_color(self):
        rng = random.Random(0)
        window = ColorMutationWindow(window_size=10)
        results = [child_color("red", {"red": 100}, 100, rng, window) for _ in range(40)]
        mutants = [c for c in results if c != "red"]
        assert mutants, "a 90% mutation chance should produce mutants"
        assert all(c.startswith("rgb(") for c in mutants)
        # The first window hands the same color to up to ten mutants
        assert len(set(mutants[:10])) == 1

    def test_empty_population_never_mutates(self):
        rng = random.Random(0)
        window = ColorMutationWindow()
        assert child_color("blue", {}, 0, rng, window) == "blue"
