"""Pytest configuration and fixtures for creature arena tests."""

import random

import pytest

from arena.config.simulation_config import ArenaConfig, BorderPolicy, SimulationConfig
from arena.entities import Creature
from arena.math_utils import Vector2
from arena.world import World


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def arena_config():
    return ArenaConfig()


@pytest.fixture
def small_config():
    """Deterministic config: random policies, inline training, fixed seed."""
    return SimulationConfig(
        initial_population=20,
        initial_food=50,
        seed=1234,
        learning_enabled=False,
        inline_training=True,
    )


@pytest.fixture
def world(small_config):
    w = World(small_config)
    yield w
    w.close()


@pytest.fixture
def empty_world():
    """A world with no creatures or food; tests place entities by hand."""
    config = SimulationConfig(
        initial_population=0,
        initial_food=0,
        seed=7,
        learning_enabled=False,
        inline_training=True,
        arena=ArenaConfig(border_policy=BorderPolicy.REFLECT),
    )
    w = World(config, populate=False)
    yield w
    w.close()


@pytest.fixture
def make_creature():
    """Factory for creatures with sensible defaults."""
    counter = {"n": 0}

    def _make(x=100.0, y=100.0, size=11.0, color="red", energy=100.0, **kwargs):
        counter["n"] += 1
        return Creature(
            id=kwargs.pop("id", f"creature-{counter['n']}"),
            pos=Vector2(x, y),
            size=size,
            color=color,
            energy=energy,
            **kwargs,
        )

    return _make
