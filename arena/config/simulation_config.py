"""Simulation configuration dataclasses.

Groups the tuned constants into dataclasses that a ``World`` receives at
construction. ``load_config_from_env`` builds a config from process
environment variables; configuration errors are the only fatal errors in
the system, so both it and ``validate`` raise ``ConfigurationError``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from arena.config import creatures as creature_constants
from arena.config import food as food_constants
from arena.config import world as world_constants
from arena.exceptions import ConfigurationError


class BorderPolicy(Enum):
    """What happens when a creature reaches the arena boundary."""

    REFLECT = "reflect"  # Clamp inside, bounce the velocity component
    CLAMP = "clamp"  # Clamp inside, zero the velocity component
    LETHAL = "lethal"  # Crossing the boundary kills the creature


@dataclass
class ArenaConfig:
    """Arena geometry and boundary behavior."""

    width: float = world_constants.ARENA_WIDTH
    height: float = world_constants.ARENA_HEIGHT
    border_policy: BorderPolicy = BorderPolicy.REFLECT
    frame_rate_multiplier: float = world_constants.FRAME_RATE_MULTIPLIER
    corner_threshold: float = world_constants.CORNER_THRESHOLD
    corner_timeout_ticks: int = world_constants.CORNER_TIMEOUT_TICKS
    immobile_distance: float = world_constants.IMMOBILE_DISTANCE
    immobile_timeout_ticks: int = world_constants.IMMOBILE_TIMEOUT_TICKS
    border_timeout_ticks: int = world_constants.BORDER_TIMEOUT_TICKS


@dataclass
class CreatureConfig:
    """Creature biology parameters."""

    initial_size: float = creature_constants.INITIAL_SIZE
    min_size: float = creature_constants.MIN_SIZE
    maturity_size: float = creature_constants.MATURITY_SIZE
    initial_energy: float = creature_constants.INITIAL_ENERGY
    speed_multiplier: float = creature_constants.SPEED_MULTIPLIER
    energy_drain_per_speed: float = creature_constants.ENERGY_DRAIN_PER_SPEED
    starvation_ticks: int = creature_constants.STARVATION_TICKS


@dataclass
class FoodConfig:
    """Food nutrition and lifetime parameters."""

    lifetime_ticks: int = food_constants.FOOD_LIFETIME_TICKS
    growth_chance: float = food_constants.GROWTH_FOOD_CHANCE


@dataclass
class FitnessWeights:
    """Weights of the fitness score used to pick reseed candidates."""

    age: float = creature_constants.FITNESS_AGE_WEIGHT
    food: float = creature_constants.FITNESS_FOOD_WEIGHT
    prey_multiplier: float = creature_constants.FITNESS_PREY_MULTIPLIER
    reproduction: float = creature_constants.FITNESS_REPRODUCTION_WEIGHT
    scale_by_energy: bool = creature_constants.FITNESS_SCALE_BY_ENERGY


@dataclass
class SimulationConfig:
    """Top-level configuration for one simulated world.

    Attributes:
        tick_period_ms: Fixed period of the stepper loop.
        initial_population: Creatures seeded at every epoch start.
        initial_food: Food items seeded at every epoch start.
        snapshot_interval: Build and publish a snapshot every N ticks.
        seed: Optional random seed; a fixed seed reproduces a run exactly
            when learning is disabled.
        learning_enabled: Use learning policies (False = random actions).
        inline_training: Run policy training synchronously in the caller
            instead of on the training executor.
    """

    tick_period_ms: float = world_constants.TICK_PERIOD_MS
    initial_population: int = world_constants.INITIAL_POPULATION
    initial_food: int = world_constants.INITIAL_FOOD
    snapshot_interval: int = world_constants.SNAPSHOT_INTERVAL
    seed: Optional[int] = None
    learning_enabled: bool = True
    inline_training: bool = False
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    creatures: CreatureConfig = field(default_factory=CreatureConfig)
    food: FoodConfig = field(default_factory=FoodConfig)
    fitness: FitnessWeights = field(default_factory=FitnessWeights)

    @property
    def tick_period(self) -> float:
        """Tick period in seconds."""
        return self.tick_period_ms / 1000.0

    def validate(self) -> "SimulationConfig":
        """Check ranges, raising ConfigurationError on the first problem."""
        if self.tick_period_ms <= 0:
            raise ConfigurationError(f"tick_period_ms must be positive, got {self.tick_period_ms}")
        if self.initial_population < 0:
            raise ConfigurationError(
                f"initial_population must be non-negative, got {self.initial_population}"
            )
        if self.initial_food < 0:
            raise ConfigurationError(f"initial_food must be non-negative, got {self.initial_food}")
        if self.snapshot_interval < 1:
            raise ConfigurationError(
                f"snapshot_interval must be at least 1, got {self.snapshot_interval}"
            )
        if self.arena.width <= 0 or self.arena.height <= 0:
            raise ConfigurationError(
                f"Arena dimensions must be positive, got {self.arena.width}x{self.arena.height}"
            )
        if self.creatures.min_size <= 0:
            raise ConfigurationError("min_size must be positive")
        if self.creatures.maturity_size <= self.creatures.min_size:
            raise ConfigurationError("maturity_size must exceed min_size")
        if not 0.0 <= self.food.growth_chance <= 1.0:
            raise ConfigurationError(
                f"growth_chance must be within [0, 1], got {self.food.growth_chance}"
            )
        return self


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> SimulationConfig:
    """Build a validated SimulationConfig from environment variables.

    Recognised variables: ``ARENA_TICK_MS``, ``ARENA_POPULATION``,
    ``ARENA_INITIAL_FOOD``, ``ARENA_SNAPSHOT_INTERVAL``, ``ARENA_SEED``,
    ``ARENA_BORDER_POLICY`` (reflect|clamp|lethal) and ``ARENA_LEARNING``.
    """
    env = os.environ if environ is None else environ

    raw_policy = env.get("ARENA_BORDER_POLICY", BorderPolicy.REFLECT.value).strip().lower()
    try:
        border_policy = BorderPolicy(raw_policy)
    except ValueError:
        valid = "|".join(p.value for p in BorderPolicy)
        raise ConfigurationError(
            f"ARENA_BORDER_POLICY must be one of {valid}, got {raw_policy!r}"
        ) from None

    raw_seed = env.get("ARENA_SEED")
    seed = _env_int(env, "ARENA_SEED", 0) if raw_seed else None

    learning = env.get("ARENA_LEARNING", "true").strip().lower() in ("1", "true", "yes", "on")

    config = SimulationConfig(
        tick_period_ms=_env_float(env, "ARENA_TICK_MS", world_constants.TICK_PERIOD_MS),
        initial_population=_env_int(env, "ARENA_POPULATION", world_constants.INITIAL_POPULATION),
        initial_food=_env_int(env, "ARENA_INITIAL_FOOD", world_constants.INITIAL_FOOD),
        snapshot_interval=_env_int(
            env, "ARENA_SNAPSHOT_INTERVAL", world_constants.SNAPSHOT_INTERVAL
        ),
        seed=seed,
        learning_enabled=learning,
        arena=ArenaConfig(border_policy=border_policy),
    )
    return config.validate()
