"""Creature Arena exception hierarchy.

Centralised base classes so bare ``except Exception`` blocks can be
replaced with narrower catches and failures become easier to diagnose.
"""


class ArenaError(Exception):
    """Root of all arena domain exceptions."""


class SimulationError(ArenaError):
    """Errors during simulation execution (world step, entities)."""


class EntityError(SimulationError):
    """An entity-level failure (energy, lifecycle, movement)."""


class ObservationError(SimulationError):
    """A sensed-state vector was malformed (wrong length, non-finite values)."""


class PolicyError(SimulationError):
    """Decision policy failure (prediction, training, cloning)."""


class PolicyBusyError(PolicyError):
    """A training request reached a policy that is already training."""


class GeneticsError(SimulationError):
    """Reproduction or color-mutation failure."""


class TransportError(ArenaError):
    """Errors while delivering snapshots to observers."""


class ConfigurationError(ArenaError):
    """Invalid or missing configuration."""
