"""Simulation core for the creature arena.

Everything in this package is independent of the web server: the world
state, entity lifecycle, sensing, feeding, reproduction, fitness tracking
and the decision-policy capability used by creatures.
"""

__version__ = "1.0.0"
