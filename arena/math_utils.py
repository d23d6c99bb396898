"""Geometry helpers for the arena.

Pure Python helpers: a small ``Vector2`` for positions, velocities and
forces, plus distance, clamping and linear mapping.
"""

from __future__ import annotations

import math


class Vector2:
    """Mutable 2D vector used for positions, velocities and forces."""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self.x: float = float(x)
        self.y: float = float(y)

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Vector2") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return math.sqrt(dx * dx + dy * dy)

    def add_inplace(self, other: "Vector2") -> "Vector2":
        """In-place ``self += other``; returns self."""
        self.x += other.x
        self.y += other.y
        return self

    def update(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def copy(self) -> "Vector2":
        return Vector2(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    def __eq__(self, other: object) -> bool:
        if other.__class__ is not Vector2:
            return False
        return abs(self.x - other.x) < 1e-9 and abs(self.y - other.y) < 1e-9

    def __repr__(self) -> str:
        return f"Vector2({self.x}, {self.y})"


def distance(a: Vector2, b: Vector2) -> float:
    """Euclidean distance between two points."""
    return a.distance_to(b)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def map_range(value: float, start1: float, stop1: float, start2: float, stop2: float) -> float:
    """Linearly map ``value`` from ``[start1, stop1]`` onto ``[start2, stop2]``.

    The result is not clamped; callers clamp when the input can leave the
    source interval.
    """
    if stop1 == start1:
        return start2
    return (value - start1) / (stop1 - start1) * (stop2 - start2) + start2


__all__ = ["Vector2", "clamp", "distance", "map_range"]
