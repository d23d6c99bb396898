"""Color trait genetics.

Color is the categorical trait that separates predators from kin: creatures
never hunt their own color. Offspring inherit the parent's color unless a
mutation fires, and overrepresented colors mutate more often, which keeps
the population from collapsing into a single color.

Mutant colors are handed out in windows: up to ``window_size`` consecutive
mutations share one freshly drawn color, so a mutation founds a small
color cluster instead of scattering one-off colors.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from arena.config.creatures import (
    COLOR_MUTATION_CAP,
    COLOR_MUTATION_FACTOR,
    INITIAL_COLORS,
    MUTATION_WINDOW_SIZE,
)


def hue_to_rgb(hue: float, saturation: float = 1.0) -> tuple[int, int, int]:
    """Convert a hue value (0.0-1.0) to an RGB color tuple.

    Uses a simplified HSL-to-RGB conversion with configurable saturation;
    lower saturation blends toward white.

    Args:
        hue: Hue value from 0.0 to 1.0 (wraps around like a color wheel)
        saturation: Color saturation from 0.0 (white) to 1.0 (vivid)

    Returns:
        Tuple of (R, G, B) values, each 0-255
    """
    hue_degrees = (hue % 1.0) * 360

    # 6-sector color wheel
    if hue_degrees < 60:
        r, g, b = 255, int(hue_degrees / 60 * 255), 0
    elif hue_degrees < 120:
        r, g, b = int((120 - hue_degrees) / 60 * 255), 255, 0
    elif hue_degrees < 180:
        r, g, b = 0, 255, int((hue_degrees - 120) / 60 * 255)
    elif hue_degrees < 240:
        r, g, b = 0, int((240 - hue_degrees) / 60 * 255), 255
    elif hue_degrees < 300:
        r, g, b = int((hue_degrees - 240) / 60 * 255), 0, 255
    else:
        r, g, b = 255, 0, int((360 - hue_degrees) / 60 * 255)

    r = int(r * saturation + 255 * (1 - saturation))
    g = int(g * saturation + 255 * (1 - saturation))
    b = int(b * saturation + 255 * (1 - saturation))

    return (r, g, b)


def random_initial_color(rng: random.Random) -> str:
    """Pick one of the founding colors."""
    return rng.choice(INITIAL_COLORS)


def random_mutant_color(rng: random.Random) -> str:
    """Draw a fresh mutant color as a CSS ``rgb(...)`` string."""
    saturation = rng.uniform(0.6, 1.0)
    r, g, b = hue_to_rgb(rng.random(), saturation=saturation)
    return f"rgb({r}, {g}, {b})"


def mutation_probability(
    population_share: float,
    factor: float = COLOR_MUTATION_FACTOR,
    cap: float = COLOR_MUTATION_CAP,
) -> float:
    """Probability that an offspring of a color with this share mutates.

    Monotonically non-decreasing in ``population_share`` and never above ``cap``.
    """
    return min(factor * max(0.0, population_share), cap)


@dataclass
class ColorMutationWindow:
    """Shared mutant color handed to consecutive mutating offspring."""

    window_size: int = MUTATION_WINDOW_SIZE
    current_color: Optional[str] = None
    count: int = 0

    def next_color(self, rng: random.Random) -> str:
        """Return the mutant color for the next mutating offspring."""
        if self.current_color is None or self.count >= self.window_size:
            self.current_color = random_mutant_color(rng)
            self.count = 0
        self.count += 1
        return self.current_color

    def reset(self) -> None:
        self.current_color = None
        self.count = 0
