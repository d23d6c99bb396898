"""Tests for arena.colors."""

import random
import re

import pytest

from arena.colors import (
    ColorMutationWindow,
    hue_to_rgb,
    mutation_probability,
    random_initial_color,
    random_mutant_color,
)
from arena.config.creatures import INITIAL_COLORS


class TestHueToRgb:
    """Tests for the hue_to_rgb color conversion function."""

    def test_values_in_valid_range(self):
        """All RGB values should be between 0 and 255."""
        for hue in [0.0, 0.1, 0.25, 0.5, 0.75, 0.9, 1.0]:
            r, g, b = hue_to_rgb(hue)
            assert 0 <= r <= 255, f"Red out of range for hue={hue}"
            assert 0 <= g <= 255, f"Green out of range for hue={hue}"
            assert 0 <= b <= 255, f"Blue out of range for hue={hue}"

    def test_full_saturation_red(self):
        assert hue_to_rgb(0.0, saturation=1.0) == (255, 0, 0)

    def test_zero_saturation_gives_white(self):
        assert hue_to_rgb(0.5, saturation=0.0) == (255, 255, 255)

    def test_hue_wraps(self):
        assert hue_to_rgb(1.25) == hue_to_rgb(0.25)


class TestMutationProbability:
    def test_monotonic_in_share(self):
        shares = [i / 20 for i in range(21)]
        probabilities = [mutation_probability(s) for s in shares]
        assert probabilities == sorted(probabilities)

    def test_capped(self):
        assert mutation_probability(1.0) == pytest.approx(0.9)
        assert mutation_probability(50.0) == pytest.approx(0.9)

    def test_zero_share_never_mutates(self):
        assert mutation_probability(0.0) == 0.0


class TestColorDraws:
    def test_initial_colors(self):
        rng = random.Random(1)
        assert {random_initial_color(rng) for _ in range(100)} == set(INITIAL_COLORS)

    def test_mutant_color_format(self):
        color = random_mutant_color(random.Random(2))
        match = re.fullmatch(r"rgb\((\d+), (\d+), (\d+)\)", color)
        assert match is not None
        assert all(0 <= int(v) <= 255 for v in match.groups())


class TestColorMutationWindow:
    def test_window_shares_color_then_rolls_over(self):
        rng = random.Random(3)
        window = ColorMutationWindow(window_size=3)
        first = [window.next_color(rng) for _ in range(3)]
        fourth = window.next_color(rng)
        assert len(set(first)) == 1
        assert window.count == 1
        assert fourth == window.current_color

    def test_reset(self):
        window = ColorMutationWindow()
        window.next_color(random.Random(4))
        window.reset()
        assert window.current_color is None
        assert window.count == 0
