"""Tests for the action variant and its force mapping."""

import pytest

from arena.actions import DISCRETE_ACTIONS, REST, Action, ActionKind, action_to_force


class TestAction:
    def test_discrete_indices_round_trip(self):
        for index in range(len(DISCRETE_ACTIONS)):
            assert Action.from_index(index).index == index

    def test_non_discrete_actions_have_no_index(self):
        assert REST.index is None
        assert Action.steer(0.5, -0.5).index is None

    def test_steer_requires_payload(self):
        with pytest.raises(ValueError):
            Action(ActionKind.STEER)

    def test_actions_are_values(self):
        assert Action.from_index(0) == Action(ActionKind.RIGHT)
        assert hash(Action.steer(1, 2)) == hash(Action.steer(1.0, 2.0))


class TestActionToForce:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ActionKind.RIGHT, (1.0, 0.0)),
            (ActionKind.LEFT, (-1.0, 0.0)),
            (ActionKind.DOWN, (0.0, 1.0)),
            (ActionKind.UP, (0.0, -1.0)),
            (ActionKind.REST, (0.0, 0.0)),
        ],
    )
    def test_fixed_forces(self, kind, expected):
        force = action_to_force(Action(kind))
        assert (force.x, force.y) == expected

    def test_steer_uses_payload(self):
        force = action_to_force(Action.steer(0.3, -0.7))
        assert force.x == pytest.approx(0.3)
        assert force.y == pytest.approx(-0.7)
