"""Tests for the Result type and the policy training state machine."""

import pytest

from arena.result import Err, Ok, err, ok
from arena.state_machine import PolicyState, create_policy_state_machine


class TestResult:
    def test_ok(self):
        result = Ok(3)
        assert result.is_ok() and not result.is_err()
        assert result.unwrap() == 3
        assert result.unwrap_or(5) == 3
        assert result.error is None

    def test_err(self):
        result = err("busy")
        assert result.is_err()
        assert result.unwrap_or(5) == 5
        assert result.value is None
        with pytest.raises(ValueError, match="busy"):
            result.unwrap()

    def test_pattern_matching(self):
        match ok():
            case Ok(value):
                assert value is None
            case Err():
                pytest.fail("expected Ok")


class TestPolicyStateMachine:
    def test_starts_idle(self):
        assert create_policy_state_machine().state is PolicyState.IDLE

    def test_training_cycle(self):
        machine = create_policy_state_machine(history_limit=10)
        assert machine.try_transition(PolicyState.TRAINING).is_ok()
        assert machine.try_transition(PolicyState.IDLE).is_ok()
        assert [t.to_state for t in machine.history] == [PolicyState.TRAINING, PolicyState.IDLE]

    def test_second_training_request_is_rejected(self):
        machine = create_policy_state_machine()
        machine.transition(PolicyState.TRAINING)
        result = machine.try_transition(PolicyState.TRAINING)
        assert result.is_err()
        assert "TRAINING -> TRAINING" in result.error
        assert machine.state is PolicyState.TRAINING

    def test_transition_raises_on_invalid(self):
        machine = create_policy_state_machine()
        with pytest.raises(ValueError):
            machine.transition(PolicyState.IDLE)
