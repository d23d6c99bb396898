"""Decision policies: the capability that maps sensed state to actions."""

from arena.policy.dqn import DQNPolicy
from arena.policy.factory import PolicyFactory
from arena.policy.interfaces import DecisionPolicy, Feedback, PolicyParameters
from arena.policy.random_policy import RandomPolicy
from arena.policy.training import InlineTrainingExecutor, TrainingExecutor

__all__ = [
    "DQNPolicy",
    "DecisionPolicy",
    "Feedback",
    "InlineTrainingExecutor",
    "PolicyFactory",
    "PolicyParameters",
    "RandomPolicy",
    "TrainingExecutor",
]
