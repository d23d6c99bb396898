"""Ok/Err results for failures the caller is expected to handle.

A training request that reaches a busy policy is not exceptional: the world
counts it and moves on. Such operations return ``Ok``/``Err`` instead of
raising.

    result = policy.ingest_feedback(feedback)
    match result:
        case Err(error):
            logger.debug("Feedback skipped: %s", error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    error = None

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    value = None

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"unwrap() on an error result: {self.error}")

    def unwrap_or(self, default):
        return default


Result = Union[Ok[T], Err[E]]


def ok() -> Ok[None]:
    """Success with nothing to return."""
    return Ok(None)


def err(message: str) -> Err[str]:
    return Err(message)
