"""Typed failures raised by the engine."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    PRECONDITION_FAILED = "precondition_failed"
    INFEASIBLE = "infeasible"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    STATE_CORRUPTION = "state_corruption"


class ActionError(Exception):
    """An intent that cannot be carried out. The world is left untouched."""

    kind: ErrorKind = ErrorKind.PRECONDITION_FAILED


class InvalidArgument(ActionError):
    kind = ErrorKind.INVALID_ARGUMENT


class PreconditionFailed(ActionError):
    kind = ErrorKind.PRECONDITION_FAILED


class Infeasible(ActionError):
    kind = ErrorKind.INFEASIBLE


class ResourceExhausted(ActionError):
    kind = ErrorKind.RESOURCE_EXHAUSTED


class StateCorruption(Exception):
    """A saved snapshot failed validation and must not be loaded."""

    kind = ErrorKind.STATE_CORRUPTION

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []
