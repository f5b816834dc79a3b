"""
Error categories for random processes.

Every error is a ``ValueError`` so callers that only care about "bad input"
can keep catching that, while DP code that probes boundary conditions can
distinguish the categories below.
"""

from typing import Any, Optional


class ProcessError(ValueError):
    """Base class for all random process errors."""


class InvalidTimeError(ProcessError):
    """Time argument outside the representable domain."""

    def __init__(self, t: Any, message: Optional[str] = None) -> None:
        self.t = t
        super().__init__(message or f"Invalid time t={t}")


class InvalidStateError(ProcessError):
    """State is not a member of the valid state set at the given time."""

    def __init__(self, state: Any, t: Any) -> None:
        self.state = state
        self.t = t
        super().__init__(f"State {state} is not valid at time {t}")


class InvalidStateNumError(ProcessError):
    """State id outside the global value map."""

    def __init__(self, state_id: Any) -> None:
        self.state_id = state_id
        super().__init__(
            f"Attempt to find value for invalid state num: {state_id}"
        )


class InvalidValueError(ProcessError):
    """Raw value not present in the global value map."""

    def __init__(self, value: Any, message: Optional[str] = None) -> None:
        self.value = value
        super().__init__(
            message or f"Attempt to find state num for invalid value: {value}"
        )


class ProbSumError(ProcessError):
    """Probability vector for a period is negative or does not sum to 1."""

    def __init__(self, period: int, message: str) -> None:
        self.period = period
        super().__init__(message)


class ValProbMismatchError(ProcessError):
    """Value and probability vectors for a period differ in length."""

    def __init__(self, period: int, n_values: int, n_probs: int) -> None:
        self.period = period
        super().__init__(
            f"Value & probability vectors must have equal size for t={period}. "
            f"Got {n_values} values and {n_probs} probabilities"
        )


class DimMismatchError(ProcessError):
    """Malformed input shape (construction tables, data batches, ensembles)."""


class WrongNumDimError(ProcessError):
    """Point or value dimension does not match what an approximator expects."""


class NoDataError(ProcessError):
    """Approximation requested before any data was added."""
