"""
Result containers for simulation calls.

Stepping or simulating to a time before the first period is routine in DP
code (e.g. looking one epoch back from t=0), so those cases are reported
through the result objects here rather than raised.
"""

from typing import Optional
import numpy as np
from numpy.typing import NDArray


# Fill value for state ids that were not simulated. Valid ids are >= 1.
INVALID_STATE: int = -1


class StepResult:
    """
    Outcome of a single ``step`` call.

    Attributes
    ----------
    value : float or None
        Value at the new time. None if the step was rejected.
    state_id : int or None
        State id at the new time. None if the step was rejected.
    t : int
        Cursor time after the call (unchanged if rejected).
    simulated : bool
        False if the requested time was before the first period and the
        cursor was left untouched.
    """

    def __init__(
        self,
        value: Optional[float],
        state_id: Optional[int],
        t: int,
        simulated: bool = True,
    ) -> None:
        self.value = value
        self.state_id = state_id
        self.t = t
        self.simulated = simulated

    @classmethod
    def rejected(cls, t: int) -> "StepResult":
        """Result for a step that would move before the first period."""
        return cls(value=None, state_id=None, t=t, simulated=False)

    def __bool__(self) -> bool:
        return self.simulated

    def __repr__(self) -> str:
        """String representation."""
        if not self.simulated:
            return f"StepResult(not simulated, t={self.t})"
        return (
            f"StepResult(value={self.value}, state_id={self.state_id}, "
            f"t={self.t})"
        )


class SimResult:
    """
    One simulated trajectory, aligned with the requested time list.

    Attributes
    ----------
    times : NDArray[np.float64]
        Requested times, in the caller's order.
    values : NDArray[np.float64]
        Simulated value per requested time. NaN where not simulated.
    state_ids : NDArray[np.int64]
        Simulated state id per requested time. INVALID_STATE where not
        simulated.
    valid : NDArray[np.bool_]
        True where the time was simulated.
    """

    def __init__(
        self,
        times: NDArray[np.float64],
        values: NDArray[np.float64],
        state_ids: NDArray[np.int64],
        valid: NDArray[np.bool_],
    ) -> None:
        self.times = times
        self.values = values
        self.state_ids = state_ids
        self.valid = valid

    @property
    def n_simulated(self) -> int:
        """Number of requested times that were simulated."""
        return int(np.sum(self.valid))

    def __len__(self) -> int:
        return len(self.times)

    def __iter__(self):
        # Allows ``values, state_ids = proc.sim(...)``
        yield self.values
        yield self.state_ids

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"SimResult(n_times={len(self.times)}, "
            f"n_simulated={self.n_simulated})"
        )
