"""
Abstract random process for dynamic programming.

A random process here is a discrete-time stochastic process that a DP solver
can both *plan* with (enumerate reachable states and their probabilities) and
*simulate* (draw samples, move a simulation clock forward and back).

Time convention:
    t ∈ {0, 1, 2, …}                      # period index, t = 0 is the initial condition
    t > horizon  →  distribution at horizon   # zero-order hold
    t ∉ ℤ        →  distribution at ⌊t⌋        # zero-order hold

Subclasses implement a single primitive,

    dlistnext(state, t) = {(s', P(s_{t+1} = s' | s_t = state))}

and inherit sampling, simulation, stepping, range and state-validation
behaviour built on top of it. Variants whose tables make a shortcut cheap
(e.g. a precomputed CDF) are free to override the derived operations.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from src.processes.errors import InvalidStateError, InvalidTimeError
from src.processes.results import INVALID_STATE, SimResult, StepResult

logger = logging.getLogger(__name__)

# (values, state_ids, probabilities) for one period
Distribution = Tuple[NDArray[np.float64], NDArray[np.int64], NDArray[np.float64]]
TimeArg = Union[int, float, str, None]


class RandomProcess(ABC):
    """
    Discrete-time random process with a simulation cursor.

    State identifiers are integers. Variants that track raw values separately
    from ids (see DiscreteSampleProcess) override ``dnum2val``/``dval2num``;
    by default a state id *is* its value.

    Attributes
    ----------
    t_min : int
        First valid period. All processes in this package start at 0.
    t : int
        Current simulation time (read-only, see ``reset``/``step``/``sim``).
    current_state : int
        State at the current simulation time (read-only).
    horizon : float
        Largest period with an explicitly specified distribution.
    """

    t_min: int = 0

    def __init__(
        self,
        random_seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Initialize process.

        Parameters
        ----------
        random_seed : int, optional
            Seed for the process's own random generator.
        rng : np.random.Generator, optional
            Generator to use instead of creating one. Takes precedence over
            random_seed.
        """
        self._rng = rng if rng is not None else np.random.default_rng(random_seed)
        self._t: int = self.t_min
        self._current_state: Any = None

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------
    @property
    def t(self) -> int:
        """Current simulation time."""
        return self._t

    @property
    def current_state(self) -> Any:
        """State at the current simulation time."""
        return self._current_state

    @property
    def horizon(self) -> float:
        """Largest period with its own distribution. Unbounded by default."""
        return math.inf

    def reseed(self, random_seed: Optional[int] = None) -> None:
        """Replace the random generator with a freshly seeded one."""
        self._rng = np.random.default_rng(random_seed)

    # ------------------------------------------------------------------
    # Primitive
    # ------------------------------------------------------------------
    @abstractmethod
    def dlistnext(self, state: Any, t: TimeArg = None) -> Distribution:
        """
        List next discrete states and their conditional probabilities.

        Parameters
        ----------
        state : int or None
            State at time t. None requests the unconditional distribution
            at t+1; in that case t = t_min - 1 yields the initial
            distribution.
        t : int or float, optional
            Time of ``state``. Defaults to the current simulation time.

        Returns
        -------
        values : NDArray[np.float64]
            Values of the reachable states at t+1.
        state_ids : NDArray[np.int64]
            Their state ids.
        probs : NDArray[np.float64]
            P(s_{t+1} | s_t = state), sums to 1.

        Raises
        ------
        InvalidStateError
            If state is not valid at t.
        InvalidTimeError
            If t is outside the representable range.
        """

    # ------------------------------------------------------------------
    # Time helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _is_all(t: TimeArg) -> bool:
        return isinstance(t, str) and t.lower() == "all"

    def _as_time(self, t: TimeArg) -> float:
        """Convert a time argument to float, defaulting to the cursor."""
        if t is None:
            return float(self._t)
        try:
            return float(t)
        except (TypeError, ValueError):
            raise InvalidTimeError(
                t, f"Time must be numeric or 'all'. Got {t!r}"
            ) from None

    def _period(self, t: TimeArg) -> int:
        """
        Period index whose distribution applies at time t.

        Floors non-integer times and clips times beyond the horizon.

        Raises
        ------
        InvalidTimeError
            If t is before t_min (or NaN).
        """
        t_float = self._as_time(t)
        if np.isnan(t_float) or t_float < self.t_min:
            raise InvalidTimeError(
                t,
                f"Only t>={self.t_min} valid for {type(self).__name__}. Got t={t}",
            )
        t_float = min(t_float, self.horizon)
        if math.isinf(t_float):
            raise InvalidTimeError(t, f"Time must be finite. Got t={t}")
        return int(math.floor(t_float))

    def _draw_index(self, cdf: NDArray[np.float64], n_samples: int) -> NDArray[np.int64]:
        """Inverse-CDF draw: first index i such that u <= cdf[i]."""
        u = self._rng.random(n_samples)
        idx = np.searchsorted(cdf, u, side="left")
        # cdf[-1] may fall short of 1 by up to the tolerance
        return np.minimum(idx, len(cdf) - 1)

    # ------------------------------------------------------------------
    # Derived discrete queries
    # ------------------------------------------------------------------
    def marginal(self, t: TimeArg = None) -> Distribution:
        """Unconditional distribution at time t (default: current time)."""
        period = self._period(t)
        return self.dlistnext(None, period - 1)

    def dlist(self, t: TimeArg = None) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
        """
        List possible discrete states at time t.

        Parameters
        ----------
        t : int, float or "all", optional
            Time to list. Defaults to the current simulation time. "all"
            returns the deduplicated union of states across every period.

        Returns
        -------
        values : NDArray[np.float64]
        state_ids : NDArray[np.int64]
        """
        if not self._is_all(t):
            values, state_ids, _ = self.marginal(t)
            return values, state_ids

        if math.isinf(self.horizon):
            raise InvalidTimeError(
                t, "dlist('all') requires a process with a finite horizon"
            )
        all_values, all_ids = [], []
        for period in range(self.t_min, int(self.horizon) + 1):
            values, state_ids, _ = self.marginal(period)
            all_values.append(values)
            all_ids.append(state_ids)
        state_ids, first = np.unique(np.concatenate(all_ids), return_index=True)
        return np.concatenate(all_values)[first], state_ids

    def as_array(self) -> Distribution:
        """``dlistnext`` for the current state and time."""
        return self.dlistnext(self._current_state, self._t)

    def range(self, t: TimeArg = None) -> NDArray[np.float64]:
        """
        Value range [min, max] at time t.

        Parameters
        ----------
        t : int, float or "all", optional
            Defaults to the current simulation time. "all" gives the range
            across every period.
        """
        values, _ = self.dlist(t)
        return np.array([values.min(), values.max()])

    def check_state(self, t: TimeArg, state: Any) -> bool:
        """True if state is one of the valid states at time t."""
        if state is None:
            return False
        try:
            _, state_ids = self.dlist(t)
        except InvalidTimeError:
            return False
        return bool(np.any(state_ids == state))

    def validate_state(self, t: TimeArg, state: Any) -> None:
        """
        Assert that state is valid at time t.

        Raises
        ------
        InvalidStateError
            If ``check_state(t, state)`` is False.
        """
        if not self.check_state(t, state):
            raise InvalidStateError(state, t)

    def dnum2val(self, state_ids: ArrayLike) -> Any:
        """Convert state id(s) to value(s). Identity by default."""
        return np.asarray(state_ids).astype(np.float64)[()]

    def dval2num(self, values: ArrayLike) -> Any:
        """Convert value(s) to state id(s). Identity by default."""
        return np.asarray(values).astype(np.int64)[()]

    # ------------------------------------------------------------------
    # Sampling and simulation
    # ------------------------------------------------------------------
    def sample(
        self,
        n_samples: int = 1,
        t: TimeArg = None,
        state: Any = None,
    ) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
        """
        Draw samples of the state at time t.

        Does not move the simulation cursor.

        Parameters
        ----------
        n_samples : int
            Number of independent draws. Default 1.
        t : int or float, optional
            Time to sample. Defaults to the current simulation time.
        state : int, optional
            State at t-1 to condition on. If None, draws from the
            unconditional distribution at t.

        Returns
        -------
        values : NDArray[np.float64]
            Shape (n_samples,).
        state_ids : NDArray[np.int64]
            Shape (n_samples,).
        """
        if n_samples < 1:
            raise ValueError(f"n_samples must be positive. Got {n_samples}")

        if state is None:
            values, state_ids, probs = self.marginal(t)
        else:
            prev_t = self._as_time(t) - 1
            values, state_ids, probs = self.dlistnext(state, prev_t)

        idx = self._draw_index(np.cumsum(probs), n_samples)
        return values[idx], state_ids[idx]

    def _draw(self, period: int, prev_state: Any, prev_period: Optional[int]) -> Tuple[float, Any]:
        """Single draw at period, conditional on prev_state if it is one period back."""
        if prev_state is not None and prev_period is not None and period - prev_period == 1:
            values, state_ids = self.sample(1, period, state=prev_state)
        else:
            values, state_ids = self.sample(1, period)
        return values[0].item(), state_ids[0].item()

    def reset(self, initial_state: Any = None) -> None:
        """
        Reset the simulation to t = t_min.

        Parameters
        ----------
        initial_state : int, optional
            State to start from. If None, a state is drawn from the initial
            distribution.

        Raises
        ------
        InvalidStateError
            If initial_state is not valid at t_min.
        """
        if initial_state is not None:
            self.validate_state(self.t_min, initial_state)
            self._current_state = initial_state
        else:
            _, state_ids = self.sample(1, self.t_min)
            self._current_state = state_ids[0].item()
        self._t = self.t_min
        logger.debug("%s reset to state %s", type(self).__name__, self._current_state)

    def step(self, delta_t: float = 1) -> StepResult:
        """
        Simulate forward or backward by delta_t.

        The cursor only changes when the step crosses into a different
        period. Stepping forward by exactly one period draws conditionally
        on the current state; any other jump draws from the unconditional
        distribution at the new time.

        Parameters
        ----------
        delta_t : float
            Time increment (may be negative or fractional). Default 1.

        Returns
        -------
        StepResult
            ``simulated`` is False (and the cursor untouched) if the new
            time would be before t_min.
        """
        new_t = self._t + delta_t
        if not new_t >= self.t_min:
            logger.debug(
                "Rejected step to t=%s (before t=%d)", new_t, self.t_min
            )
            return StepResult.rejected(self._t)
        if math.isinf(new_t):
            raise InvalidTimeError(new_t, f"Cannot step by delta_t={delta_t}")

        new_period = int(math.floor(new_t))
        if new_period == self._t:
            value = self.dnum2val(self._current_state)
            return StepResult(float(value), self._current_state, self._t)

        value, state = self._draw(new_period, self._current_state, self._t)
        self._t = new_period
        self._current_state = state
        return StepResult(value, state, new_period)

    def dsim(self, t_list: ArrayLike, initial_state: Any = None) -> SimResult:
        """
        Simulate one trajectory at a list of discrete times.

        Times may be unsorted and contain duplicates. Distinct times are
        simulated once each in increasing order, so duplicates share a draw
        and the result does not depend on the order of t_list. Times before
        t_min (or non-finite) are marked as not simulated. Non-integer times
        are floored.

        After the call the cursor sits at the largest simulated time.

        Parameters
        ----------
        t_list : array_like
            Requested times, any shape.
        initial_state : int, optional
            State at t_min. If given, the process is reset to it first and
            the trajectory starts from it.

        Returns
        -------
        SimResult
            Values and state ids with the same shape as t_list.

        Raises
        ------
        InvalidStateError
            If initial_state is not valid at t_min.
        """
        times = np.asarray(t_list, dtype=np.float64)
        flat = times.ravel()
        valid = np.isfinite(flat) & (flat >= self.t_min)

        values = np.full(flat.shape, np.nan)
        state_ids = np.full(flat.shape, INVALID_STATE, dtype=np.int64)

        if initial_state is not None:
            self.reset(initial_state)

        n_invalid = int(np.sum(~valid))
        if n_invalid:
            logger.warning(
                "%d of %d requested times are before t=%d or non-finite; "
                "returning them as not simulated",
                n_invalid, flat.size, self.t_min,
            )

        if np.any(valid):
            periods, sample_map = np.unique(
                np.floor(flat[valid]).astype(np.int64), return_inverse=True
            )

            if initial_state is not None:
                prev_state, prev_period = initial_state, self.t_min
            else:
                prev_state, prev_period = None, None

            v_list = np.empty(len(periods))
            s_list = np.empty(len(periods), dtype=np.int64)
            for idx, period in enumerate(periods.tolist()):
                if initial_state is not None and period == self.t_min:
                    value, state = float(self.dnum2val(initial_state)), initial_state
                else:
                    value, state = self._draw(period, prev_state, prev_period)
                v_list[idx] = value
                s_list[idx] = state
                prev_state, prev_period = state, period

            self._t = periods[-1].item()
            self._current_state = s_list[-1].item()

            values[valid] = v_list[sample_map.ravel()]
            state_ids[valid] = s_list[sample_map.ravel()]

            logger.debug(
                "Simulated %d distinct periods, cursor now at t=%d",
                len(periods), self._t,
            )

        return SimResult(
            times=times,
            values=values.reshape(times.shape),
            state_ids=state_ids.reshape(times.shape),
            valid=valid.reshape(times.shape),
        )

    def sim(self, t_list: ArrayLike, initial_state: Any = None) -> SimResult:
        """
        Simulate one trajectory at (possibly continuous) times.

        Times are rounded down to the nearest period (zero-order hold) and
        passed to ``dsim``. See ``dsim`` for ordering and cursor semantics.
        """
        return self.dsim(np.floor(np.asarray(t_list, dtype=np.float64)), initial_state)

    def current(self) -> Tuple[float, Any, int]:
        """Current (value, state_id, t) of the simulation."""
        return float(self.dnum2val(self._current_state)), self._current_state, self._t

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"{type(self).__name__}(t={self._t}, "
            f"current_state={self._current_state})"
        )
