"""
Independent-period discrete sampler.

A random process that draws from a different discrete distribution in each
period, independent of the state occupied in the previous period.

Mathematical formulation:
    X_t ∈ V_t = {v_{t,1}, …, v_{t,n_t}}          # Values available in period t
    P(X_t = v_{t,i} | X_{t-1}) = p_{t,i}          # No dependence on X_{t-1}
    F_t(i) = Σ_{j ≤ i} p_{t,j}                    # Per-period CDF

Sampling uses the inverse CDF: for u ~ U[0, 1) the draw is the first i with
u ≤ F_t(i), so ties on a CDF boundary go to the lower-indexed value.

Every distinct value across all periods gets a global state id: its 1-based
position in the sorted value map. The same value always has the same id,
whichever period it appears in.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from src.processes.base import Distribution, RandomProcess, TimeArg
from src.processes.errors import (
    DimMismatchError,
    InvalidStateNumError,
    InvalidValueError,
    ProbSumError,
    ValProbMismatchError,
)

logger = logging.getLogger(__name__)

DEFAULT_TOL: float = 1e-6


def _frozen(arr: NDArray) -> NDArray:
    arr.setflags(write=False)
    return arr


class DiscreteSampleProcess(RandomProcess):
    """
    Random process sampling a fixed discrete distribution per period.

    Period 0 is the initial condition. For any t beyond the last listed
    period the final distribution is held; for non-integer t the
    distribution of ⌊t⌋ applies.

    Attributes
    ----------
    n_periods : int
        Number of periods with their own distribution.
    horizon : int
        Last such period (n_periods - 1).
    n_states : int
        Number of distinct values across all periods.
    value_map : NDArray[np.float64]
        Sorted distinct values. State id i corresponds to value_map[i - 1].
    tol : float
        Tolerance for per-period probabilities summing to 1.

    Examples
    --------
    >>> proc = DiscreteSampleProcess([[0, 1, 2, 3], [10, 20]], random_seed=0)
    >>> int(proc.dval2num(10))
    5
    >>> proc.range("all")
    array([ 0., 20.])
    """

    def __init__(
        self,
        values: Sequence[ArrayLike],
        probs: Optional[Sequence[ArrayLike]] = None,
        tol: float = DEFAULT_TOL,
        random_seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Initialize sampler and draw an initial state for t = 0.

        Parameters
        ----------
        values : sequence of array_like
            One 1-D sequence of possible values per period. Periods may
            differ in length.
        probs : sequence of array_like, optional
            Matching probabilities per period. If None, each period is
            uniform over its values.
        tol : float
            Tolerance for each period's probabilities summing to 1.
            Default 1e-6.
        random_seed : int, optional
            Seed for the process's random generator.
        rng : np.random.Generator, optional
            Generator to use instead of seeding one.

        Raises
        ------
        DimMismatchError
            If values is empty, a period is empty or not 1-D, or probs has
            a different number of periods.
        InvalidValueError
            If any value is not finite.
        ValProbMismatchError
            If a period's values and probabilities differ in length.
        ProbSumError
            If a period's probabilities are negative or do not sum to 1.
        """
        super().__init__(random_seed=random_seed, rng=rng)
        self._tol = float(tol)

        value_table = self._validate_values(values)
        prob_table = self._validate_probs(value_table, probs)

        cdf_table = []
        for period, p in enumerate(prob_table):
            cdf = np.cumsum(p)
            if abs(cdf[-1] - 1.0) > self._tol:
                raise ProbSumError(
                    period,
                    f"Probabilities must sum to 1.0 for t={period}. Got {cdf[-1]}",
                )
            cdf_table.append(_frozen(cdf))

        value_map = _frozen(np.unique(np.concatenate(value_table)))
        # Preserve per-period order: index i of a period is its i-th value
        state_id_table = [
            _frozen(np.searchsorted(value_map, v).astype(np.int64) + 1)
            for v in value_table
        ]

        self._value_table: List[NDArray[np.float64]] = value_table
        self._prob_table: List[NDArray[np.float64]] = prob_table
        self._cdf_table: List[NDArray[np.float64]] = cdf_table
        self._state_id_table: List[NDArray[np.int64]] = state_id_table
        self._value_map: NDArray[np.float64] = value_map

        logger.debug(
            "Built %s with %d periods and %d distinct states",
            type(self).__name__, self.n_periods, self.n_states,
        )

        self.reset()

    @staticmethod
    def _validate_values(values: Sequence[ArrayLike]) -> List[NDArray[np.float64]]:
        if isinstance(values, (str, bytes)) or len(values) == 0:
            raise DimMismatchError("values must contain at least one period")

        table = []
        for period, v in enumerate(values):
            try:
                arr = np.atleast_1d(np.array(v, dtype=np.float64))
            except (TypeError, ValueError) as exc:
                raise DimMismatchError(
                    f"Values for t={period} must be a 1-D numeric sequence"
                ) from exc
            if arr.ndim != 1 or arr.size == 0:
                raise DimMismatchError(
                    f"Values for t={period} must be a non-empty 1-D sequence. "
                    f"Got shape {arr.shape}"
                )
            if not np.all(np.isfinite(arr)):
                bad = arr[~np.isfinite(arr)][0]
                raise InvalidValueError(
                    bad, f"Values must be finite. Got {bad} for t={period}"
                )
            table.append(_frozen(arr))
        return table

    @staticmethod
    def _validate_probs(
        value_table: List[NDArray[np.float64]],
        probs: Optional[Sequence[ArrayLike]],
    ) -> List[NDArray[np.float64]]:
        if probs is None:
            return [_frozen(np.full(v.size, 1.0 / v.size)) for v in value_table]

        if len(probs) != len(value_table):
            raise DimMismatchError(
                f"probs must have one entry per period ({len(value_table)}). "
                f"Got {len(probs)}"
            )

        table = []
        for period, (v, p) in enumerate(zip(value_table, probs)):
            try:
                arr = np.atleast_1d(np.array(p, dtype=np.float64))
            except (TypeError, ValueError) as exc:
                raise ValProbMismatchError(period, v.size, -1) from exc
            if arr.ndim != 1 or arr.size != v.size:
                raise ValProbMismatchError(period, v.size, arr.size)
            if not np.all(np.isfinite(arr)) or np.any(arr < 0):
                raise ProbSumError(
                    period,
                    f"Probabilities must be finite and non-negative for t={period}. "
                    f"Got {arr}",
                )
            table.append(_frozen(arr))
        return table

    # ------------------------------------------------------------------
    # Read-only tables
    # ------------------------------------------------------------------
    @property
    def n_periods(self) -> int:
        return len(self._value_table)

    @property
    def horizon(self) -> int:
        return self.n_periods - 1

    @property
    def n_states(self) -> int:
        return len(self._value_map)

    @property
    def tol(self) -> float:
        return self._tol

    @property
    def value_map(self) -> NDArray[np.float64]:
        return self._value_map

    @property
    def value_table(self) -> List[NDArray[np.float64]]:
        return list(self._value_table)

    @property
    def prob_table(self) -> List[NDArray[np.float64]]:
        return list(self._prob_table)

    @property
    def state_id_table(self) -> List[NDArray[np.int64]]:
        return list(self._state_id_table)

    @property
    def cdf_table(self) -> List[NDArray[np.float64]]:
        return list(self._cdf_table)

    # ------------------------------------------------------------------
    # Discrete queries
    # ------------------------------------------------------------------
    def _state_info(self, t: TimeArg) -> Distribution:
        """Values, state ids and probabilities for the period covering t."""
        period = self._period(t)
        return (
            self._value_table[period],
            self._state_id_table[period],
            self._prob_table[period],
        )

    def marginal(self, t: TimeArg = None) -> Distribution:
        return self._state_info(t)

    def dlist(self, t: TimeArg = None) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
        if self._is_all(t):
            return self._value_map, np.arange(1, self.n_states + 1, dtype=np.int64)
        values, state_ids, _ = self._state_info(t)
        return values, state_ids

    def dlistnext(self, state: Any = None, t: TimeArg = None) -> Distribution:
        """
        List next discrete states and probabilities.

        Draws are independent of the previous state, so
        P(s_{t+1} | s_t) = P(s_{t+1}). If given, state is only checked for
        validity at t.

        Parameters
        ----------
        state : int, optional
            State id at time t.
        t : int or float, optional
            Defaults to the current simulation time.

        Returns
        -------
        values, state_ids, probs
            Full distribution for period t+1.
        """
        t_now = self._as_time(t)
        if state is not None:
            self._period(t_now)
            self.validate_state(t_now, state)
        return self._state_info(t_now + 1)

    def dlistprev(self, state: Any = None, t: TimeArg = None) -> Distribution:
        """
        List previous discrete states and probabilities.

        Mirror of ``dlistnext``: P(s_{t-1} | s_t) = P(s_{t-1}).

        Raises
        ------
        InvalidTimeError
            If t-1 is before the first period.
        """
        t_now = self._as_time(t)
        if state is not None:
            self._period(t_now)
            self.validate_state(t_now, state)
        return self._state_info(t_now - 1)

    def range(self, t: TimeArg = None) -> NDArray[np.float64]:
        if self._is_all(t):
            return self._value_map[[0, -1]].copy()
        values = self._state_info(t)[0]
        return np.array([values.min(), values.max()])

    def state_range(self, t: TimeArg = None) -> NDArray[np.int64]:
        """State id range [min, max] at time t ("all" for every period)."""
        if self._is_all(t):
            return np.array([1, self.n_states], dtype=np.int64)
        state_ids = self._state_info(t)[1]
        return np.array([state_ids.min(), state_ids.max()], dtype=np.int64)

    def expected_value(self, t: TimeArg = None) -> float:
        """E[X_t] under the period's distribution."""
        values, _, probs = self._state_info(t)
        return float(values @ probs)

    # ------------------------------------------------------------------
    # Value <-> state id mapping
    # ------------------------------------------------------------------
    def dnum2val(self, state_ids: ArrayLike) -> Any:
        """
        Convert state id(s) to value(s).

        Output has the same shape as the input (a scalar for a scalar).

        Raises
        ------
        InvalidStateNumError
            Naming the first id outside [1, n_states].
        """
        ids = np.asarray(state_ids)
        flat = ids.ravel()
        try:
            as_float = flat.astype(np.float64)
        except (TypeError, ValueError):
            raise InvalidStateNumError(state_ids) from None

        bad = (
            ~np.isfinite(as_float)
            | (as_float != np.floor(as_float))
            | (as_float < 1)
            | (as_float > self.n_states)
        )
        if np.any(bad):
            raise InvalidStateNumError(flat[np.argmax(bad)].item())

        index = as_float.astype(np.int64).reshape(ids.shape) - 1
        return self._value_map[index][()]

    def dval2num(self, values: ArrayLike) -> Any:
        """
        Convert value(s) to state id(s) by exact match.

        Output has the same shape as the input (a scalar for a scalar).

        Raises
        ------
        InvalidValueError
            Naming the first value not in value_map.
        """
        try:
            vals = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError):
            raise InvalidValueError(values) from None

        flat = vals.ravel()
        idx = np.searchsorted(self._value_map, flat)
        found = idx < self.n_states
        found[found] = self._value_map[idx[found]] == flat[found]
        if not np.all(found):
            raise InvalidValueError(flat[np.argmin(found)].item())

        return (idx + 1).astype(np.int64).reshape(vals.shape)[()]

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------
    def sample(
        self,
        n_samples: int = 1,
        t: TimeArg = None,
        state: Any = None,
    ) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
        """
        Draw samples for time t from the period's distribution.

        Parameters
        ----------
        n_samples : int
            Number of independent draws. Default 1.
        t : int or float, optional
            Defaults to the current simulation time. Floored and clipped to
            the horizon.
        state : int, optional
            State at t-1. Only validated, draws do not depend on it.

        Returns
        -------
        values : NDArray[np.float64]
            Shape (n_samples,).
        state_ids : NDArray[np.int64]
            Shape (n_samples,).
        """
        if n_samples < 1:
            raise ValueError(f"n_samples must be positive. Got {n_samples}")

        period = self._period(t)
        if state is not None:
            prev_t = self._as_time(t) - 1
            self._period(prev_t)
            self.validate_state(prev_t, state)

        idx = self._draw_index(self._cdf_table[period], n_samples)
        return self._value_table[period][idx], self._state_id_table[period][idx]

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"DiscreteSampleProcess(n_periods={self.n_periods}, "
            f"n_states={self.n_states}, t={self.t}, "
            f"current_state={self.current_state})"
        )
