"""
Abstract function approximation for approximate dynamic programming.

A DP loop feeds observed (point, value) pairs into an approximator with
``update`` and queries it with ``approx``. The approximation itself is
rebuilt lazily: new points are buffered and only folded into the stored set,
and the internal representation refreshed, on the next ``approx`` call.

    points  x_i ∈ ℝ^d,  values  y_i ∈ ℝ^k
    approx(x) ≈ f(x)  built from {(x_i, y_i)}

Subclasses implement ``_build_func`` (refresh internal representation from
stored + buffered points) and ``_do_approx`` (evaluate at query points).
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from src.processes.errors import DimMismatchError, NoDataError, WrongNumDimError

logger = logging.getLogger(__name__)


class FunctionApproximator(ABC):
    """
    Base class for function approximators.

    Attributes
    ----------
    name : str
        Optional label for the approximation's usage.
    pt_dim_names : list of str
        Optional name for each point dimension.
    min_pt_dim, max_pt_dim : int or float
        Allowed point dimensionality for a given approximator class.
    n_raw_pts : int
        Total number of rows ever passed to ``update``.
    """

    min_pt_dim: float = 1
    max_pt_dim: float = math.inf

    def __init__(
        self,
        points: Optional[ArrayLike] = None,
        values: Optional[ArrayLike] = None,
        name: str = "",
        pt_dim_names: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize approximator, optionally with initial data.

        Parameters
        ----------
        points : array_like, optional
            Initial points, shape (n, d).
        values : array_like, optional
            Initial values, shape (n,) or (n, k).
        name : str
            Optional label.
        pt_dim_names : list of str, optional
            Optional name for each point dimension.

        Raises
        ------
        DimMismatchError
            If only one of points and values is given.
        """
        self.name = name
        self.pt_dim_names = list(pt_dim_names) if pt_dim_names else []
        self.n_raw_pts = 0
        self._refresh_required = False

        self._store_pts: Optional[NDArray[np.float64]] = None
        self._store_vals: Optional[NDArray[np.float64]] = None
        self._new_pts: Optional[NDArray[np.float64]] = None
        self._new_vals: Optional[NDArray[np.float64]] = None

        if (points is None) != (values is None):
            raise DimMismatchError(
                "Need both points and values (or neither) to create an approximation"
            )
        if points is not None:
            self.update(points, values)

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------
    @abstractmethod
    def _build_func(self) -> None:
        """Rebuild the approximation from stored and buffered data."""

    @abstractmethod
    def _do_approx(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Evaluate the approximation at points of shape (n, n_pt_dim)."""

    # ------------------------------------------------------------------
    # Data handling
    # ------------------------------------------------------------------
    @staticmethod
    def _as_2d(arr: ArrayLike) -> NDArray[np.float64]:
        out = np.asarray(arr, dtype=np.float64)
        if out.ndim == 0:
            return out.reshape(1, 1)
        if out.ndim == 1:
            return out.reshape(-1, 1)
        return out

    def update(self, points: ArrayLike, values: ArrayLike) -> None:
        """
        Add data points to the approximation.

        Parameters
        ----------
        points : array_like
            Shape (n, d), one row per point. A 1-D array is n points of
            dimension 1.
        values : array_like
            Shape (n,) or (n, k).

        Raises
        ------
        DimMismatchError
            If the number of point and value rows differ.
        WrongNumDimError
            If the dimensions don't fit this approximator or the data
            already stored.
        """
        pts = self._as_2d(points)
        vals = self._as_2d(values)

        if pts.shape[0] != vals.shape[0]:
            raise DimMismatchError(
                f"Number of data point rows ({pts.shape[0]}) does not match "
                f"values ({vals.shape[0]})"
            )

        if self._new_pts is None:
            n_dim = pts.shape[1]
            if not (self.min_pt_dim <= n_dim <= self.max_pt_dim):
                if self.min_pt_dim == self.max_pt_dim:
                    limit = f"{self.min_pt_dim}"
                else:
                    limit = f"between {self.min_pt_dim} & {self.max_pt_dim}"
                raise WrongNumDimError(
                    f"{type(self).__name__} requires {limit} dimensions. Got {n_dim}"
                )
            self._store_pts = np.zeros((0, n_dim))
            self._store_vals = np.zeros((0, vals.shape[1]))
            self._new_pts = np.zeros((0, n_dim))
            self._new_vals = np.zeros((0, vals.shape[1]))
        else:
            if pts.shape[1] != self.n_pt_dim:
                raise WrongNumDimError(
                    f"Point dimension mismatch: you gave {pts.shape[1]}, "
                    f"need {self.n_pt_dim}"
                )
            if vals.shape[1] != self.n_val_dim:
                raise WrongNumDimError(
                    f"Value dimension mismatch: you gave {vals.shape[1]}, "
                    f"need {self.n_val_dim}"
                )

        self._new_pts = np.vstack([self._new_pts, pts])
        self._new_vals = np.vstack([self._new_vals, vals])
        self._refresh_required = True
        self.n_raw_pts += pts.shape[0]

    def _merge_new_pts(self) -> None:
        self._store_pts = np.vstack([self._store_pts, self._new_pts])
        self._store_vals = np.vstack([self._store_vals, self._new_vals])
        self._new_pts = np.zeros((0, self._store_pts.shape[1]))
        self._new_vals = np.zeros((0, self._store_vals.shape[1]))

    def approx(self, points: ArrayLike) -> NDArray[np.float64]:
        """
        Approximate values at the given points.

        Rebuilds the approximation first if data was added since the last
        call.

        Parameters
        ----------
        points : array_like
            Shape (n, n_pt_dim).

        Raises
        ------
        NoDataError
            If no data has been added yet.
        WrongNumDimError
            If the points have the wrong dimension.
        """
        if self.n_raw_pts == 0:
            raise NoDataError(
                "No data points, add data with update() before calling approx()"
            )
        if self._refresh_required:
            self._build_func()
            self._merge_new_pts()
            self._refresh_required = False
            logger.debug(
                "Rebuilt %s with %d stored points", type(self).__name__, self.n_store_pts
            )

        pts = self._as_2d(points)
        if pts.shape[1] != self.n_pt_dim:
            raise WrongNumDimError(
                f"Point dimension mismatch: you gave {pts.shape[1]}, "
                f"need {self.n_pt_dim}"
            )
        return self._do_approx(pts)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def refresh_required(self) -> bool:
        return self._refresh_required

    @property
    def n_store_pts(self) -> int:
        """Stored plus buffered points."""
        if self._store_pts is None:
            return 0
        return self._store_pts.shape[0] + self._new_pts.shape[0]

    @property
    def n_pt_dim(self) -> int:
        return 0 if self._store_pts is None else self._store_pts.shape[1]

    @property
    def n_val_dim(self) -> int:
        return 0 if self._store_vals is None else self._store_vals.shape[1]

    def _all_pts(self) -> NDArray[np.float64]:
        return np.vstack([self._store_pts, self._new_pts])

    def _all_vals(self) -> NDArray[np.float64]:
        return np.vstack([self._store_vals, self._new_vals])

    @property
    def pt_range(self) -> NDArray[np.float64]:
        """Row 0: minimum per point dimension, row 1: maximum."""
        if self.n_store_pts == 0:
            raise NoDataError("No data points to compute a range from")
        pts = self._all_pts()
        return np.vstack([pts.min(axis=0), pts.max(axis=0)])

    @property
    def val_range(self) -> NDArray[np.float64]:
        """Row 0: minimum per value dimension, row 1: maximum."""
        if self.n_store_pts == 0:
            raise NoDataError("No data points to compute a range from")
        vals = self._all_vals()
        return np.vstack([vals.min(axis=0), vals.max(axis=0)])

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"{type(self).__name__}(name={self.name!r}, n_pt_dim={self.n_pt_dim}, "
            f"n_store_pts={self.n_store_pts}, n_raw_pts={self.n_raw_pts})"
        )
