"""
Unit tests for the function approximation interface.

A trivial approximator (the column mean of all values seen) is used to
exercise data buffering, lazy rebuilds and dimension checks.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from src.approximation import FunctionApproximator
from src.processes import DimMismatchError, NoDataError, WrongNumDimError


class MeanApprox(FunctionApproximator):
    """Predicts the mean of all stored values everywhere."""

    def __init__(self, *args, **kwargs) -> None:
        self.n_builds = 0
        self._mean = None
        super().__init__(*args, **kwargs)

    def _build_func(self) -> None:
        self.n_builds += 1
        self._mean = self._all_vals().mean(axis=0)

    def _do_approx(self, points):
        return np.tile(self._mean, (points.shape[0], 1))


class PlaneApprox(MeanApprox):
    """Same predictor, restricted to 2-D points."""

    min_pt_dim = 2
    max_pt_dim = 2


class TestUpdate:
    """Tests for adding data."""

    def test_update_buffers_points(self) -> None:
        """Test that updates are counted and flag a refresh."""
        fa = MeanApprox()
        assert not fa.refresh_required
        fa.update([[0.0, 1.0], [1.0, 2.0]], [1.0, 3.0])
        assert fa.refresh_required
        assert fa.n_raw_pts == 2
        assert fa.n_store_pts == 2
        assert fa.n_pt_dim == 2
        assert fa.n_val_dim == 1

    def test_one_dimensional_points(self) -> None:
        """Test that a 1-D point array is n points of dimension 1."""
        fa = MeanApprox([0.0, 1.0, 2.0], [4.0, 5.0, 6.0])
        assert fa.n_pt_dim == 1
        assert fa.n_store_pts == 3

    def test_row_mismatch_raises(self) -> None:
        """Test that point and value counts must agree."""
        fa = MeanApprox()
        with pytest.raises(DimMismatchError, match="does not match"):
            fa.update([[0.0], [1.0]], [1.0])

    def test_later_dimension_mismatch_raises(self) -> None:
        """Test that new batches must match stored dimensions."""
        fa = MeanApprox([[0.0, 1.0]], [1.0])
        with pytest.raises(WrongNumDimError, match="Point dimension"):
            fa.update([[0.0, 1.0, 2.0]], [1.0])
        with pytest.raises(WrongNumDimError, match="Value dimension"):
            fa.update([[0.0, 1.0]], [[1.0, 2.0]])

    def test_class_dimension_limits(self) -> None:
        """Test min/max point dimensions on the first batch."""
        fa = PlaneApprox()
        with pytest.raises(WrongNumDimError, match="requires 2 dimensions"):
            fa.update([0.0, 1.0], [1.0, 2.0])
        fa.update([[0.0, 1.0]], [1.0])
        assert fa.n_pt_dim == 2

    def test_constructor_needs_points_and_values(self) -> None:
        """Test that giving only points is rejected."""
        with pytest.raises(DimMismatchError):
            MeanApprox(points=[[0.0]])


class TestApprox:
    """Tests for querying the approximation."""

    def test_no_data_raises(self) -> None:
        """Test that approx before update raises NoDataError."""
        with pytest.raises(NoDataError):
            MeanApprox().approx([[0.0]])

    def test_lazy_rebuild(self) -> None:
        """Test that the approximation is only rebuilt after new data."""
        fa = MeanApprox([[0.0], [1.0]], [2.0, 4.0])
        assert fa.n_builds == 0

        assert_allclose(fa.approx([[0.5]]), [[3.0]])
        assert fa.n_builds == 1
        assert not fa.refresh_required

        fa.approx([[0.7]])
        assert fa.n_builds == 1

        fa.update([[2.0]], [9.0])
        assert_allclose(fa.approx([[0.0], [1.0]]), [[5.0], [5.0]])
        assert fa.n_builds == 2
        assert fa.n_store_pts == 3
        assert fa.n_raw_pts == 3

    def test_query_dimension_mismatch_raises(self) -> None:
        """Test that query points must have the stored dimension."""
        fa = MeanApprox([[0.0, 1.0]], [1.0])
        with pytest.raises(WrongNumDimError):
            fa.approx([[0.0, 1.0, 2.0]])

    def test_ranges(self) -> None:
        """Test point and value ranges over stored and buffered data."""
        fa = MeanApprox([[0.0, 5.0], [2.0, -1.0]], [[1.0], [3.0]])
        fa.approx([[0.0, 0.0]])
        fa.update([[-1.0, 0.0]], [7.0])
        assert_array_equal(fa.pt_range, [[-1.0, -1.0], [2.0, 5.0]])
        assert_array_equal(fa.val_range, [[1.0], [7.0]])

    def test_range_without_data_raises(self) -> None:
        """Test that ranges need data."""
        with pytest.raises(NoDataError):
            MeanApprox().pt_range

    def test_metadata(self) -> None:
        """Test optional name and dimension labels."""
        fa = MeanApprox(name="value_fn", pt_dim_names=["stock", "price"])
        assert fa.name == "value_fn"
        assert fa.pt_dim_names == ["stock", "price"]
        assert "value_fn" in repr(fa)
