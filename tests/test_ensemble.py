"""
Unit tests for ensemble sampling across processes.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_equal

from src.processes import DiscreteSampleProcess, DimMismatchError
from src.simulation import sample_ensemble


@pytest.fixture
def processes():
    demand = DiscreteSampleProcess([[0, 1, 2], [3, 4]], random_seed=1)
    price = DiscreteSampleProcess([[10, 20], [30]], [[0.3, 0.7], [1.0]], random_seed=2)
    return [demand, price]


class TestSampleEnsemble:
    """Tests for sample_ensemble."""

    def test_shape_one_row_per_draw(self, processes) -> None:
        """Test output shape (n_samples, n_processes)."""
        draws = sample_ensemble(processes, t=0, n_samples=40)
        assert draws.shape == (40, 2)

    def test_columns_follow_processes(self, processes) -> None:
        """Test that column k holds draws from process k."""
        draws = sample_ensemble(processes, t=1, n_samples=100)
        assert set(draws[:, 0].tolist()) <= {3.0, 4.0}
        assert_array_equal(draws[:, 1], np.full(100, 30.0))

    def test_single_draw_default(self, processes) -> None:
        """Test that one row is returned by default."""
        draws = sample_ensemble(processes, t=0)
        assert draws.shape == (1, 2)

    def test_uses_each_process_time_when_t_omitted(self, processes) -> None:
        """Test that t=None samples each process at its own cursor."""
        processes[1].step()
        draws = sample_ensemble(processes, n_samples=50)
        assert set(draws[:, 0].tolist()) <= {0.0, 1.0, 2.0}
        assert_array_equal(draws[:, 1], np.full(50, 30.0))

    def test_cursors_unchanged(self, processes) -> None:
        """Test that sampling does not move any process."""
        before = [p.current() for p in processes]
        sample_ensemble(processes, t=1, n_samples=10)
        assert [p.current() for p in processes] == before

    def test_matches_individual_samples(self) -> None:
        """Test that columns equal what each process would sample alone."""
        table = [[1, 2, 3, 4, 5]]
        ensemble = [DiscreteSampleProcess(table, random_seed=s) for s in (7, 8)]
        alone = [DiscreteSampleProcess(table, random_seed=s) for s in (7, 8)]

        draws = sample_ensemble(ensemble, t=0, n_samples=20)
        for k, proc in enumerate(alone):
            values, _ = proc.sample(20, 0)
            assert_array_equal(draws[:, k], values)

    def test_empty_collection_raises(self) -> None:
        """Test that at least one process is required."""
        with pytest.raises(DimMismatchError):
            sample_ensemble([], t=0)
