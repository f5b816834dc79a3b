"""
Ensemble sampling across several random processes.

Draws the same number of samples at the same time from each process in a
collection and lays them out as one row per draw:

    U[n, k] = value of draw n from process k

This is a pure Monte Carlo sample, so no probabilities are returned.
"""

import logging
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from src.processes.base import RandomProcess, TimeArg
from src.processes.errors import DimMismatchError

logger = logging.getLogger(__name__)


def sample_ensemble(
    processes: Sequence[RandomProcess],
    t: TimeArg = None,
    n_samples: int = 1,
) -> NDArray[np.float64]:
    """
    Sample a group of processes at a common time.

    Parameters
    ----------
    processes : sequence of RandomProcess
        Processes to sample, one output column each.
    t : int or float, optional
        Time to sample. If None, each process samples at its own current
        simulation time.
    n_samples : int
        Number of draws (rows). Default 1.

    Returns
    -------
    NDArray[np.float64]
        Sampled values, shape (n_samples, len(processes)).

    Raises
    ------
    DimMismatchError
        If processes is empty.
    """
    if len(processes) == 0:
        raise DimMismatchError("processes must contain at least one process")

    logger.debug(
        "Sampling %d draws at t=%s from %d processes",
        n_samples, t, len(processes),
    )

    columns = []
    for process in processes:
        values, _ = process.sample(n_samples, t)
        columns.append(values)

    return np.column_stack(columns)
