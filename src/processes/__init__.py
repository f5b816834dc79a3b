"""
Discrete-time random processes for dynamic programming.

This module implements the process engine used by DP solvers:

**Process contract (base.py):**
- Abstract RandomProcess with a single required primitive (dlistnext)
- Default sampling, simulation, stepping and range queries
- Simulation cursor (t, current_state) with forward/backward steps
- Zero-order hold for fractional times and times beyond the horizon

**Independent-period sampler (discrete_sample.py):**
- Per-period discrete distributions, independent of the previous state
- Inverse-CDF sampling
- Global value <-> state id mapping shared across periods

**Errors and results (errors.py, results.py):**
- One ValueError subclass per error category
- StepResult / SimResult with an explicit "not simulated" marker
"""

from src.processes.base import RandomProcess
from src.processes.discrete_sample import DiscreteSampleProcess, DEFAULT_TOL
from src.processes.errors import (
    ProcessError,
    InvalidTimeError,
    InvalidStateError,
    InvalidStateNumError,
    InvalidValueError,
    ProbSumError,
    ValProbMismatchError,
    DimMismatchError,
    WrongNumDimError,
    NoDataError,
)
from src.processes.results import INVALID_STATE, SimResult, StepResult

__all__ = [
    # Processes
    "RandomProcess",
    "DiscreteSampleProcess",
    "DEFAULT_TOL",
    # Results
    "INVALID_STATE",
    "SimResult",
    "StepResult",
    # Errors
    "ProcessError",
    "InvalidTimeError",
    "InvalidStateError",
    "InvalidStateNumError",
    "InvalidValueError",
    "ProbSumError",
    "ValProbMismatchError",
    "DimMismatchError",
    "WrongNumDimError",
    "NoDataError",
]
