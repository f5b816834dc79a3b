"""
Function approximation interface for approximate dynamic programming.

- FunctionApproximator: abstract base that buffers (point, value) updates
  and rebuilds the approximation lazily on the next query
"""

from src.approximation.base import FunctionApproximator

__all__ = [
    "FunctionApproximator",
]
