"""
Monte Carlo helpers built on random processes.

- sample_ensemble: draw from a group of processes at a common time, one row
  per draw and one column per process

**Usage:**
```python
from src.processes import DiscreteSampleProcess
from src.simulation import sample_ensemble

demand = DiscreteSampleProcess([[0, 1, 2], [1, 2, 3]])
price = DiscreteSampleProcess([[10, 20], [15, 25]], [[0.5, 0.5], [0.2, 0.8]])

draws = sample_ensemble([demand, price], t=1, n_samples=100)  # (100, 2)
```
"""

from src.simulation.ensemble import sample_ensemble

__all__ = [
    "sample_ensemble",
]
