"""
Persistence Intervals

Container for the (birth, death) pairs of one homological dimension, in
filtration steps. Open intervals carry death = -1, as Perseus writes them.
"""

import numpy as np
from dataclasses import dataclass


OPEN_DEATH = -1


@dataclass
class PersistenceDiagram:
    """Container for persistence diagram data."""
    dimension: int
    birth_times: np.ndarray
    death_times: np.ndarray

    @property
    def n_features(self) -> int:
        return len(self.birth_times)

    def is_unbounded(self, num_filtrations: int) -> np.ndarray:
        """Open at the last step, or dying after the truncation."""
        return (self.death_times == OPEN_DEATH) | (self.death_times > num_filtrations)

    @property
    def persistence(self) -> np.ndarray:
        """Lifetime of each feature, in steps (meaningless for open ones)."""
        return self.death_times - self.birth_times

    def bounded(self, num_filtrations: int) -> 'PersistenceDiagram':
        """Keep only features that die within the truncation."""
        mask = ~self.is_unbounded(num_filtrations)
        return PersistenceDiagram(
            dimension=self.dimension,
            birth_times=self.birth_times[mask],
            death_times=self.death_times[mask],
        )

    @classmethod
    def empty(cls, dimension: int) -> 'PersistenceDiagram':
        return cls(
            dimension=dimension,
            birth_times=np.array([], dtype=int),
            death_times=np.array([], dtype=int),
        )
