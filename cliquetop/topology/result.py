"""
Topology Result

The four arrays returned for one matrix, plus run metadata.
Iterating a TopologyResult yields the arrays in order:

    betti_curves, edge_densities, persistence_intervals, unbounded_intervals = result
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import numpy as np
import pandas as pd

from cliquetop.engines.engine_base import EngineResult


@dataclass
class TopologyResult:
    """
    Betti curves and persistence-lifetime distributions of an order complex.

    Attributes:
        betti_curves: (num_filtrations, n_dims) Betti numbers per step
        edge_densities: (num_filtrations,) density of each step's graph
        persistence_intervals: (num_filtrations, n_dims) lifetime histogram;
            row L-1 counts intervals living exactly L steps
        unbounded_intervals: (n_dims,) intervals still alive at the truncation
        num_filtrations: Number of filtration steps realized
        compute_betti0: Whether column 0 is dimension 0
        stages: Per-stage elapsed seconds
        engine: Record of the persistence-engine invocation
    """
    betti_curves: np.ndarray
    edge_densities: np.ndarray
    persistence_intervals: np.ndarray
    unbounded_intervals: np.ndarray
    num_filtrations: int
    compute_betti0: bool = False
    stages: Dict[str, float] = field(default_factory=dict)
    engine: Optional[EngineResult] = None

    def __iter__(self) -> Iterator[np.ndarray]:
        yield self.betti_curves
        yield self.edge_densities
        yield self.persistence_intervals
        yield self.unbounded_intervals

    @property
    def dimensions(self) -> List[int]:
        """Homological dimension of each column."""
        start = 0 if self.compute_betti0 else 1
        return list(range(start, start + self.betti_curves.shape[1]))

    def to_frame(self) -> pd.DataFrame:
        """Betti curves indexed by edge density, one column per dimension."""
        return pd.DataFrame(
            self.betti_curves,
            index=pd.Index(self.edge_densities, name='edge_density'),
            columns=[f'betti_{d}' for d in self.dimensions],
        )

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Filtration steps: {self.num_filtrations}",
            f"Edge density: {self.edge_densities[0]:.4f} to {self.edge_densities[-1]:.4f}"
            if self.num_filtrations else "Edge density: -",
        ]
        for col, d in enumerate(self.dimensions):
            peak = int(self.betti_curves[:, col].max()) if self.num_filtrations else 0
            lines.append(
                f"H{d}: peak Betti {peak}, "
                f"{int(self.persistence_intervals[:, col].sum())} bounded, "
                f"{int(self.unbounded_intervals[col])} unbounded"
            )
        if self.engine is not None:
            lines.append(f"Engine: {self.engine.engine_name} [{self.engine.run_id}]")
        if self.stages:
            timing = ", ".join(f"{k} {v:.2f}s" for k, v in self.stages.items())
            lines.append(f"Timing: {timing}")
        return "\n".join(lines)
