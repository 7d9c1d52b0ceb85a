"""
Gudhi persistence engine.

Drop-in replacement for Perseus when the binary is unavailable. Reads the
nmfsimtop listing, computes persistence of the filtered clique complex with
a gudhi SimplexTree (Z/2 coefficients), and writes Perseus-format output:

    <prefix>_homology_betti.txt   one row per step: t b_0 ... b_max
    <prefix>_homology_<d>.txt     one row per interval: birth death
                                  (death -1 for classes that never die)
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np

try:
    import gudhi
except ImportError as e:
    raise ImportError("The gudhi engine requires `gudhi`. Install with `pip install gudhi`.") from e

from cliquetop.engines.engine_base import BaseEngine
from cliquetop.errors import ExternalToolError, Stage
from cliquetop.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)


def read_simplex_listing(path: Path) -> List[Tuple[List[int], int]]:
    """
    Parse an nmfsimtop file into (vertices, birth) pairs.

    Raises:
        ExternalToolError: On undecodable or malformed lines
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            lines = f.read().splitlines()
    except UnicodeDecodeError as e:
        raise ExternalToolError(
            f"{path.name}: not a text file ({e.reason} at byte {e.start})",
            stage=Stage.PERSISTENCE, path=path,
        ) from e

    header = lines[0].strip() if lines else ''
    if header != '1':
        raise ExternalToolError(
            f"{path.name}: expected header '1', got {header!r}",
            stage=Stage.PERSISTENCE, path=path,
        )

    simplices = []
    for lineno, line in enumerate(lines[1:], start=2):
        tokens = line.split()
        if not tokens:
            continue
        try:
            values = [int(t) for t in tokens]
        except ValueError:
            raise ExternalToolError(
                f"{path.name}:{lineno}: non-integer token",
                stage=Stage.PERSISTENCE, path=path,
            ) from None
        dim = values[0]
        if len(values) != dim + 3:
            raise ExternalToolError(
                f"{path.name}:{lineno}: {dim}-simplex needs {dim + 1} vertices and a birth",
                stage=Stage.PERSISTENCE, path=path,
            )
        simplices.append((values[1:-1], values[-1]))
    return simplices


def betti_rows(intervals: Dict[int, np.ndarray], num_steps: int) -> np.ndarray:
    """Betti numbers per step: intervals with birth <= t < death."""
    dims = sorted(intervals)
    table = np.zeros((num_steps, len(dims)), dtype=int)
    steps = np.arange(1, num_steps + 1)
    for col, d in enumerate(dims):
        pairs = intervals[d]
        for birth, death in pairs:
            table[:, col] += (steps >= birth) & (steps < death)
    return table


class GudhiEngine(BaseEngine):
    """Persistent homology via gudhi.SimplexTree."""

    name = "gudhi"

    def run(self, files: WorkspaceFiles, max_dimension: int) -> Dict[str, Any]:
        simplices = read_simplex_listing(files.simplices)
        if not simplices:
            raise ExternalToolError(
                f"{files.simplices.name} lists no simplices",
                stage=Stage.PERSISTENCE, path=files.simplices,
            )

        st = gudhi.SimplexTree()
        for vertices, birth in simplices:
            # faces are inserted with the same value unless already lower
            st.insert(vertices, filtration=float(birth))
        st.make_filtration_non_decreasing()

        st.compute_persistence(homology_coeff_field=2, persistence_dim_max=True)
        num_steps = max(birth for _, birth in simplices)

        intervals: Dict[int, np.ndarray] = {}
        for d in range(max_dimension + 1):
            pairs = np.asarray(st.persistence_intervals_in_dimension(d), dtype=float)
            intervals[d] = pairs.reshape(-1, 2)

        table = betti_rows(intervals, num_steps)
        with open(files.betti, 'w') as f:
            f.write("\n")
            for t in range(num_steps):
                row = " ".join(str(b) for b in table[t])
                f.write(f"{t + 1} {row}\n")

        for d, pairs in intervals.items():
            with open(files.intervals(d), 'w') as f:
                for birth, death in pairs:
                    death_out = -1 if np.isinf(death) else int(death)
                    f.write(f"{int(birth)} {death_out}\n")

        n_intervals = {d: len(p) for d, p in intervals.items()}
        logger.debug(f"gudhi: {st.num_simplices():,} simplices, intervals {n_intervals}")
        return {'n_simplices': st.num_simplices(), 'n_intervals': n_intervals}
