"""
Result Assembly

Reads the persistence engine's text output back into arrays.

Betti file rows:    <step> <b_0> <b_1> ... (blank lines ignored)
Interval file rows: <birth> <death>        (death -1 = never dies)

Column layout follows compute_betti0: with it, column d is Betti d for
d = 0..max_betti_number; without it, column d-1 is Betti d for
d = 1..max_betti_number.
"""

import logging
from pathlib import Path
from typing import List, Tuple

import numpy as np
from scipy.special import comb

from cliquetop.errors import ParseError
from cliquetop.topology.persistence import PersistenceDiagram
from cliquetop.topology.result import TopologyResult
from cliquetop.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)


def _read_int_rows(path: Path) -> List[List[int]]:
    """Non-blank lines of a whitespace-separated integer file."""
    path = Path(path)
    if not path.exists():
        raise ParseError("expected output file is missing", path=path)

    rows = []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            for lineno, line in enumerate(f, start=1):
                tokens = line.split()
                if not tokens:
                    continue
                try:
                    rows.append([int(t) for t in tokens])
                except ValueError:
                    raise ParseError(
                        f"line {lineno}: non-integer token in {line.strip()!r}", path=path) from None
    except UnicodeDecodeError as e:
        raise ParseError(f"not a text file ({e.reason} at byte {e.start})", path=path) from e
    return rows


# =============================================================================
# BETTI CURVES
# =============================================================================

def read_betti_curves(
    path: Path,
    num_filtrations: int,
    max_betti_number: int,
    compute_betti0: bool = False,
) -> np.ndarray:
    """
    Read a Betti file into a (num_filtrations, n_dims) array.

    Every step 1..num_filtrations must be listed exactly once; every step
    adds an edge, so the engine reports each one. Dimensions past the end
    of a row are zero.

    Raises:
        ParseError: Missing file, a step outside 1..num_filtrations, a
            repeated step, or a row count different from num_filtrations
    """
    rows = _read_int_rows(path)
    if not rows:
        raise ParseError("no Betti rows", path=path)

    full = np.zeros((num_filtrations, max_betti_number + 1), dtype=int)
    listed = set()
    for row in rows:
        if len(row) < 2:
            raise ParseError(f"row {row} has no Betti numbers", path=path)
        step = row[0]
        if not 1 <= step <= num_filtrations:
            raise ParseError(
                f"step {step} outside 1..{num_filtrations}", path=path)
        if step in listed:
            raise ParseError(f"step {step} listed twice", path=path)
        listed.add(step)
        values = row[1:max_betti_number + 2]
        if min(values) < 0:
            raise ParseError(f"negative Betti number at step {step}", path=path)
        full[step - 1, :len(values)] = values

    if len(listed) != num_filtrations:
        missing = min(set(range(1, num_filtrations + 1)) - listed)
        raise ParseError(
            f"{len(listed)} Betti rows for {num_filtrations} filtration steps "
            f"(step {missing} missing)",
            path=path,
        )

    return full if compute_betti0 else full[:, 1:].copy()


# =============================================================================
# PERSISTENCE INTERVALS
# =============================================================================

def read_persistence_intervals(path: Path, dimension: int) -> PersistenceDiagram:
    """
    Read one interval file.

    Raises:
        ParseError: Missing file or a row that isn't a (birth, death) pair
    """
    rows = _read_int_rows(path)
    if not rows:
        return PersistenceDiagram.empty(dimension)

    for row in rows:
        if len(row) != 2:
            raise ParseError(f"expected 'birth death', got {row}", path=path)

    pairs = np.asarray(rows, dtype=int)
    return PersistenceDiagram(
        dimension=dimension,
        birth_times=pairs[:, 0],
        death_times=pairs[:, 1],
    )


def persistence_interval_distribution(
    diagram: PersistenceDiagram,
    num_filtrations: int,
) -> Tuple[np.ndarray, int]:
    """
    Histogram of interval lifetimes over filtration steps.

    Returns:
        distribution: (num_filtrations,) entry L-1 counts bounded intervals
            living exactly L steps
        unbounded: Intervals open at the end or dying after num_filtrations

    Raises:
        ParseError: On a birth outside 1..num_filtrations or a non-positive
            lifetime
    """
    distribution = np.zeros(num_filtrations, dtype=int)
    if diagram.n_features == 0:
        return distribution, 0

    births = diagram.birth_times
    if np.any((births < 1) | (births > num_filtrations)):
        raise ParseError(
            f"H{diagram.dimension}: birth outside 1..{num_filtrations}")

    unbounded = int(np.sum(diagram.is_unbounded(num_filtrations)))
    lifetimes = diagram.bounded(num_filtrations).persistence
    if np.any(lifetimes < 1):
        raise ParseError(f"H{diagram.dimension}: interval dies before it is born")

    np.add.at(distribution, lifetimes - 1, 1)
    return distribution, unbounded


def edge_densities(num_filtrations: int, matrix_size: int) -> np.ndarray:
    """t / C(N, 2) for t = 1..num_filtrations."""
    n_edges = comb(matrix_size, 2, exact=True)
    return np.arange(1, num_filtrations + 1) / n_edges


# =============================================================================
# ASSEMBLY
# =============================================================================

def assemble_results(
    files: WorkspaceFiles,
    num_filtrations: int,
    matrix_size: int,
    max_betti_number: int,
    compute_betti0: bool = False,
) -> TopologyResult:
    """
    Build the four result arrays from the engine output files.

    Betti curves and persistence intervals always share one shape:
    (num_filtrations, max_betti_number + 1) with Betti 0,
    (num_filtrations, max_betti_number) without.
    """
    betti_curves = read_betti_curves(
        files.betti, num_filtrations, max_betti_number, compute_betti0)

    dims = range(0 if compute_betti0 else 1, max_betti_number + 1)
    persistence_intervals = np.zeros((num_filtrations, len(dims)), dtype=int)
    unbounded_intervals = np.zeros(len(dims), dtype=int)

    for col, d in enumerate(dims):
        path = files.intervals(d)
        diagram = read_persistence_intervals(path, d)
        try:
            hist, unbounded = persistence_interval_distribution(diagram, num_filtrations)
        except ParseError as e:
            raise ParseError(e.message, path=path) from None
        persistence_intervals[:, col] = hist
        unbounded_intervals[col] = unbounded

    logger.debug(
        f"Assembled {num_filtrations} steps x {len(dims)} dims, "
        f"unbounded per dim {unbounded_intervals.tolist()}"
    )

    return TopologyResult(
        betti_curves=betti_curves,
        edge_densities=edge_densities(num_filtrations, matrix_size),
        persistence_intervals=persistence_intervals,
        unbounded_intervals=unbounded_intervals,
        num_filtrations=num_filtrations,
        compute_betti0=compute_betti0,
    )
