"""
Clique Enumeration
==================

Builds the order complex of a symmetric matrix one edge at a time and writes
its clique complex as a Perseus non-uniform simplicial toplex (nmfsimtop).

Edges enter in decreasing order of matrix entry; ties keep row-major order.
When edge (u, v) enters at step t, the simplices born at t are exactly
{u, v} + K for the maximal cliques K of the common neighbourhood of u and v.
Listing maximal simplices is enough, Perseus closes them under faces.

File format (1-based vertices):
    1
    <dim> <v_1> ... <v_dim+1> <birth step>
"""

import logging
from itertools import combinations
from typing import Iterable, List, Set, TextIO, Tuple

import networkx as nx
import numpy as np
from scipy.special import comb

from cliquetop.errors import ExternalToolError, Stage
from cliquetop.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)


def edge_order(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Upper-triangle edges sorted by decreasing weight.

    Returns:
        (rows, cols) vertex index arrays, one entry per edge
    """
    n = matrix.shape[0]
    rows, cols = np.triu_indices(n, k=1)
    weights = matrix[rows, cols]
    order = np.argsort(-weights, kind='stable')
    return rows[order], cols[order]


def num_filtration_steps(n_vertices: int, max_edge_density: float) -> int:
    """floor(max_edge_density * C(n, 2))."""
    n_edges = comb(n_vertices, 2, exact=True)
    return int(np.floor(max_edge_density * n_edges))


def _bounded_cliques(
    u: int,
    v: int,
    cliques: Iterable[List[int]],
    depth_bound: int,
) -> Set[Tuple[int, ...]]:
    """{u, v} + each clique, split into depth_bound-vertex pieces if too big."""
    out = set()
    room = depth_bound - 2
    for clique in cliques:
        rest = sorted(clique)
        if len(rest) <= room:
            out.add(tuple(sorted([u, v, *rest])))
        else:
            for sub in combinations(rest, room):
                out.add(tuple(sorted([u, v, *sub])))
    return out


def _write_simplex(f: TextIO, simplex: Tuple[int, ...], birth: int) -> None:
    vertices = " ".join(str(x + 1) for x in simplex)
    f.write(f"{len(simplex) - 1} {vertices} {birth}\n")


def enumerate_cliques_and_write_to_file(
    matrix: np.ndarray,
    depth_bound: int,
    max_edge_density: float,
    files: WorkspaceFiles,
    write_maximal_cliques: bool = False,
) -> int:
    """
    Enumerate the cliques of the order complex and write the simplex listing.

    Parameters
    ----------
    matrix : np.ndarray
        Validated N x N symmetric matrix.
    depth_bound : int
        Largest clique written, in vertices (max_betti_number + 2).
    max_edge_density : float
        Truncation density in (0, 1].
    files : WorkspaceFiles
        Destination of the simplex and maximal-simplex listings.
    write_maximal_cliques : bool
        Also write every maximal clique of every step's graph.

    Returns
    -------
    int
        Number of filtration steps written.

    Raises
    ------
    ExternalToolError
        If the density admits no edge at all.
    """
    n = matrix.shape[0]
    num_steps = num_filtration_steps(n, max_edge_density)
    if num_steps < 1:
        raise ExternalToolError(
            f"no filtration steps: density {max_edge_density} of "
            f"{comb(n, 2, exact=True)} edges admits no edge",
            stage=Stage.ENUMERATE,
        )

    rows, cols = edge_order(matrix)
    graph = nx.Graph()
    graph.add_nodes_from(range(n))

    n_simplices = 0
    max_f = open(files.max_simplices, 'w') if write_maximal_cliques else None
    try:
        with open(files.simplices, 'w') as f:
            f.write("1\n")
            for vertex in range(n):
                _write_simplex(f, (vertex,), 1)

            for step in range(1, num_steps + 1):
                u, v = int(rows[step - 1]), int(cols[step - 1])
                graph.add_edge(u, v)

                common = set(graph[u]) & set(graph[v])
                if common:
                    cofaces = nx.find_cliques(graph.subgraph(common))
                else:
                    cofaces = [[]]

                for simplex in sorted(_bounded_cliques(u, v, cofaces, depth_bound)):
                    _write_simplex(f, simplex, step)
                    n_simplices += 1

                if max_f is not None:
                    for clique in sorted(tuple(sorted(c)) for c in nx.find_cliques(graph)):
                        vertices = " ".join(str(x + 1) for x in clique)
                        max_f.write(f"{step} {vertices}\n")
    finally:
        if max_f is not None:
            max_f.close()

    logger.debug(f"Wrote {n_simplices:,} simplices over {num_steps} steps to {files.simplices.name}")
    return num_steps
