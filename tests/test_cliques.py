"""
Tests for clique enumeration of the order complex.

The square matrix from conftest is small enough that the whole simplex
listing can be written out by hand.
"""

import numpy as np
import pytest
from scipy.special import comb

from cliquetop.engines.cliques import (
    edge_order,
    enumerate_cliques_and_write_to_file,
    num_filtration_steps,
)
from cliquetop.errors import ExternalToolError, Stage
from cliquetop.workspace import WorkspaceFiles


@pytest.fixture
def files(make_config):
    return WorkspaceFiles.from_config(make_config(max_betti_number=1))


def _listing(path):
    return path.read_text().splitlines()


class TestEdgeOrder:

    def test_decreasing_weight(self, square_matrix):
        rows, cols = edge_order(square_matrix)
        edges = list(zip(rows.tolist(), cols.tolist()))
        assert edges == [(0, 1), (1, 2), (0, 3), (2, 3), (1, 3), (0, 2)]

    def test_ties_keep_row_major_order(self):
        m = np.ones((4, 4)) - np.eye(4)
        rows, cols = edge_order(m)
        assert list(zip(rows.tolist(), cols.tolist())) == [
            (0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3),
        ]

    def test_diagonal_ignored(self, square_matrix):
        m = square_matrix.copy()
        np.fill_diagonal(m, 100.0)
        rows, cols = edge_order(m)
        assert np.all(rows < cols)
        assert len(rows) == 6


class TestFiltrationSteps:

    @pytest.mark.parametrize("n,density,expected", [
        (4, 1.0, 6),
        (4, 0.5, 3),
        (5, 0.6, 6),
        (10, 0.6, 27),
        (2, 0.6, 0),
    ])
    def test_floor_of_density_times_edges(self, n, density, expected):
        assert num_filtration_steps(n, density) == expected

    @pytest.mark.parametrize("n", [3, 7, 20])
    @pytest.mark.parametrize("density", [0.1, 0.33, 0.6, 1.0])
    def test_never_exceeds_bound(self, n, density):
        assert num_filtration_steps(n, density) <= np.floor(density * comb(n, 2))


class TestEnumerate:

    def test_square_listing_depth_three(self, square_matrix, files):
        steps = enumerate_cliques_and_write_to_file(square_matrix, 3, 1.0, files)

        assert steps == 6
        assert _listing(files.simplices) == [
            "1",
            "0 1 1", "0 2 1", "0 3 1", "0 4 1",
            "1 1 2 1",
            "1 2 3 2",
            "1 1 4 3",
            "1 3 4 4",
            "2 1 2 4 5", "2 2 3 4 5",
            "2 1 2 3 6", "2 1 3 4 6",
        ]

    def test_square_listing_depth_four(self, square_matrix, files):
        enumerate_cliques_and_write_to_file(square_matrix, 4, 1.0, files)
        lines = _listing(files.simplices)
        # the last edge closes the full tetrahedron
        assert lines[-1] == "3 1 2 3 4 6"
        assert "2 1 2 3 6" not in lines

    def test_truncated_density(self, square_matrix, files):
        steps = enumerate_cliques_and_write_to_file(square_matrix, 3, 0.5, files)
        assert steps == 3
        births = [int(line.split()[-1]) for line in _listing(files.simplices)[1:]]
        assert max(births) == 3

    def test_all_vertices_born_first(self, files):
        m = np.ones((6, 6))
        enumerate_cliques_and_write_to_file(m, 3, 0.1, files)
        vertex_lines = [l for l in _listing(files.simplices)[1:] if l.startswith("0 ")]
        assert vertex_lines == [f"0 {v} 1" for v in range(1, 7)]

    def test_complete_graph_cliques_bounded(self, files):
        m = np.ones((5, 5)) - np.eye(5)
        enumerate_cliques_and_write_to_file(m, 3, 1.0, files)
        dims = [int(l.split()[0]) for l in _listing(files.simplices)[1:]]
        assert max(dims) == 2
        # every triangle of K5 appears exactly once
        triangles = [l for l in _listing(files.simplices)[1:] if l.startswith("2 ")]
        assert len(triangles) == comb(5, 3, exact=True)
        assert len(set(triangles)) == len(triangles)

    def test_no_maximal_file_by_default(self, square_matrix, files):
        enumerate_cliques_and_write_to_file(square_matrix, 3, 1.0, files)
        assert not files.max_simplices.exists()

    def test_maximal_cliques_file(self, square_matrix, files):
        enumerate_cliques_and_write_to_file(square_matrix, 3, 1.0, files, write_maximal_cliques=True)
        lines = _listing(files.max_simplices)
        by_step = {}
        for line in lines:
            step, *vertices = line.split()
            by_step.setdefault(int(step), []).append(tuple(int(v) for v in vertices))
        assert sorted(by_step) == [1, 2, 3, 4, 5, 6]
        assert by_step[1] == [(1, 2), (3,), (4,)]
        assert by_step[4] == [(1, 2), (1, 4), (2, 3), (3, 4)]
        assert by_step[6] == [(1, 2, 3, 4)]

    def test_matrix_not_modified(self, square_matrix, files):
        before = square_matrix.copy()
        enumerate_cliques_and_write_to_file(square_matrix, 3, 1.0, files)
        np.testing.assert_array_equal(square_matrix, before)

    def test_no_edges_admitted(self, files):
        with pytest.raises(ExternalToolError) as exc:
            enumerate_cliques_and_write_to_file(np.ones((2, 2)), 3, 0.6, files)
        assert exc.value.stage == Stage.ENUMERATE
        assert not files.simplices.exists()
