"""Shared fixtures: work directories, configs, fake Perseus binaries."""

import stat
import sys
from pathlib import Path

import numpy as np
import pytest

from cliquetop.config.topology import TopologyConfig


# Edge weights chosen so the order complex is easy to follow by hand:
#   step 1: 0-1, step 2: 1-2, step 3: 0-3, step 4: 2-3 (4-cycle born)
#   step 5: 1-3 (cycle filled), step 6: 0-2
SQUARE_MATRIX = np.array([
    [0.0, 6.0, 1.0, 4.0],
    [6.0, 0.0, 5.0, 2.0],
    [1.0, 5.0, 0.0, 3.0],
    [4.0, 2.0, 3.0, 0.0],
])


FAKE_PERSEUS = """\
import sys
from pathlib import Path

mode, simplices, out = sys.argv[1:4]
assert mode == "nmfsimtop", mode
lines = Path(simplices).read_text().splitlines()[1:]
steps = max(int(line.split()[-1]) for line in lines if line.strip())
with open(out + "_betti.txt", "w") as f:
    f.write("\\n")
    for t in range(1, steps + 1):
        f.write("%d 1 0 0 0\\n" % t)
for d in range(5):
    Path(out + "_%d.txt" % d).write_text("1 -1\\n" if d == 0 else "")
"""


@pytest.fixture
def square_matrix():
    return SQUARE_MATRIX.copy()


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def make_config(work_dir):
    """TopologyConfig rooted in the test's work directory."""
    def _make(**options):
        options.setdefault('work_directory', work_dir)
        options.setdefault('engine', 'gudhi')
        return TopologyConfig(**options)
    return _make


@pytest.fixture
def make_executable(tmp_path):
    """Write a Python script as an executable file."""
    def _make(name: str, body: str) -> Path:
        path = tmp_path / "bin" / name
        path.parent.mkdir(exist_ok=True)
        path.write_text(f"#!{sys.executable}\n{body}")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path
    return _make


@pytest.fixture
def fake_perseus(make_executable):
    """Stand-in Perseus: one component forever, no higher homology."""
    return make_executable("perseusLin", FAKE_PERSEUS)
