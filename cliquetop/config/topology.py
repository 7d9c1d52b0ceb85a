"""
Topology run configuration.

Every option of a clique-topology run lives in one frozen dataclass that is
validated once, at construction. YAML files map 1:1 onto its fields.

Usage:
    from cliquetop.config.topology import TopologyConfig, load_preset

    config = TopologyConfig(max_betti_number=2, max_edge_density=1.0)
    config = load_preset('full_filtration')
    config = load_topology_config('runs/sweep.yaml')
"""

import numbers
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, List, Optional, Union

import numpy as np
import yaml

from cliquetop.errors import InvalidArgumentError


ENGINES = ('perseus', 'gudhi')

PRESET_DIR = Path(__file__).parent / 'presets'

BASE_DIR_ENV = 'CLIQUETOP_BASE_DIR'


def default_base_directory() -> Path:
    """
    Location of the external engines.

    CLIQUETOP_BASE_DIR wins if set; otherwise the installed package
    directory, which is where perseus/ is unpacked.
    """
    env = os.environ.get(BASE_DIR_ENV)
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent


# =============================================================================
# FIELD CHECKS
# =============================================================================

def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _check_bool(name: str, value: Any) -> bool:
    if not _is_bool(value):
        raise InvalidArgumentError(name, f"expected a boolean, got {value!r}")
    return bool(value)


def _check_directory(name: str, value: Any) -> Path:
    if not isinstance(value, (str, os.PathLike)) or str(value) == '':
        raise InvalidArgumentError(name, f"expected a directory path, got {value!r}")
    path = Path(value).expanduser()
    if not path.is_dir():
        raise InvalidArgumentError(name, f"directory {path} does not exist")
    return path.resolve()


@dataclass(frozen=True)
class TopologyConfig:
    """
    Options for compute_clique_topology.

    Attributes:
        report_progress: Log stage status and elapsed time at INFO
        max_betti_number: Highest Betti number reported (>= 1)
        max_edge_density: Truncation density of the order complex, in (0, 1]
        compute_betti0: Include Betti 0; shifts columns so column d is Betti d
        file_prefix: Prefix of every intermediate file
        keep_files: Leave intermediate files on disk after a successful run
        write_maximal_cliques: Also write the maximal cliques of every step
        work_directory: Directory for intermediate files
        base_directory: Directory containing perseus/
        engine: Persistent-homology backend, 'perseus' or 'gudhi'
    """
    report_progress: bool = False
    max_betti_number: int = 3
    max_edge_density: float = 0.6
    compute_betti0: bool = False
    file_prefix: str = 'matrix'
    keep_files: bool = False
    write_maximal_cliques: bool = False
    work_directory: Union[str, Path] = '.'
    base_directory: Optional[Union[str, Path]] = None
    engine: str = 'perseus'

    def __post_init__(self):
        normalized = {
            'report_progress': _check_bool('report_progress', self.report_progress),
            'compute_betti0': _check_bool('compute_betti0', self.compute_betti0),
            'keep_files': _check_bool('keep_files', self.keep_files),
            'write_maximal_cliques': _check_bool(
                'write_maximal_cliques', self.write_maximal_cliques),
            'max_betti_number': self._check_max_betti_number(self.max_betti_number),
            'max_edge_density': self._check_max_edge_density(self.max_edge_density),
            'file_prefix': self._check_file_prefix(self.file_prefix),
            'work_directory': _check_directory('work_directory', self.work_directory),
            'base_directory': _check_directory(
                'base_directory',
                self.base_directory if self.base_directory is not None
                else default_base_directory(),
            ),
            'engine': self._check_engine(self.engine),
        }
        # frozen dataclass: write normalized values through object.__setattr__
        for name, value in normalized.items():
            object.__setattr__(self, name, value)

    @staticmethod
    def _check_max_betti_number(value: Any) -> int:
        if _is_bool(value) or not isinstance(value, numbers.Real):
            raise InvalidArgumentError(
                'max_betti_number', f"expected a positive integer, got {value!r}")
        if not np.isfinite(value) or value != int(value) or value <= 0:
            raise InvalidArgumentError(
                'max_betti_number', f"expected a positive integer, got {value!r}")
        return int(value)

    @staticmethod
    def _check_max_edge_density(value: Any) -> float:
        if _is_bool(value) or not isinstance(value, numbers.Real):
            raise InvalidArgumentError(
                'max_edge_density', f"expected a real number, got {value!r}")
        if not (0 < value <= 1):
            raise InvalidArgumentError(
                'max_edge_density', f"must lie in (0, 1], got {value!r}")
        return float(value)

    @staticmethod
    def _check_file_prefix(value: Any) -> str:
        if not isinstance(value, str) or value == '':
            raise InvalidArgumentError(
                'file_prefix', f"expected a non-empty string, got {value!r}")
        separators = {'/', os.sep, '\0'} | ({os.altsep} if os.altsep else set())
        if any(s in value for s in separators) or value in ('.', '..'):
            raise InvalidArgumentError(
                'file_prefix', f"{value!r} is not usable as a filename fragment")
        return value

    @staticmethod
    def _check_engine(value: Any) -> str:
        if value not in ENGINES:
            raise InvalidArgumentError(
                'engine', f"expected one of {list(ENGINES)}, got {value!r}")
        return value

    @property
    def depth_bound(self) -> int:
        """Largest clique (in vertices) the enumeration writes."""
        return self.max_betti_number + 2

    @property
    def homology_dimensions(self) -> List[int]:
        """Homological dimensions reported, one per output column."""
        start = 0 if self.compute_betti0 else 1
        return list(range(start, self.max_betti_number + 1))

    @property
    def perseus_directory(self) -> Path:
        return Path(self.base_directory) / 'perseus'

    def with_options(self, **changes) -> 'TopologyConfig':
        """Copy with some fields replaced (re-validated)."""
        return replace(self, **changes)

    def __repr__(self):
        return (f"TopologyConfig(max_betti_number={self.max_betti_number}, "
                f"max_edge_density={self.max_edge_density}, "
                f"file_prefix={self.file_prefix!r}, engine={self.engine!r})")


# =============================================================================
# MATRIX VALIDATION
# =============================================================================

def validate_matrix(input_matrix: Any) -> np.ndarray:
    """
    Check that the input is a real symmetric square matrix.

    Args:
        input_matrix: Array-like, N x N, N >= 2

    Returns:
        Read-only float64 copy of the matrix (the caller's array is untouched)

    Raises:
        InvalidArgumentError: If the matrix is not real, square or symmetric
    """
    try:
        raw = np.asarray(input_matrix)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError('input_matrix', f"not array-like: {e}") from e

    if np.iscomplexobj(raw):
        raise InvalidArgumentError('input_matrix', "must be real-valued")
    if raw.dtype == object or not np.issubdtype(raw.dtype, np.number):
        if raw.dtype != np.bool_:
            raise InvalidArgumentError(
                'input_matrix', f"must be numeric, got dtype {raw.dtype}")
    if raw.ndim != 2 or raw.shape[0] != raw.shape[1]:
        raise InvalidArgumentError(
            'input_matrix', f"must be square, got shape {raw.shape}")
    if raw.shape[0] < 2:
        raise InvalidArgumentError(
            'input_matrix', f"needs at least 2 rows, got {raw.shape[0]}")
    if not np.array_equal(raw, raw.T):
        raise InvalidArgumentError('input_matrix', "must equal its transpose")

    matrix = np.array(raw, dtype=np.float64, copy=True)
    matrix.setflags(write=False)
    return matrix


# =============================================================================
# YAML LOADING
# =============================================================================

def load_topology_config(path: Union[str, Path], **overrides) -> TopologyConfig:
    """
    Load a TopologyConfig from a YAML mapping of field names.

    Args:
        path: YAML file
        **overrides: Field values that take precedence over the file

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidArgumentError: On unknown keys or invalid values
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Topology config not found: {path}")

    with open(path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise InvalidArgumentError(str(path), "config file must contain a mapping")

    raw.update(overrides)
    known = {f.name for f in fields(TopologyConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidArgumentError(unknown[0], f"unknown option in {path.name}")

    return TopologyConfig(**raw)


def list_available_presets(preset_dir: Path = None) -> List[str]:
    """List bundled preset names."""
    if preset_dir is None:
        preset_dir = PRESET_DIR

    if not preset_dir.exists():
        return []

    return sorted(
        f.stem for f in preset_dir.glob('*.yaml')
        if not f.name.startswith('_')
    )


def load_preset(name: str, preset_dir: Path = None, **overrides) -> TopologyConfig:
    """
    Load a bundled preset by name.

    Raises:
        FileNotFoundError: If no preset has that name
    """
    if preset_dir is None:
        preset_dir = PRESET_DIR

    yaml_path = preset_dir / f"{name}.yaml"
    if not yaml_path.exists():
        raise FileNotFoundError(
            f"Preset not found: {yaml_path}\n"
            f"Available presets: {list_available_presets(preset_dir)}"
        )
    return load_topology_config(yaml_path, **overrides)
