"""
cliquetop - Clique Topology of Symmetric Matrices
=================================================

Persistent homology of the order complex of a real symmetric matrix:
edges are added in decreasing order of entry value, the clique complex of
every graph in the family is computed, and the result is reported as Betti
curves and persistence-lifetime distributions.

Architecture:
    - config/:    TopologyConfig, matrix validation, YAML presets
    - workspace:  intermediate file set, claim lock, cleanup
    - engines/:   clique enumeration, Perseus and gudhi backends
    - topology/:  reading engine output into result arrays
    - runner.py:  the pipeline

Usage:
    from cliquetop import compute_clique_topology, TopologyConfig

    config = TopologyConfig(max_betti_number=2, max_edge_density=1.0)
    betti, densities, intervals, unbounded = compute_clique_topology(matrix, config)
"""

__version__ = "1.0.0"

from cliquetop.config.topology import TopologyConfig, load_preset, load_topology_config
from cliquetop.errors import (
    CliqueTopError,
    InvalidArgumentError,
    FileCollisionError,
    ExternalToolError,
    ParseError,
    CleanupError,
    Stage,
)
from cliquetop.topology.result import TopologyResult
from cliquetop.runner import TopologyRunner, compute_clique_topology

__all__ = [
    'compute_clique_topology',
    'TopologyRunner',
    'TopologyConfig',
    'TopologyResult',
    'load_preset',
    'load_topology_config',
    'CliqueTopError',
    'InvalidArgumentError',
    'FileCollisionError',
    'ExternalToolError',
    'ParseError',
    'CleanupError',
    'Stage',
    '__version__',
]
