"""
cliquetop Topology

Reads persistence-engine output back into Betti curves and
persistence-lifetime distributions.
"""

from .persistence import PersistenceDiagram
from .result import TopologyResult
from .assemble import (
    read_betti_curves,
    read_persistence_intervals,
    persistence_interval_distribution,
    edge_densities,
    assemble_results,
)

__all__ = [
    'PersistenceDiagram',
    'TopologyResult',
    'read_betti_curves',
    'read_persistence_intervals',
    'persistence_interval_distribution',
    'edge_densities',
    'assemble_results',
]
