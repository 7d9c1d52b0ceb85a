"""cliquetop configuration module."""

from cliquetop.config.topology import (
    TopologyConfig,
    ENGINES,
    default_base_directory,
    validate_matrix,
    load_topology_config,
    load_preset,
    list_available_presets,
)

__all__ = [
    'TopologyConfig',
    'ENGINES',
    'default_base_directory',
    'validate_matrix',
    'load_topology_config',
    'load_preset',
    'list_available_presets',
]
