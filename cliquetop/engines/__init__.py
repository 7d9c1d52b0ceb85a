"""
cliquetop Engines

Clique enumeration and the persistent-homology backends it feeds:
    - cliques.py:       order complex -> nmfsimtop simplex listing
    - perseus.py:       external Perseus binary
    - gudhi_engine.py:  gudhi SimplexTree, same output files
"""

from cliquetop.engines.engine_base import BaseEngine, EngineResult
from cliquetop.engines.cliques import enumerate_cliques_and_write_to_file
from cliquetop.engines.perseus import PerseusEngine


def get_engine(config) -> BaseEngine:
    """Persistence engine selected by config.engine."""
    if config.engine == 'perseus':
        return PerseusEngine(config.perseus_directory)
    if config.engine == 'gudhi':
        # gudhi is only imported when asked for
        from cliquetop.engines.gudhi_engine import GudhiEngine
        return GudhiEngine()
    raise ValueError(f"Unknown engine: {config.engine}")


__all__ = [
    'BaseEngine',
    'EngineResult',
    'PerseusEngine',
    'enumerate_cliques_and_write_to_file',
    'get_engine',
]
