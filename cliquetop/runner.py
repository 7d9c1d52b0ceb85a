"""
cliquetop Runner (Orchestrator)

Runs one clique-topology computation, strictly in order:

    validate -> guard -> enumerate -> persistence -> assemble -> [cleanup]

- Any failure aborts the run; there are no retries and no partial results
- Files written before a failure stay on disk for diagnosis
- Cleanup only runs after a successful assemble, and only without keep_files
- Components raise; this module is the one place failures get logged

Usage:
    from cliquetop.runner import compute_clique_topology

    betti, densities, intervals, unbounded = compute_clique_topology(matrix)

    config = TopologyConfig(max_betti_number=2, engine='gudhi')
    result = compute_clique_topology(matrix, config)
    print(result.summary())
"""

import logging
import time
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import numpy as np

from cliquetop.config.topology import TopologyConfig, validate_matrix
from cliquetop.engines import BaseEngine, enumerate_cliques_and_write_to_file, get_engine
from cliquetop.errors import CleanupError, CliqueTopError, ExternalToolError, ParseError, Stage
from cliquetop.topology.assemble import assemble_results
from cliquetop.topology.result import TopologyResult
from cliquetop.workspace import Workspace, WorkspaceFiles

logger = logging.getLogger(__name__)


def _from_os_error(stage: Stage, e: OSError, directory: Path) -> CliqueTopError:
    """Stage-appropriate error for a raw filesystem failure."""
    if stage == Stage.CLEANUP:
        return CleanupError([(Path(e.filename) if e.filename else directory, e)])
    if stage in (Stage.ENUMERATE, Stage.PERSISTENCE):
        return ExternalToolError(str(e), stage=stage, path=e.filename)
    if stage == Stage.ASSEMBLE:
        return ParseError(str(e), path=e.filename)
    return CliqueTopError(str(e), stage=stage, path=e.filename)


class TopologyRunner:
    """
    Executes the pipeline for one configuration.

    Attributes:
        config: Validated TopologyConfig
        files: Intermediate file set for config's (work_directory, file_prefix)
        engine: Persistence engine selected by config.engine
        timings: Elapsed seconds per completed stage of the last run
    """

    def __init__(
        self,
        config: Optional[TopologyConfig] = None,
        engine: Optional[BaseEngine] = None,
    ):
        self.config = config if config is not None else TopologyConfig()
        self.files = WorkspaceFiles.from_config(self.config)
        self.workspace = Workspace(self.files)
        self.engine = engine if engine is not None else get_engine(self.config)
        self.timings: Dict[str, float] = {}
        self._level = logging.INFO if self.config.report_progress else logging.DEBUG

    @contextmanager
    def stage(self, stage: Stage, message: str) -> Iterator[None]:
        """
        Time a stage, tag and log its failure once, then re-raise.
        """
        logger.log(self._level, message)
        start = time.time()
        try:
            yield
        except CliqueTopError as e:
            if e.stage is None:
                e.stage = stage
            logger.error(f"Stage {stage.value} failed: {e.message}")
            raise
        except OSError as e:
            error = _from_os_error(stage, e, self.files.directory)
            logger.error(f"Stage {stage.value} failed: {error.message}")
            raise error from e
        except Exception as e:
            logger.error(f"Stage {stage.value} failed: {type(e).__name__}: {e}")
            raise

        elapsed = time.time() - start
        self.timings[stage.value] = elapsed
        logger.log(self._level, f"  {stage.value} done in {elapsed:.2f}s")

    def run(self, input_matrix: Any) -> TopologyResult:
        """
        Compute Betti curves and persistence distributions of input_matrix.

        Raises:
            InvalidArgumentError: Matrix not real, square and symmetric
            FileCollisionError: Workspace namespace already in use
            ExternalToolError: Enumeration or persistence engine failed
            ParseError: Engine output inconsistent with the run
            CleanupError: Intermediate files could not be deleted
        """
        config = self.config
        self.timings = {}

        with self.stage(Stage.VALIDATE, "Validating input matrix."):
            matrix = validate_matrix(input_matrix)

        with ExitStack() as stack:
            with self.stage(Stage.GUARD, f"Claiming '{config.file_prefix}' in {self.files.directory}."):
                stack.enter_context(self.workspace.claim())

            with self.stage(Stage.ENUMERATE, "Enumerating cliques."):
                num_filtrations = enumerate_cliques_and_write_to_file(
                    matrix,
                    config.depth_bound,
                    config.max_edge_density,
                    self.files,
                    config.write_maximal_cliques,
                )

            with self.stage(Stage.PERSISTENCE, f"Computing persistent homology with {self.engine.name}."):
                engine_result = self.engine.compute(self.files, self.files.max_dimension)
            logger.debug(engine_result.summary())

            with self.stage(Stage.ASSEMBLE, "Assembling results."):
                result = assemble_results(
                    self.files,
                    num_filtrations,
                    matrix.shape[0],
                    config.max_betti_number,
                    config.compute_betti0,
                )

            if not config.keep_files:
                with self.stage(Stage.CLEANUP, "Removing intermediate files."):
                    self.workspace.remove_files()

        result.engine = engine_result
        result.stages = dict(self.timings)
        return result


def compute_clique_topology(
    input_matrix: np.ndarray,
    config: Optional[TopologyConfig] = None,
) -> TopologyResult:
    """
    Persistent homology of the order complex of a symmetric matrix.

    Edges enter in decreasing order of matrix entry, up to
    config.max_edge_density of all N choose 2 edges.

    Args:
        input_matrix: N x N real symmetric matrix (N >= 2)
        config: Run options (default: TopologyConfig())

    Returns:
        TopologyResult; unpacks as
        (betti_curves, edge_densities, persistence_intervals, unbounded_intervals)
    """
    return TopologyRunner(config).run(input_matrix)
