"""
Persistence engine base for cliquetop.

Defines the contract shared by every persistent-homology backend: read the
simplex listing of a WorkspaceFiles set, write a Betti file and one interval
file per dimension next to it, in Perseus text format.
This file contains no backend-specific logic.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from cliquetop.errors import ExternalToolError, Stage
from cliquetop.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    """Record of one engine invocation."""
    engine_name: str
    run_id: str
    success: bool
    started_at: datetime
    completed_at: Optional[datetime] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def runtime_seconds(self) -> float:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def summary(self) -> str:
        """Human-readable summary."""
        status = "SUCCESS" if self.success else "FAILED"
        lines = [
            f"Engine: {self.engine_name}",
            f"Run ID: {self.run_id}",
            f"Status: {status}",
            f"Runtime: {self.runtime_seconds:.2f}s",
        ]
        if self.metrics:
            lines.append(f"Metrics: {self.metrics}")
        return "\n".join(lines)


class BaseEngine(ABC):
    """
    Abstract base class for persistence engines.

    Subclasses must implement:
        - name: Engine identifier
        - run(): Produce the output files

    Usage:
        class MyEngine(BaseEngine):
            name = "mine"

            def run(self, files, max_dimension):
                # ... write files.betti and files.intervals(d)
                return {'n_simplices': 42}
    """

    name: str = "base"

    def __repr__(self) -> str:
        return f"<Engine {self.name}>"

    def compute(self, files: WorkspaceFiles, max_dimension: int) -> EngineResult:
        """
        Run the engine and check its output.

        Errors are not caught here: a failed engine aborts the pipeline.

        Args:
            files: Workspace whose simplex listing is the input
            max_dimension: Highest interval file the caller will read

        Returns:
            EngineResult with timing and engine metrics

        Raises:
            ExternalToolError: If the engine fails or leaves no Betti file
        """
        result = EngineResult(
            engine_name=self.name,
            run_id=uuid.uuid4().hex[:8],
            success=False,
            started_at=datetime.now(),
            parameters={'input': files.simplices.name, 'max_dimension': max_dimension},
        )

        if not files.simplices.exists():
            raise ExternalToolError(
                f"{self.name}: input {files.simplices.name} is missing",
                stage=Stage.PERSISTENCE,
                path=files.simplices,
            )

        metrics = self.run(files, max_dimension)

        if not files.betti.exists():
            raise ExternalToolError(
                f"{self.name} produced no output ({files.betti.name} not written)",
                stage=Stage.PERSISTENCE,
                path=files.betti,
            )

        result.success = True
        result.metrics = metrics or {}
        result.completed_at = datetime.now()
        logger.debug(f"Engine {self.name} [{result.run_id}] finished in {result.runtime_seconds:.2f}s")
        return result

    @abstractmethod
    def run(self, files: WorkspaceFiles, max_dimension: int) -> Dict[str, Any]:
        """
        Produce the Betti and interval files. Subclasses must implement.

        Returns:
            Dict of metrics/summary statistics
        """
        pass
