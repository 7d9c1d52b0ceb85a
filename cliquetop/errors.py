"""
cliquetop Errors
================

One exception class per failure kind. Every error carries the pipeline
stage it was raised in, so callers can tell a bad option from a crashed
engine without parsing messages.

Usage:
    from cliquetop.errors import CliqueTopError, FileCollisionError

    try:
        result = compute_clique_topology(matrix, config)
    except FileCollisionError as e:
        print(f"{e.stage.value}: {e.path} already exists")
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union


class Stage(str, Enum):
    """Pipeline stages, in execution order."""
    VALIDATE = "validate"
    GUARD = "guard"
    ENUMERATE = "enumerate"
    PERSISTENCE = "persistence"
    ASSEMBLE = "assemble"
    CLEANUP = "cleanup"


class CliqueTopError(Exception):
    """Base class for all pipeline failures."""

    def __init__(
        self,
        message: str,
        stage: Optional[Stage] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        return f"[{self.stage.value}] {self.message}"


class InvalidArgumentError(CliqueTopError, ValueError):
    """Malformed input matrix or option value."""

    def __init__(self, option: str, message: str):
        super().__init__(f"{option}: {message}", stage=Stage.VALIDATE)
        self.option = option


class FileCollisionError(CliqueTopError, FileExistsError):
    """An intermediate file of this run already exists."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(
            f"File {Path(path).name} already exists in directory {Path(path).parent}.",
            stage=Stage.GUARD,
            path=path,
        )


class ExternalToolError(CliqueTopError):
    """Enumeration or persistence engine failed or produced no output."""
    pass


class ParseError(CliqueTopError):
    """Engine output exists but does not match the expected dimensions."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        if path is not None:
            message = f"{Path(path).name}: {message}"
        super().__init__(message, stage=Stage.ASSEMBLE, path=path)


class CleanupError(CliqueTopError):
    """One or more intermediate files could not be deleted."""

    def __init__(self, failures: List[Tuple[Path, OSError]]):
        names = ", ".join(p.name for p, _ in failures)
        super().__init__(
            f"Could not delete {len(failures)} file(s): {names}",
            stage=Stage.CLEANUP,
            path=failures[0][0] if failures else None,
        )
        self.failures = failures
