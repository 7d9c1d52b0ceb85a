"""
cliquetop Workspace
===================

Intermediate files of one run, keyed by (work_directory, file_prefix).

1. WorkspaceFiles names every file a run may write, as absolute paths
2. Workspace.claim() takes an exclusive lock file, then refuses the run if
   any target already exists
3. Workspace.remove_files() deletes whatever the run produced

The process working directory is never changed. External tools are started
with cwd=files.directory instead.

Usage:
    files = WorkspaceFiles.from_config(config)
    workspace = Workspace(files)

    with workspace.claim():
        ...  # run stages
        if not config.keep_files:
            workspace.remove_files()
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

from cliquetop.errors import CleanupError, FileCollisionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkspaceFiles:
    """Absolute paths of every intermediate file of a run."""
    directory: Path
    prefix: str
    max_dimension: int  # highest interval file index (max_betti_number + 1)

    @classmethod
    def from_config(cls, config) -> 'WorkspaceFiles':
        return cls(
            directory=Path(config.work_directory).resolve(),
            prefix=config.file_prefix,
            max_dimension=config.max_betti_number + 1,
        )

    @property
    def simplices(self) -> Path:
        return self.directory / f"{self.prefix}_simplices.txt"

    @property
    def max_simplices(self) -> Path:
        return self.directory / f"{self.prefix}_max_simplices.txt"

    @property
    def homology_prefix(self) -> str:
        """Output prefix handed to the persistence engine."""
        return f"{self.prefix}_homology"

    @property
    def betti(self) -> Path:
        return self.directory / f"{self.homology_prefix}_betti.txt"

    def intervals(self, dimension: int) -> Path:
        return self.directory / f"{self.homology_prefix}_{dimension}.txt"

    @property
    def lock(self) -> Path:
        return self.directory / f"{self.prefix}.lock"

    def all_files(self) -> List[Path]:
        """Every output file, in guard-check order. The lock is not included."""
        return [
            self.max_simplices,
            self.simplices,
            self.betti,
            *(self.intervals(d) for d in range(self.max_dimension + 1)),
        ]

    def existing_files(self) -> List[Path]:
        return [p for p in self.all_files() if p.exists()]


class Workspace:
    """Guard and cleanup for one WorkspaceFiles set."""

    def __init__(self, files: WorkspaceFiles):
        self.files = files
        self._claimed = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    def _acquire_lock(self) -> None:
        lock = self.files.lock
        try:
            fd = os.open(lock, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            raise FileCollisionError(lock) from None
        with os.fdopen(fd, 'w') as f:
            f.write(f"{os.getpid()}\n")
        logger.debug(f"Workspace lock acquired: {lock}")

    def _release_lock(self) -> None:
        try:
            self.files.lock.unlink()
            logger.debug(f"Workspace lock released: {self.files.lock}")
        except FileNotFoundError:
            logger.warning(f"Workspace lock vanished before release: {self.files.lock}")

    def check_collisions(self) -> None:
        """
        Raise FileCollisionError for the first target that already exists.

        Existing files are never opened or modified.
        """
        for path in self.files.all_files():
            if path.exists():
                raise FileCollisionError(path)

    @contextmanager
    def claim(self) -> Iterator['Workspace']:
        """
        Claim the (directory, prefix) namespace for the duration of a run.

        The lock file is created atomically, so two processes racing for
        the same prefix cannot both get past this point.

        Raises:
            FileCollisionError: If the lock or any target file exists
        """
        self._acquire_lock()
        try:
            self.check_collisions()
        except FileCollisionError:
            self._release_lock()
            raise

        self._claimed = True
        try:
            yield self
        finally:
            self._claimed = False
            self._release_lock()

    def remove_files(self) -> List[Path]:
        """
        Delete every file of the set that exists.

        All deletions are attempted even if some fail.

        Returns:
            Paths actually removed

        Raises:
            CleanupError: If any existing file could not be deleted
        """
        removed: List[Path] = []
        failures: List[Tuple[Path, OSError]] = []

        for path in self.files.all_files():
            if not path.exists():
                continue
            try:
                path.unlink()
                removed.append(path)
            except OSError as e:
                failures.append((path, e))

        logger.debug(f"Removed {len(removed)} intermediate file(s) from {self.files.directory}")

        if failures:
            error = CleanupError(failures)
            raise error from failures[0][1]

        return removed
