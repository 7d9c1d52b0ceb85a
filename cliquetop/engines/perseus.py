"""
Perseus persistence engine.

Runs the Perseus binary shipped under <base_directory>/perseus/ on the
simplex listing:

    perseusLin nmfsimtop <prefix>_simplices.txt <prefix>_homology

Perseus writes <prefix>_homology_betti.txt and <prefix>_homology_<d>.txt
into its working directory, which is set to the workspace directory.
The call blocks until Perseus exits; there is no timeout.
"""

import logging
import platform
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Union

from cliquetop.engines.engine_base import BaseEngine
from cliquetop.errors import ExternalToolError, Stage
from cliquetop.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)


PERSEUS_BINARIES = {
    'Linux': 'perseusLin',
    'Darwin': 'perseusMac',
    'Windows': 'perseusWin.exe',
}


def perseus_executable(perseus_directory: Union[str, Path], system: Optional[str] = None) -> Path:
    """Platform-specific Perseus binary inside perseus_directory."""
    system = system or platform.system()
    if system not in PERSEUS_BINARIES:
        raise ExternalToolError(
            f"no Perseus build for platform {system!r}",
            stage=Stage.PERSISTENCE,
        )
    return Path(perseus_directory) / PERSEUS_BINARIES[system]


class PerseusEngine(BaseEngine):
    """
    Persistent homology via the external Perseus program.

    Args:
        perseus_directory: Directory holding the Perseus binaries
        executable: Explicit binary, overrides the platform lookup
    """

    name = "perseus"

    def __init__(
        self,
        perseus_directory: Union[str, Path],
        executable: Optional[Union[str, Path]] = None,
    ):
        self.perseus_directory = Path(perseus_directory)
        self.executable = Path(executable) if executable is not None else None

    def resolve_executable(self) -> Path:
        if self.executable is not None:
            return self.executable
        return perseus_executable(self.perseus_directory)

    def command(self, files: WorkspaceFiles) -> list:
        return [
            str(self.resolve_executable()),
            'nmfsimtop',
            files.simplices.name,
            files.homology_prefix,
        ]

    def run(self, files: WorkspaceFiles, max_dimension: int) -> Dict[str, Any]:
        executable = self.resolve_executable()
        if not executable.is_file():
            raise ExternalToolError(
                f"Perseus binary not found: {executable}",
                stage=Stage.PERSISTENCE,
                path=executable,
            )

        cmd = self.command(files)
        logger.debug(f"Running {' '.join(cmd)} in {files.directory}")
        try:
            result = subprocess.run(
                cmd,
                cwd=files.directory,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ExternalToolError(
                f"could not start Perseus: {e}",
                stage=Stage.PERSISTENCE,
                path=executable,
            ) from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise ExternalToolError(
                f"Perseus exited with status {result.returncode}: {detail}",
                stage=Stage.PERSISTENCE,
                path=executable,
            )

        return {'returncode': result.returncode}
