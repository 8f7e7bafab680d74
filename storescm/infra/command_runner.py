"""
Store script execution for storescm.

All Store script invocations go through StoreCommandRunner, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from polling and checkout logic
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from ..errors import ExternalToolFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class StoreCommandRunner:
    """
    Runs a Store script and captures its standard output.

    The command is passed to the process as an argument list; no shell is
    involved and nothing is quoted. A non-zero exit status is never
    swallowed: it becomes an ExternalToolFailure. There is no retry.

    Example:
        runner = StoreCommandRunner()
        output = runner.run(["/opt/vw/storeci", "-repository", "psql"], cwd=workspace)
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize StoreCommandRunner.

        Args:
            timeout: Seconds before the script is killed (default: no limit)
        """
        self.timeout = timeout

    def run(self, command: Sequence[str], cwd: Optional[PathLike] = None) -> str:
        """
        Run a Store script.

        Args:
            command: Argument list, script path first
            cwd: Working directory (default: current directory)

        Returns:
            The script's standard output

        Raises:
            ExternalToolFailure: If the script cannot be started, times out
                or exits with a non-zero status
        """
        args: List[str] = [str(a) for a in command]
        logger.debug(f"Running Store script: {args} (cwd={cwd})")

        try:
            result = subprocess.run(
                args,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise ExternalToolFailure(f"Store script timed out after {e.timeout}s") from e
        except OSError as e:
            raise ExternalToolFailure(f"Cannot launch Store script {args[0]!r}: {e}") from e

        logger.debug(f"Store script exited with status {result.returncode}")
        if result.returncode != 0:
            if result.stderr:
                logger.error(result.stderr.rstrip())
            raise ExternalToolFailure(
                "Store script failed",
                returncode=result.returncode,
                stderr=result.stderr or ""
            )

        return result.stdout or ""
