"""Synchronous execution of external commands."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..errors import CommandError


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured outcome of a finished command."""
    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs OS binaries and surfaces failures as CommandError.

    Commands are executed without a shell. A missing binary is reported
    with returncode 127 and a timeout with 124, the same codes a shell
    would use.
    """

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def run(
        self,
        command: Sequence[str],
        check: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run a command and capture its output.

        With check=True a non-zero exit raises CommandError carrying the
        command and its stderr.
        """
        cmd = [str(part) for part in command]
        logger.debug("Running: %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout or self.timeout,
            )
        except FileNotFoundError:
            logger.error("Command not found: %s", cmd[0])
            raise CommandError(cmd, 127, f"{cmd[0]}: command not found")
        except subprocess.TimeoutExpired:
            logger.error("Command timed out: %s", " ".join(cmd))
            raise CommandError(cmd, 124, f"timed out after {timeout or self.timeout:.0f}s")

        result = CommandResult(
            command=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

        if not result.ok:
            if check:
                logger.error("Command failed: %s", " ".join(cmd))
                logger.error("Error: %s", result.stderr.strip())
                raise CommandError(cmd, result.returncode, result.stderr)
            logger.debug("Ignoring exit %d from %s", result.returncode, cmd[0])

        return result

    def which(self, name: str) -> Optional[str]:
        """Locate a binary on PATH."""
        return shutil.which(name)
