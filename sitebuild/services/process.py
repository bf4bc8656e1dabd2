"""
Async subprocess runner used by the git and hugo stages.
"""

import asyncio
import os
from dataclasses import dataclass

from sitebuild.core.exceptions import CommandTimeoutError
from sitebuild.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Exit status and combined stdout/stderr of a finished command."""

    args: list[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(
    args: list[str],
    cwd: str | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """
    Run an external command and capture its combined output.

    Args:
        args: Executable and arguments
        cwd: Working directory
        timeout: Seconds before the process is killed, None for no limit
        env: Extra environment variables on top of the current environment

    Returns:
        CommandResult, also for nonzero exits

    Raises:
        CommandTimeoutError: If the command runs longer than ``timeout``
        OSError: If the executable cannot be started
    """
    logger.debug(f"Running {' '.join(args)} (cwd={cwd})")

    proc_env = None
    if env:
        proc_env = {**os.environ, **env}

    proc = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        env=proc_env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise CommandTimeoutError(f"{args[0]} did not finish within {timeout:g}s")

    output = stdout.decode("utf-8", errors="replace") if stdout else ""
    return CommandResult(args=list(args), returncode=proc.returncode, output=output)
