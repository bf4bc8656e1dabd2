"""
Git working copy management for the checkout stage.
"""

import os

from sitebuild.core.exceptions import CommandTimeoutError, RepositoryStateError, VcsOperationError
from sitebuild.core.logging import get_logger
from sitebuild.services.process import CommandResult, run_command

logger = get_logger(__name__)

NOT_A_REPOSITORY = "not a git repository"

# Fail instead of waiting on a credential prompt nobody will answer.
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


class GitCheckout:
    """Keeps a local clone of the site repository on a given branch."""

    def __init__(self, repo_url: str, workdir: str, git_path: str = "git", timeout: float | None = None):
        self._repo_url = repo_url
        self._workdir = workdir
        self._git_path = git_path
        self._timeout = timeout

    async def ensure_branch(self, branch: str) -> str:
        """
        Bring the working copy to the tip of ``branch``.

        Clones the repository when the working directory is not a repository
        yet, then checks out the branch and pulls.

        Returns:
            Combined git output of the steps that ran

        Raises:
            RepositoryStateError: If the working copy is dirty or unreadable
            VcsOperationError: If clone, checkout or pull fails
        """
        os.makedirs(self._workdir, exist_ok=True)
        outputs = []

        status = await self._run("status", "--porcelain=v1", "--untracked-files=no")
        if not status.ok:
            if NOT_A_REPOSITORY not in status.output.lower():
                logger.error(f"Status seems to be dirty, please check the git folder {self._workdir}")
                raise RepositoryStateError(
                    f"git status failed with exit code {status.returncode}", output=status.output
                )
            logger.info(f"Cloning repo: {self._repo_url}")
            clone = await self._run("clone", self._repo_url, self._workdir, in_workdir=False)
            outputs.append(self._check(clone, "clone"))
        elif self._tracked_changes(status.output):
            raise RepositoryStateError(
                f"working copy {self._workdir} has local changes", output=status.output
            )

        outputs.append(self._check(await self._run("checkout", branch), f"checkout {branch}"))
        outputs.append(self._check(await self._run("pull"), "pull"))
        return "".join(outputs)

    async def _run(self, *args: str, in_workdir: bool = True) -> CommandResult:
        cwd = self._workdir if in_workdir else None
        command = [self._git_path, *args]
        try:
            return await run_command(command, cwd=cwd, timeout=self._timeout, env=_GIT_ENV)
        except CommandTimeoutError as e:
            raise VcsOperationError(f"git {args[0]} timed out: {e}") from e
        except OSError as e:
            raise VcsOperationError(f"git {args[0]} could not be started: {e}") from e

    @staticmethod
    def _check(result: CommandResult, step: str) -> str:
        if not result.ok:
            raise VcsOperationError(
                f"git {step} failed with exit code {result.returncode}", output=result.output
            )
        return result.output

    @staticmethod
    def _tracked_changes(porcelain: str) -> list[str]:
        """Changed tracked files. Untracked files (hugo's lock file, resources/_gen) are ignored."""
        return [line for line in porcelain.splitlines() if line.strip() and not line.startswith("??")]
