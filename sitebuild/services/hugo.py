"""
Hugo site generator invocation.
"""

from sitebuild.core.exceptions import CommandTimeoutError, GenerateError
from sitebuild.core.logging import get_logger
from sitebuild.services.process import run_command

logger = get_logger(__name__)


class HugoGenerator:
    """Runs hugo inside the checked out working copy."""

    def __init__(self, hugo_path: str, workdir: str, timeout: float | None = None):
        self._hugo_path = hugo_path
        self._workdir = workdir
        self._timeout = timeout

    @staticmethod
    def build_args(output_dir: str, base_url: str, include_drafts: bool) -> list[str]:
        args = ["-d", output_dir, "--baseURL", base_url]
        if include_drafts:
            args.append("-D")
        return args

    async def generate(self, output_dir: str, base_url: str, include_drafts: bool = False) -> str:
        """
        Render the site into ``output_dir``.

        Args:
            output_dir: Directory hugo writes the site to
            base_url: Public URL the site is served from
            include_drafts: Also render draft content

        Returns:
            Combined hugo output

        Raises:
            GenerateError: If hugo fails, times out or cannot be started
        """
        command = [self._hugo_path, *self.build_args(output_dir, base_url, include_drafts)]
        try:
            result = await run_command(command, cwd=self._workdir, timeout=self._timeout)
        except CommandTimeoutError as e:
            raise GenerateError(str(e)) from e
        except OSError as e:
            raise GenerateError(f"hugo could not be started: {e}") from e

        if not result.ok:
            raise GenerateError(f"hugo exited with status {result.returncode}", output=result.output)

        logger.debug(f"hugo finished for {output_dir}")
        return result.output
