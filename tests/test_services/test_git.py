"""
Tests for the git checkout service.
"""

import pytest
from unittest.mock import AsyncMock, patch


def _result(returncode=0, output=""):
    from sitebuild.services.process import CommandResult
    return CommandResult(args=[], returncode=returncode, output=output)


@pytest.fixture
def checkout(tmp_path):
    from sitebuild.services.git import GitCheckout
    return GitCheckout("https://github.com/example/site.git", str(tmp_path / "data"), timeout=5)


def _git_calls(mock_run):
    return [call.args[0][1:] for call in mock_run.call_args_list]


class TestGitCheckout:
    """Tests for GitCheckout class."""

    @pytest.mark.asyncio
    async def test_clones_when_not_a_repository(self, checkout, tmp_path):
        """Test clone, checkout and pull run in that order for a fresh directory."""
        workdir = str(tmp_path / "data")
        mock_run = AsyncMock(side_effect=[
            _result(128, "fatal: not a git repository (or any of the parent directories): .git\n"),
            _result(0, "Cloning into '/data'...\n"),
            _result(0, "Switched to branch 'staging'\n"),
            _result(0, "Already up to date.\n"),
        ])

        with patch("sitebuild.services.git.run_command", mock_run):
            output = await checkout.ensure_branch("staging")

        assert _git_calls(mock_run) == [
            ["status", "--porcelain=v1", "--untracked-files=no"],
            ["clone", "https://github.com/example/site.git", workdir],
            ["checkout", "staging"],
            ["pull"],
        ]
        assert mock_run.call_args_list[1].kwargs["cwd"] is None
        assert mock_run.call_args_list[2].kwargs["cwd"] == workdir
        assert "Already up to date." in output

    @pytest.mark.asyncio
    async def test_clean_repository_skips_clone(self, checkout):
        mock_run = AsyncMock(side_effect=[_result(), _result(), _result()])

        with patch("sitebuild.services.git.run_command", mock_run):
            await checkout.ensure_branch("main")

        assert _git_calls(mock_run) == [["status", "--porcelain=v1", "--untracked-files=no"], ["checkout", "main"], ["pull"]]

    @pytest.mark.asyncio
    async def test_dirty_working_copy_fails(self, checkout):
        """Test uncommitted changes stop the checkout before touching the branch."""
        from sitebuild.core.exceptions import RepositoryStateError

        mock_run = AsyncMock(return_value=_result(0, " M content/_index.md\n"))

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(RepositoryStateError) as exc_info:
                await checkout.ensure_branch("main")

        assert mock_run.call_count == 1
        assert "content/_index.md" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_untracked_build_artifacts_ignored(self, checkout):
        """Test files hugo leaves behind do not block the next build."""
        mock_run = AsyncMock(side_effect=[
            _result(0, "?? .hugo_build.lock\n?? resources/_gen/\n"),
            _result(0, "Already on 'main'\n"),
            _result(0, "Already up to date.\n"),
        ])

        with patch("sitebuild.services.git.run_command", mock_run):
            output = await checkout.ensure_branch("main")

        assert _git_calls(mock_run)[1:] == [["checkout", "main"], ["pull"]]
        assert "Already up to date." in output

    @pytest.mark.asyncio
    async def test_tracked_change_among_untracked_fails(self, checkout):
        from sitebuild.core.exceptions import RepositoryStateError

        mock_run = AsyncMock(return_value=_result(0, "?? .hugo_build.lock\n M config.toml\n"))

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(RepositoryStateError, match="config.toml"):
                await checkout.ensure_branch("main")

        assert mock_run.call_count == 1

    @pytest.mark.asyncio
    async def test_status_error_is_fatal(self, checkout):
        """Test any other status failure is surfaced without recovery."""
        from sitebuild.core.exceptions import RepositoryStateError

        mock_run = AsyncMock(return_value=_result(128, "fatal: bad object HEAD\n"))

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(RepositoryStateError, match="bad object"):
                await checkout.ensure_branch("main")

        assert mock_run.call_count == 1

    @pytest.mark.asyncio
    async def test_checkout_failure_skips_pull(self, checkout):
        from sitebuild.core.exceptions import VcsOperationError

        mock_run = AsyncMock(side_effect=[
            _result(),
            _result(1, "error: pathspec 'nope' did not match any file(s) known to git\n"),
        ])

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(VcsOperationError, match="pathspec"):
                await checkout.ensure_branch("nope")

        assert mock_run.call_count == 2

    @pytest.mark.asyncio
    async def test_clone_failure(self, checkout):
        from sitebuild.core.exceptions import VcsOperationError

        mock_run = AsyncMock(side_effect=[
            _result(128, "fatal: not a git repository\n"),
            _result(128, "fatal: repository not found\n"),
        ])

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(VcsOperationError, match="clone"):
                await checkout.ensure_branch("main")

        assert mock_run.call_count == 2

    @pytest.mark.asyncio
    async def test_pull_timeout(self, checkout):
        """Test a hung pull surfaces as a VCS error."""
        from sitebuild.core.exceptions import CommandTimeoutError, VcsOperationError

        mock_run = AsyncMock(side_effect=[_result(), _result(), CommandTimeoutError("git did not finish")])

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(VcsOperationError, match="timed out"):
                await checkout.ensure_branch("main")

    @pytest.mark.asyncio
    async def test_missing_git_binary(self, checkout):
        from sitebuild.core.exceptions import VcsOperationError

        mock_run = AsyncMock(side_effect=FileNotFoundError("git"))

        with patch("sitebuild.services.git.run_command", mock_run):
            with pytest.raises(VcsOperationError, match="could not be started"):
                await checkout.ensure_branch("main")

    @pytest.mark.asyncio
    async def test_disables_terminal_prompt(self, checkout):
        mock_run = AsyncMock(return_value=_result())

        with patch("sitebuild.services.git.run_command", mock_run):
            await checkout.ensure_branch("main")

        assert mock_run.call_args.kwargs["env"] == {"GIT_TERMINAL_PROMPT": "0"}
        assert mock_run.call_args.kwargs["timeout"] == 5
