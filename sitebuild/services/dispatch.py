"""
Run a build in the foreground or as a detached background task.
"""

import asyncio

from sitebuild.core.logging import get_logger
from sitebuild.models.build import BuildOutcome, TriggerSource
from sitebuild.models.target import BranchTarget, DispatchMode
from sitebuild.services.builder import SiteBuilder

logger = get_logger(__name__)

# Strong references so detached builds are not garbage collected mid-run.
_background_builds: set[asyncio.Task] = set()


async def dispatch_build(
    builder: SiteBuilder,
    source: TriggerSource,
    target: BranchTarget,
    mode: DispatchMode = DispatchMode.SYNC,
) -> BuildOutcome | None:
    """
    Hand a build to the builder.

    Returns the outcome for sync dispatch, None for async dispatch which
    returns as soon as the task is scheduled.
    """
    if mode is DispatchMode.SYNC:
        return await builder.attempt_build(source, target)

    task = asyncio.create_task(builder.attempt_build(source, target), name=f"build-{target.name}")
    _background_builds.add(task)

    def _handle_task_result(done_task: asyncio.Task) -> None:
        _background_builds.discard(done_task)
        try:
            done_task.result()
        except asyncio.CancelledError:
            logger.info(f"Background build of {target.branch} cancelled.")
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Background build of {target.branch} failed: {exc}")

    task.add_done_callback(_handle_task_result)
    return None


def pending_builds() -> set[asyncio.Task]:
    """Background builds that have not finished yet."""
    return set(_background_builds)
