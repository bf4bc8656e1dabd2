"""
Cron-style scheduler running coroutines on the event loop.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable

from croniter import croniter

from sitebuild.core.exceptions import InvalidCronExpressionError
from sitebuild.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CronJob:
    name: str
    expression: str
    func: Callable[[], Awaitable[Any]]


def next_fire_time(expression: str, now: datetime) -> datetime:
    """First time after ``now`` matching ``expression``."""
    return croniter(expression, now).get_next(datetime)


class CronScheduler:
    """
    Fires each job on its cron schedule.

    Every firing runs as its own task, so a slow job does not delay the next
    firing of any job.
    """

    def __init__(self):
        self._jobs: list[CronJob] = []
        self._loops: list[asyncio.Task] = []
        self._running: set[asyncio.Task] = set()

    @property
    def jobs(self) -> list[CronJob]:
        return list(self._jobs)

    def add_job(self, expression: str, func: Callable[[], Awaitable[Any]], name: str) -> CronJob:
        """
        Register ``func`` to run on ``expression``.

        Raises:
            InvalidCronExpressionError: If croniter cannot parse the expression
        """
        if not croniter.is_valid(expression):
            raise InvalidCronExpressionError(f"invalid cron expression for {name}: {expression!r}")
        job = CronJob(name=name, expression=expression, func=func)
        self._jobs.append(job)
        logger.info(f"Scheduled {name} at '{expression}'")
        return job

    def start(self) -> None:
        """Start one loop task per job. Must be called from a running event loop."""
        for job in self._jobs:
            self._loops.append(asyncio.create_task(self._run_job(job), name=f"cron-{job.name}"))

    async def stop(self) -> None:
        """Cancel the job loops and any firing still in progress."""
        tasks = self._loops + list(self._running)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loops.clear()
        self._running.clear()

    async def _run_job(self, job: CronJob) -> None:
        schedule = croniter(job.expression, datetime.now().astimezone())
        while True:
            fire_at = schedule.get_next(datetime)
            delay = (fire_at - datetime.now().astimezone()).total_seconds()
            await asyncio.sleep(max(delay, 0))
            self._fire(job)

    def _fire(self, job: CronJob) -> None:
        logger.debug(f"Firing {job.name}")
        task = asyncio.create_task(job.func(), name=f"cron-{job.name}-run")
        self._running.add(task)

        def _handle_task_result(done_task: asyncio.Task) -> None:
            self._running.discard(done_task)
            try:
                done_task.result()
            except asyncio.CancelledError:
                return
            except Exception as exc:  # noqa: BLE001
                logger.error(f"Scheduled job {job.name} failed: {exc}")

        task.add_done_callback(_handle_task_result)
