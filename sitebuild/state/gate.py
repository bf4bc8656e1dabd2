"""
Thread-safe single-flight gate for site builds.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from sitebuild.core.exceptions import BuildInProgressError


class BuildGate:
    """
    Allows at most one build to run at a time.

    Attempts that find the gate held are rejected, never queued. The lock is
    only ever acquired without blocking, so holding it across ``await`` points
    cannot stall the event loop.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._branch: str | None = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def current_branch(self) -> str | None:
        """Branch of the build holding the gate, if any."""
        return self._branch

    def try_acquire(self, branch: str) -> bool:
        """Claim the gate for ``branch``. Returns False if already held."""
        if not self._lock.acquire(blocking=False):
            return False
        self._branch = branch
        return True

    def release(self) -> None:
        """Free the gate. Releasing a free gate is a no-op."""
        self._branch = None
        try:
            self._lock.release()
        except RuntimeError:
            pass

    @contextmanager
    def claim(self, branch: str) -> Iterator[None]:
        """
        Hold the gate for the duration of the block.

        Raises:
            BuildInProgressError: If another build holds the gate
        """
        if not self.try_acquire(branch):
            raise BuildInProgressError(
                f"build of {self._branch or 'unknown branch'} in progress, rejected {branch}"
            )
        try:
            yield
        finally:
            self.release()
