"""
Data model for a single build attempt.
"""

from enum import Enum

from sitebuild.core.logging import get_logger

logger = get_logger(__name__)


class TriggerSource(str, Enum):
    """Origin of a build request. Only selects the success-mail policy."""

    WEBHOOK = "webhook"
    SCHEDULED = "scheduled"


class BuildOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class BuildTranscript:
    """
    Append-only log of one build attempt, mailed when the attempt ends.

    Every line goes to the application log. Lines are only buffered when
    ``enabled`` is set, i.e. when there is somebody to mail them to.
    """

    def __init__(self, enabled: bool):
        self._enabled = enabled
        self._lines: list[str] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def write(self, message: str) -> None:
        """Record a line of build output."""
        logger.info(message)
        if self._enabled:
            self._lines.append(message)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)
