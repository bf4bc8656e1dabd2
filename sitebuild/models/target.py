"""
Branch targets the site can be built for.
"""

from dataclasses import dataclass
from enum import Enum


class DispatchMode(str, Enum):
    """How a webhook-triggered build is run relative to the HTTP request."""

    SYNC = "sync"
    ASYNC = "async"


@dataclass(frozen=True)
class BranchTarget:
    """A named output configuration a build attempt runs against."""

    name: str
    branch: str
    output_dir: str
    base_url: str
    include_drafts: bool = False
    webhook_dispatch: DispatchMode = DispatchMode.SYNC
    schedule: str = ""


def find_target(targets: tuple[BranchTarget, ...], branch: str) -> BranchTarget | None:
    """Return the target tracking ``branch``, if any."""
    for target in targets:
        if target.branch == branch:
            return target
    return None
