# Models - targets and per-build state
from .build import BuildOutcome, BuildTranscript, TriggerSource
from .target import BranchTarget, DispatchMode, find_target

__all__ = [
    "BranchTarget",
    "BuildOutcome",
    "BuildTranscript",
    "DispatchMode",
    "TriggerSource",
    "find_target",
]
