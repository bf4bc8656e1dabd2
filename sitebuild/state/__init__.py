# State - process-wide build state
from .gate import BuildGate

__all__ = ["BuildGate"]
