"""Stage passes and their orchestration.

This package contains discovery, the analysis/generation scheduler, the
invocation deadline, and the `ReadAloudPipeline` that wires them to config.
"""

from .discovery import DiscoveryStage
from .orchestrator import ReadAloudPipeline
from .runtime import Deadline, PassReport
from .scheduler import StageScheduler

__all__ = [
    "Deadline",
    "DiscoveryStage",
    "PassReport",
    "ReadAloudPipeline",
    "StageScheduler",
]
