"""Invocation runtime values shared by pipeline stages.

Responsibilities:
- Represent the wall-clock budget of one invocation as an explicit deadline.
- Collect per-pass counters for CLI summaries and logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic
from typing import Callable


@dataclass(slots=True)
class Deadline:
    """Cooperative wall-clock budget checked only at row boundaries.

    Attributes:
        budget_seconds: Ceiling kept safely under the host's hard execution limit.
        clock: Monotonic clock; injectable for tests.
    """

    budget_seconds: float
    clock: Callable[[], float] = monotonic
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def elapsed_seconds(self) -> float:
        return self.clock() - self.started_at

    def expired(self) -> bool:
        """Return whether the budget is exceeded and no further row may start."""

        return self.elapsed_seconds() > self.budget_seconds


@dataclass(slots=True)
class PassReport:
    """Counters for one stage pass.

    Attributes:
        stage: Stage name (`discover`, `analyze`, `generate`).
        examined: Rows (or source documents) inspected.
        advanced: Rows created or moved to a later state.
        deferred: Rows left for a later pass after a source or provider fault.
        skipped: Rows skipped for a consistency fault.
        halted: Whether the pass stopped early at the deadline.
    """

    stage: str
    examined: int = 0
    advanced: int = 0
    deferred: int = 0
    skipped: int = 0
    halted: bool = False

    def as_log_context(self) -> dict[str, object]:
        return {
            "examined": self.examined,
            "advanced": self.advanced,
            "deferred": self.deferred,
            "skipped": self.skipped,
            "halted": "true" if self.halted else "false",
        }
