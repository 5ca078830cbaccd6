"""Request pacing for the rate-limited synthesis provider.

Responsibilities:
- Space provider calls so a pass stays under a requests-per-minute quota.
- Keep pacing policy out of the provider adapter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic, sleep
from typing import Callable


@dataclass(slots=True)
class RateLimiter:
    """Minimum-interval pacer keyed by provider model."""

    min_interval_seconds: float = 0.0
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)

    @classmethod
    def per_minute(cls, requests_per_minute: float | None) -> RateLimiter:
        """Build a pacer for a quota; `None` or `0` disables pacing."""

        if not requests_per_minute or requests_per_minute <= 0:
            return cls()
        return cls(min_interval_seconds=60.0 / requests_per_minute)

    def acquire(self, key: str) -> float:
        """Block until `key` may issue a request; return seconds waited."""

        if self.min_interval_seconds <= 0.0:
            return 0.0
        now = self.clock()
        waited = max(0.0, self._next_allowed_at.get(key, 0.0) - now)
        if waited > 0.0:
            self.sleeper(waited)
            now = self.clock()
        self._next_allowed_at[key] = now + self.min_interval_seconds
        return waited
