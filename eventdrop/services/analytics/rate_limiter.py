"""Best-effort dedup of analytics counters.

The recency map lives in process memory, so it is only exact for a single
instance (or sticky routing). Several replicas each keep their own map and a
repeat hit routed elsewhere is counted again; those deployments need a shared
store with per-key TTLs instead.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

DEFAULT_WINDOW_S = 300.0
DEFAULT_PRUNE_EVERY = 100


@dataclass(frozen=True)
class AnalyticsKey:
    source: str
    event_id: UUID
    kind: str


class RecencyLimiter:
    def __init__(
        self,
        window_s: float = DEFAULT_WINDOW_S,
        prune_every: int = DEFAULT_PRUNE_EVERY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_s = window_s
        self.prune_every = max(1, prune_every)
        self._clock = clock
        self._last_seen: dict[AnalyticsKey, float] = {}
        self._marks = 0

    def __len__(self) -> int:
        return len(self._last_seen)

    def seen_recently(self, key: AnalyticsKey) -> bool:
        last = self._last_seen.get(key)
        return last is not None and self._clock() - last < self.window_s

    def mark(self, key: AnalyticsKey) -> None:
        self._last_seen[key] = self._clock()
        self._marks += 1
        if self._marks % self.prune_every == 0:
            self.prune()

    def prune(self) -> int:
        cutoff = self._clock() - self.window_s
        expired = [key for key, seen in self._last_seen.items() if seen <= cutoff]
        for key in expired:
            self._last_seen.pop(key, None)
        return len(expired)
