"""Per-account admission control for SMS submissions.

Each account gets a fixed window that starts at its first admitted submission:
up to ``limit`` submissions are admitted until the window expires, and the
first check after expiry opens a fresh window. Windows live in a process-local
map, so the bound is best effort and resets with the process.
"""

from __future__ import annotations

import math
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Final

from coinsms.core.settings import settings

Clock = Callable[[], float]


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of a single admission check."""

    allowed: bool
    remaining: int
    retry_after: int = 0


@dataclass
class _Window:
    count: int
    expires_at: float


class _Shard:
    """One lock-protected slice of the window map.

    Every window has the same length, so insertion order is also expiry order:
    a reset moves the key to the end and expired windows collect at the front.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.lock = Lock()
        self.windows: OrderedDict[str, _Window] = OrderedDict()

    def purge(self, now: float) -> None:
        while self.windows:
            key, window = next(iter(self.windows.items()))
            if window.expires_at >= now:
                break
            del self.windows[key]

    def evict_overflow(self) -> None:
        while len(self.windows) > self.capacity:
            self.windows.popitem(last=False)


class AdmissionController:
    """Sliding-window-reset rate limiter keyed by account id."""

    def __init__(
        self,
        limit: int = 10,
        window_seconds: float = 60.0,
        *,
        max_keys: int = 100_000,
        shards: int = 16,
        clock: Clock = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        shard_count = max(1, shards)
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._shards = [
            _Shard(max(1, math.ceil(max_keys / shard_count))) for _ in range(shard_count)
        ]

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def check(self, key: str) -> AdmissionDecision:
        """Count one submission against ``key`` and decide whether to admit it."""
        now = self._clock()
        shard = self._shard_for(key)
        with shard.lock:
            window = shard.windows.get(key)
            if window is None or now > window.expires_at:
                shard.windows[key] = _Window(count=1, expires_at=now + self.window_seconds)
                shard.windows.move_to_end(key)
                shard.purge(now)
                shard.evict_overflow()
                return AdmissionDecision(allowed=True, remaining=self.limit - 1)

            if window.count >= self.limit:
                retry_after = max(1, math.ceil(window.expires_at - now))
                return AdmissionDecision(allowed=False, remaining=0, retry_after=retry_after)

            window.count += 1
            return AdmissionDecision(allowed=True, remaining=self.limit - window.count)

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.windows)
        return total

    def reset(self) -> None:
        """Forget every window."""
        for shard in self._shards:
            with shard.lock:
                shard.windows.clear()


_CONTROLLER_LOCK: Final[Lock] = Lock()
_controller: AdmissionController | None = None


def get_admission_controller() -> AdmissionController:
    """Return the process-wide admission controller."""
    global _controller
    with _CONTROLLER_LOCK:
        if _controller is None:
            _controller = AdmissionController(
                limit=settings.rate_limit_max,
                window_seconds=settings.rate_limit_window_seconds,
                max_keys=settings.rate_limit_max_keys,
                shards=settings.rate_limit_shards,
            )
        return _controller
