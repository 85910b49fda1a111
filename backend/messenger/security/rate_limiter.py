"""
Rate limiting for the login and message-send surfaces.

Sliding-log limiter keyed by client address. Each surface gets its own
instance (and therefore its own counters and window).
"""
from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Deque, Dict


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    # Seconds until the oldest recorded attempt leaves the window
    retry_after: float


class RateLimiter:
    """In-memory sliding-window rate limiter, safe to share between threads."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: Dict[str, Deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def _prune(self, attempts: Deque[float], now: float) -> None:
        window_start = now - self.window_seconds
        while attempts and attempts[0] <= window_start:
            attempts.popleft()

    def hit(self, key: str) -> RateLimitResult:
        """
        Count an attempt for ``key`` if the window still has room.

        Denied attempts are not recorded, so at most ``max_attempts`` are
        ever stored per window and the key frees up as soon as the oldest
        one ages out.

        Once per window the call also drops keys whose attempts have all
        aged out, so idle addresses do not accumulate.
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            attempts = self._attempts.setdefault(key, deque())
            self._prune(attempts, now)

            if len(attempts) < self.max_attempts:
                attempts.append(now)
                allowed = True
            else:
                allowed = False

            retry_after = attempts[0] + self.window_seconds - now if attempts else 0.0
            return RateLimitResult(
                allowed=allowed,
                limit=self.max_attempts,
                remaining=self.max_attempts - len(attempts),
                retry_after=max(0.0, retry_after),
            )

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    @property
    def tracked_keys(self) -> int:
        """Number of keys currently tracked."""
        with self._lock:
            return len(self._attempts)

    def _sweep(self, now: float) -> int:
        stale = []
        for key, attempts in self._attempts.items():
            self._prune(attempts, now)
            if not attempts:
                stale.append(key)
        for key in stale:
            del self._attempts[key]
        self._last_sweep = now
        return len(stale)

    def cleanup(self) -> int:
        """Drop keys with no attempts left in the window. Returns how many were removed."""
        with self._lock:
            return self._sweep(self._clock())
