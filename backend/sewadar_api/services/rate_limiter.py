"""In-memory fixed-window rate limiting for single-node deployments."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class _Window:
    expires_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Count hits per key inside consecutive windows of fixed length.

    Expired windows are swept at most once per `sweep_interval` seconds, so
    keys that stop arriving do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, sweep_interval: float = 60.0) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, _Window] = {}
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        expired = [key for key, window in self._windows.items() if window.expires_at <= now]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now

    def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        """Record a hit for key; False once the window already holds `limit` hits."""
        now = self._clock()
        with self._lock:
            self._sweep(now)
            window = self._windows.get(key)
            if window is None or window.expires_at <= now:
                window = _Window(expires_at=now + window_seconds)
                self._windows[key] = window
            if window.count >= limit:
                return False
            window.count += 1
            return True

    def retry_after(self, key: str) -> int:
        """Seconds until the key's current window closes"""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return 0
            return max(0, math.ceil(window.expires_at - now))

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._last_sweep = self._clock()


rate_limiter = FixedWindowRateLimiter()
