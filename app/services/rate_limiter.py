"""
Fixed-window, per-client request limiter
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from app.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_REQUESTS = 25
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Counts requests per client key over a fixed window.

    State lives in process memory only, so the limit is per instance and is
    lost on restart. ``allow`` performs check-and-increment under a lock.
    Expired windows are swept at most once per window length, so keys that
    stop calling do not accumulate.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._next_sweep = clock() + window_seconds
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of client windows currently held"""
        with self._lock:
            return len(self._windows)

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def allow(self, client_key: str) -> bool:
        """Record one request for ``client_key``; False when over the ceiling."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)

            window = self._windows.get(client_key)
            if window is None:
                window = _Window(count=0, reset_at=now + self._window_seconds)
                self._windows[client_key] = window
            elif now > window.reset_at:
                window.count = 0
                window.reset_at = now + self._window_seconds

            if window.count >= self._max_requests:
                logger.warning(f"Rate limit exceeded for client {client_key}")
                return False

            window.count += 1
            return True

    def _sweep(self, now: float) -> None:
        # Caller holds the lock. An expired window behaves exactly like a missing one.
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self._window_seconds
        if expired:
            logger.debug(f"Evicted {len(expired)} expired rate limit windows")

    def remaining(self, client_key: str) -> int:
        """Requests still allowed for ``client_key`` in its current window"""
        now = self._clock()
        with self._lock:
            window = self._windows.get(client_key)
            if window is None or now > window.reset_at:
                return self._max_requests
            return max(0, self._max_requests - window.count)

    def reset(self, client_key: Optional[str] = None) -> None:
        """Forget one client's window, or every window when no key is given"""
        with self._lock:
            if client_key is None:
                self._windows.clear()
            else:
                self._windows.pop(client_key, None)
