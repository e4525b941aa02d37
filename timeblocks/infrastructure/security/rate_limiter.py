# timeblocks/infrastructure/security/rate_limiter.py

import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from timeblocks.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _Window:
    started_at_ms: float
    count: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)


class RateLimiter:
    """Fixed-window counter: at most ``max_requests`` per ``window_ms`` per key.

    Windows reset wholesale, so up to 2x the limit can pass in a span that
    straddles a boundary. Entries are never evicted; one is kept per distinct
    key. ``max_requests <= 0`` disables limiting.
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self._window_ms = window_ms
        self._max = max_requests
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        # guards creation of entries only; counting uses the per-key lock
        self._registry_lock = threading.Lock()

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _window_for(self, key: str, now_ms: float) -> _Window:
        window = self._windows.get(key)
        if window is None:
            with self._registry_lock:
                window = self._windows.setdefault(key, _Window(started_at_ms=now_ms))
        return window

    def try_consume(self, key: str) -> bool:
        if self._max <= 0:
            return True

        now_ms = self._now_ms()
        window = self._window_for(key, now_ms)
        with window.lock:
            if now_ms - window.started_at_ms >= self._window_ms:
                window.started_at_ms = now_ms
                window.count = 0
                logger.debug("rate_limit_window_reset", key=key)

            if window.count >= self._max:
                logger.warning("rate_limit_exceeded", key=key, count=window.count, max=self._max)
                return False

            window.count += 1
            logger.debug("rate_limit_consumed", key=key, count=window.count, max=self._max)
            return True
