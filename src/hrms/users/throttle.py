from __future__ import annotations

import math
import threading
from datetime import datetime, timedelta
from typing import Callable

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LOGIN_DECAY_MINUTES, DEFAULT_LOGIN_MAX_ATTEMPTS


class LoginThrottle:
    """Counts failed logins per client key inside a decay window.

    Process-local; each worker keeps its own counters.
    """

    def __init__(
        self,
        *,
        max_attempts: int = DEFAULT_LOGIN_MAX_ATTEMPTS,
        decay_minutes: int = DEFAULT_LOGIN_DECAY_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._max_attempts = int(max_attempts)
        self._decay = timedelta(minutes=int(decay_minutes))
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (attempts, window expiry)
        self._hits: dict[str, tuple[int, datetime]] = {}

    def _current(self, key: str) -> tuple[int, datetime]:
        entry = self._hits.get(key)
        if entry and entry[1] <= self._clock():
            del self._hits[key]
            return 0, self._clock()
        return entry or (0, self._clock())

    def too_many_attempts(self, key: str) -> bool:
        with self._lock:
            attempts, _ = self._current(key)
            return attempts >= self._max_attempts

    def available_in(self, key: str) -> int:
        """Seconds until the key may try again."""

        with self._lock:
            attempts, expires_at = self._current(key)
            if attempts == 0:
                return 0
            return max(0, math.ceil((expires_at - self._clock()).total_seconds()))

    def hit(self, key: str) -> int:
        with self._lock:
            attempts, expires_at = self._current(key)
            if attempts == 0:
                expires_at = self._clock() + self._decay
            self._hits[key] = (attempts + 1, expires_at)
            return attempts + 1

    def clear(self, key: str) -> None:
        with self._lock:
            self._hits.pop(key, None)
