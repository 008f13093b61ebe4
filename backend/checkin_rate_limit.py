# checkin_rate_limit.py
import threading
import time
from typing import Callable, Dict


# ---------------------------
# In-memory per-client throttle
# (OK for 1 process; the table is never pruned, it grows with distinct client addresses)
# ---------------------------
class RateLimiter:
    """Allows one attempt per client address per window.

    Only allowed attempts move the window forward; a denied attempt leaves the
    stored timestamp untouched.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._last_attempt: Dict[str, float] = {}
        self._lock = threading.Lock()

    def try_acquire(self, client_id: str, window_sec: float) -> bool:
        with self._lock:
            now = self._clock()
            last = self._last_attempt.get(client_id)
            if last is not None and now - last < window_sec:
                return False
            self._last_attempt[client_id] = now
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_attempt)
