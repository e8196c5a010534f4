"""Per-user chat request counter.

Held in process memory only: it resets on logout and on restart. The counter
never rejects anything, callers compare it with their own limit.
"""

import threading
from collections import Counter


class QuotaCounter:
    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> int:
        with self._lock:
            return self._counts[user_id]

    def increment(self, user_id: str) -> int:
        with self._lock:
            self._counts[user_id] += 1
            return self._counts[user_id]

    def reset(self, user_id: str) -> None:
        with self._lock:
            self._counts.pop(user_id, None)
