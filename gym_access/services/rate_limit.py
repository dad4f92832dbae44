import threading
import time
from collections import deque
from typing import Callable, Protocol


class CounterStore(Protocol):
    def get(self, key: str, now: float) -> int: ...

    def increment(self, key: str, ttl_seconds: int, now: float) -> int: ...

    def delete(self, key: str) -> None: ...


class InMemoryCounterStore:
    """Key-expiring counters; a key's TTL starts at its first increment.

    Expired keys are dropped on read, and swept from the whole store on write
    at most once per ``prune_interval`` seconds.
    """

    def __init__(self, prune_interval: float = 60.0) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, tuple[int, float]] = {}
        self._prune_interval = prune_interval
        self._next_prune = 0.0

    def _prune(self, now: float) -> None:
        if now < self._next_prune:
            return
        for key in [key for key, (_, expires_at) in self._counters.items() if expires_at <= now]:
            del self._counters[key]
        self._next_prune = now + self._prune_interval

    def get(self, key: str, now: float) -> int:
        with self._lock:
            entry = self._counters.get(key)
            if entry is None:
                return 0
            count, expires_at = entry
            if expires_at <= now:
                del self._counters[key]
                return 0
            return count

    def increment(self, key: str, ttl_seconds: int, now: float) -> int:
        with self._lock:
            self._prune(now)
            entry = self._counters.get(key)
            if entry is None or entry[1] <= now:
                entry = (0, now + ttl_seconds)
            count = entry[0] + 1
            self._counters[key] = (count, entry[1])
            return count

    def delete(self, key: str) -> None:
        with self._lock:
            self._counters.pop(key, None)


class LoginThrottle:
    def __init__(
        self,
        store: CounterStore,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock

    @staticmethod
    def key_for(identifier: str) -> str:
        return f"login:{identifier.strip().lower()}"

    def is_blocked(self, identifier: str) -> bool:
        return self.store.get(self.key_for(identifier), self._clock()) >= self.max_attempts

    def record_failure(self, identifier: str) -> int:
        return self.store.increment(self.key_for(identifier), self.window_seconds, self._clock())

    def reset(self, identifier: str) -> None:
        self.store.delete(self.key_for(identifier))


class RateLimiter:
    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.time) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: dict[str, deque[float]] = {}
        self._next_prune = 0.0

    def _prune(self, cutoff: float, now: float) -> None:
        # Drop buckets whose newest request has left the window.
        if now < self._next_prune:
            return
        for key in [key for key, bucket in self._requests.items() if not bucket or bucket[-1] <= cutoff]:
            del self._requests[key]
        self._next_prune = now + self.window_seconds

    def allow(self, key: str, now: float | None = None) -> bool:
        now = now if now is not None else self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            self._prune(cutoff, now)
            bucket = self._requests.setdefault(key, deque())
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()
            if len(bucket) >= self.max_requests:
                return False
            bucket.append(now)
            return True
