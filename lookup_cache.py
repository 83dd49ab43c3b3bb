"""Thread-safe TTL cache for near-static upstream lookups.

Entries are keyed by ``(kind, code)``. Concurrent callers asking for the
same key while it is being computed wait on the one in-flight call instead
of issuing their own (single-flight). Failures are never cached.
"""

import logging
import threading
import time
from concurrent.futures import Future

logger = logging.getLogger(__name__)


class LookupCache:
    """In-memory cache with per-entry expiry and single-flight computation.

    A ``ttl`` of 0 disables storage but keeps the de-duplication of
    concurrent identical lookups.

    Example:
        cache = LookupCache(ttl=3600, name="locations")
        airports = cache.get_or_compute("locations:AIRPORT", "NYC", fetch)
    """

    def __init__(self, ttl=3600, max_size=None, name="lookup"):
        self.ttl = ttl
        self.max_size = max_size
        self.name = name
        self._store = {}
        self._inflight = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, kind, code):
        """Return the cached value, or None if absent or expired."""
        key = (kind, code)
        with self._lock:
            return self._get_locked(key)

    def _get_locked(self, key):
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if time.time() >= expiry:
            del self._store[key]
            return None
        return value

    def set(self, kind, code, value):
        if self.ttl <= 0:
            return
        with self._lock:
            self._set_locked((kind, code), value)

    def _set_locked(self, key, value):
        if self.ttl <= 0:
            return
        if self.max_size is not None and len(self._store) >= self.max_size and key not in self._store:
            # FIFO eviction
            oldest = next(iter(self._store))
            del self._store[oldest]
        self._store[key] = (value, time.time() + self.ttl)

    def get_or_compute(self, kind, code, compute_fn):
        """Return the cached value for ``(kind, code)`` or compute it once.

        Exceptions raised by ``compute_fn`` propagate to every waiting caller
        and leave nothing cached.
        """
        key = (kind, code)
        with self._lock:
            entry = self._store.get(key)
            if entry is not None and time.time() < entry[1]:
                self._hits += 1
                return entry[0]
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
                self._misses += 1

        if not owner:
            logger.debug(f"{self.name}: waiting on in-flight lookup {key}")
            return future.result()

        try:
            value = compute_fn()
        except BaseException as e:
            with self._lock:
                self._inflight.pop(key, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._set_locked(key, value)
            self._inflight.pop(key, None)
        future.set_result(value)
        return value

    def size(self):
        with self._lock:
            return len(self._store)

    def stats(self):
        """Hit/miss counts and size."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }
