# utils/cache_utils.py
import json
import threading
import time

from django.conf import settings

OPTIONS_KEY = "dropdown_options"
SUMMARY_KEY = "summary_stats"


class AggregateCache:
    """
    Short-lived cache for the dropdown option index and the summary statistics.

    Values are stored as JSON blobs, so a hit hands back exactly what was
    stored. An entry older than `ttl` seconds counts as absent. The clock is
    injectable so tests can move time forward.
    """

    def __init__(self, ttl: int = 300, clock=time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries = {}
        self._generation = 0
        self._lock = threading.Lock()

    def _entry(self, value, ttl):
        ttl = self.ttl if ttl is None else ttl
        return {"value": value, "expire_at": self.clock() + ttl if ttl else None}

    def set(self, key: str, value: str, ttl: int = None):
        entry = self._entry(value, ttl)
        with self._lock:
            self._entries[key] = entry

    def get(self, key: str):
        """Return the stored blob, or None if expired or not found."""
        with self._lock:
            item = self._entries.get(key)
            if not item:
                return None
            if item["expire_at"] is not None and self.clock() > item["expire_at"]:
                del self._entries[key]
                return None
            return item["value"]

    def delete(self, key: str):
        with self._lock:
            self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._entries.clear()

    # -----------------------------
    # Aggregates
    # -----------------------------
    def _load_through(self, key: str, loader, **dump_kwargs) -> str:
        """
        Serve `key` from the cache, or run `loader` and store its JSON.
        The result is only stored if no invalidate() ran while the loader did.
        """
        blob = self.get(key)
        if blob is not None:
            return blob
        with self._lock:
            generation = self._generation
        blob = json.dumps(loader(), sort_keys=True, **dump_kwargs)
        entry = self._entry(blob, None)
        with self._lock:
            if generation == self._generation:
                self._entries[key] = entry
        return blob

    def get_options(self, loader) -> str:
        """Option index as a JSON string; `loader` runs only on a miss."""
        return self._load_through(OPTIONS_KEY, loader, ensure_ascii=False)

    def get_summary(self, loader) -> dict:
        return json.loads(self._load_through(SUMMARY_KEY, loader))

    def invalidate(self):
        """Drop both aggregate keys; run after every successful write."""
        with self._lock:
            self._generation += 1
        self.delete(OPTIONS_KEY)
        self.delete(SUMMARY_KEY)


_aggregate_cache = None
_aggregate_guard = threading.Lock()


def get_aggregate_cache() -> AggregateCache:
    global _aggregate_cache
    with _aggregate_guard:
        if _aggregate_cache is None:
            _aggregate_cache = AggregateCache(ttl=settings.RECORDS_CACHE_TTL)
        return _aggregate_cache


def set_aggregate_cache(cache):
    """Swap the process-wide cache (tests inject one with a fake clock)."""
    global _aggregate_cache
    with _aggregate_guard:
        _aggregate_cache = cache
