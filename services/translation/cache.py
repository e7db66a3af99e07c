# services/translation/cache.py
from collections import OrderedDict
from typing import Optional

from prometheus_client import Counter

CACHE_HITS = Counter("translation_cache_hits_total", "Translation cache hits")
CACHE_MISSES = Counter("translation_cache_misses_total", "Translation cache misses")
CACHE_EVICTIONS = Counter("translation_cache_evictions_total", "Entries evicted from the translation cache")


class TranslationCache:
    """
    Bounded, insertion-ordered ``key -> translation`` store.

    Eviction is FIFO: once the cache grows past ``max_size`` the entry that
    was *inserted* first is dropped.  Reading an entry does not refresh its
    position.  Entries live for the lifetime of the owning application.
    """

    def __init__(self, max_size: int = 3000):
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self._entries: "OrderedDict[str, str]" = OrderedDict()

    @staticmethod
    def make_key(source: str, target: str, text: str) -> str:
        return f"{source}|{target}|{text}"

    def get(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is None:
            CACHE_MISSES.inc()
        else:
            CACHE_HITS.inc()
        return value

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            CACHE_EVICTIONS.inc()

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
