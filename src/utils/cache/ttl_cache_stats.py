import logging

from cachetools import TTLCache

log = logging.getLogger(__name__)


class TTLCacheStats(TTLCache):
    def __init__(self, *args, **kwargs):
        """Time-to-live cache that counts hits and misses, since last clear and in total"""
        super().__init__(*args, **kwargs)

        self.n_hit = 0
        self.n_miss = 0
        self.n_hit_total = 0
        self.n_miss_total = 0

    def clear(self):
        super().clear()
        self.n_hit = 0
        self.n_miss = 0

    def __getitem__(self, key):
        try:
            value = super().__getitem__(key)
        except KeyError:
            self.n_miss += 1
            self.n_miss_total += 1
            log.debug(f"Cache miss: {key}")
            raise
        self.n_hit += 1
        self.n_hit_total += 1
        log.debug(f"Cache hit: {key}, {value}")
        return value

    def __setitem__(self, key, value):
        super().__setitem__(key, value)
        log.debug(f"Cache set: {key}, {value}")

    def stats(self) -> dict[str, int]:
        return {
            "n_hit": self.n_hit,
            "n_miss": self.n_miss,
            "n_hit_total": self.n_hit_total,
            "n_miss_total": self.n_miss_total,
        }
