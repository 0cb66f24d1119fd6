from __future__ import annotations

import logging
import weakref
from collections import defaultdict
from enum import Enum
from typing import Callable, Optional

from cachetools import TTLCache

import configs

from .asyncache import cached
from .in_flight import InFlight
from .json_hash_key import json_hashkey
from .ttl_cache_stats import TTLCacheStats

log = logging.getLogger(__name__)

# Caches are unhashable mappings, so groups hold plain weak references
_caches: dict[CacheGroup, list[weakref.ref[TTLCache]]] = defaultdict(list)


class CacheGroup(Enum):
    ALL = "all"
    DEFAULT = "default"
    IBC = "ibc"
    INDEXER = "indexer"


CACHE_GROUPS_TTL = {
    CacheGroup.DEFAULT: configs.DEFAULT_CACHE_TTL,
    CacheGroup.IBC: configs.CHANNEL_CACHE_TTL,
    CacheGroup.INDEXER: configs.INDEXER_CACHE_TTL,
}

CACHE_GROUPS_TTL[CacheGroup.ALL] = min(CACHE_GROUPS_TTL.values())


def new_ttl_cache(
    group: CacheGroup = CacheGroup.DEFAULT,
    maxsize: int = 100,
    ttl: float = None,
) -> TTLCache | TTLCacheStats:
    """Create a TTL cache registered in group, so it is reachable by clear_caches and get_stats"""
    ttl = CACHE_GROUPS_TTL[group] if ttl is None else ttl
    cache = TTLCacheStats(maxsize, ttl) if configs.CACHE_STATS else TTLCache(maxsize, ttl)

    _caches[group].append(weakref.ref(cache))
    return cache


def _get_caches(group: CacheGroup) -> list[TTLCache]:
    groups = list(_caches) if group == CacheGroup.ALL else [group]
    caches = []
    for g in groups:
        alive = [cache for ref in _caches[g] if (cache := ref()) is not None]
        _caches[g] = [weakref.ref(cache) for cache in alive]
        caches.extend(alive)
    return caches


def ttl_cache(
    group: CacheGroup | Callable = CacheGroup.DEFAULT,
    maxsize: int = 100,
    ttl: Optional[int | float] = None,
):
    """TTL cache decorator for sync and async functions with safe global clear function"""
    if callable(group):
        # ttl_cache was applied directly
        func = group
        cache = new_ttl_cache(CacheGroup.DEFAULT, maxsize, ttl)
        return cached(cache, key=json_hashkey)(func)
    if isinstance(group, CacheGroup):
        cache = new_ttl_cache(group, maxsize, ttl)
        return cached(cache, key=json_hashkey)
    raise TypeError("Expected first argument to be a CacheGroup or a callable")


def clear_caches(
    group: CacheGroup = CacheGroup.DEFAULT,
    ttl_treshold: Optional[int | float] = None,
    clear_all: bool = False,
):
    ttl_treshold = CACHE_GROUPS_TTL[group] if ttl_treshold is None else ttl_treshold
    caches_clear = _get_caches(group)
    for cache in caches_clear:
        if cache.ttl <= ttl_treshold or clear_all:
            cache.clear()
    log.debug(f"Cleared {len(caches_clear)} caches of {group=}")


def get_stats() -> dict[str, int]:
    if not configs.CACHE_STATS:
        raise Exception("Stats only available if configs.CACHE_STATS=True")
    all_stats = [
        cache.stats() for cache in _get_caches(CacheGroup.ALL) if isinstance(cache, TTLCacheStats)
    ]
    return {
        "n_hit": sum(s["n_hit"] for s in all_stats),
        "n_miss": sum(s["n_miss"] for s in all_stats),
        "n_hit_total": sum(s["n_hit_total"] for s in all_stats),
        "n_miss_total": sum(s["n_miss_total"] for s in all_stats),
    }


__all__ = [
    "CacheGroup",
    "InFlight",
    "cached",
    "clear_caches",
    "get_stats",
    "json_hashkey",
    "new_ttl_cache",
    "ttl_cache",
]
