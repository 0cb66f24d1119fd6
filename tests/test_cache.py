import asyncio

import pytest
from cachetools import TTLCache

import configs
from utils.cache import (
    CacheGroup,
    InFlight,
    cached,
    clear_caches,
    get_stats,
    json_hashkey,
    new_ttl_cache,
    ttl_cache,
)
from utils.cache.ttl_cache_stats import TTLCacheStats


def test_in_flight_shares_one_call():
    calls = 0

    async def fetch() -> int:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return calls

    async def main():
        in_flight: InFlight[str, int] = InFlight()
        results = await asyncio.gather(*(in_flight.run("key", fetch) for _ in range(5)))
        assert results == [1] * 5
        assert "key" not in in_flight and len(in_flight) == 0
        # Completed keys start a new call
        assert await in_flight.run("key", fetch) == 2

    asyncio.run(main())


def test_in_flight_propagates_errors_to_every_waiter():
    async def fail():
        await asyncio.sleep(0.01)
        raise ValueError("boom")

    async def main():
        in_flight: InFlight[str, None] = InFlight()
        results = await asyncio.gather(
            *(in_flight.run("key", fail) for _ in range(3)), return_exceptions=True
        )
        assert all(isinstance(r, ValueError) for r in results)
        assert len(in_flight) == 0

    asyncio.run(main())


def test_in_flight_cancelled_waiter_does_not_cancel_call():
    async def main():
        finished = asyncio.Event()

        async def fetch():
            await asyncio.sleep(0.01)
            finished.set()
            return 1

        in_flight: InFlight[str, int] = InFlight()
        waiter = asyncio.ensure_future(in_flight.run("key", fetch))
        await asyncio.sleep(0)
        waiter.cancel()
        assert await in_flight.run("key", fetch) == 1
        assert finished.is_set()

    asyncio.run(main())


def test_cached_coroutine():
    calls: list[int] = []
    cache = TTLCache(10, 60)

    @cached(cache)
    async def square(x: int) -> int:
        calls.append(x)
        await asyncio.sleep(0)
        return x * x

    async def main():
        assert await asyncio.gather(square(3), square(3), square(4)) == [9, 9, 16]
        assert await square(3) == 9

    asyncio.run(main())
    assert calls == [3, 4]


def test_cached_does_not_store_errors():
    n_calls = 0
    cache = TTLCache(10, 60)

    @cached(cache)
    async def flaky() -> str:
        nonlocal n_calls
        n_calls += 1
        if n_calls == 1:
            raise ConnectionError
        return "ok"

    async def main():
        with pytest.raises(ConnectionError):
            await flaky()
        assert await flaky() == "ok"

    asyncio.run(main())
    assert n_calls == 2 and len(cache) == 1


def test_json_hashkey_unhashable_args():
    assert json_hashkey({"a": 1, "b": [1, 2]}) == json_hashkey({"b": [1, 2], "a": 1})
    assert json_hashkey(1, x="a") == json_hashkey(1, x="a")
    assert json_hashkey([1]) != json_hashkey([2])


def test_clear_caches_by_group():
    ibc_cache = new_ttl_cache(CacheGroup.IBC, ttl=3600)
    default_cache = new_ttl_cache(CacheGroup.DEFAULT, ttl=5)
    ibc_cache["a"] = default_cache["a"] = 1

    clear_caches(CacheGroup.DEFAULT)
    assert "a" not in default_cache and "a" in ibc_cache

    clear_caches(CacheGroup.ALL)
    assert "a" in ibc_cache
    clear_caches(CacheGroup.ALL, clear_all=True)
    assert "a" not in ibc_cache


def test_ttl_cache_decorator():
    calls: list[dict] = []

    @ttl_cache
    def describe(params: dict) -> str:
        calls.append(params)
        return ",".join(sorted(params))

    assert describe({"b": 1, "a": 2}) == "a,b"
    assert describe({"a": 2, "b": 1}) == "a,b"
    assert len(calls) == 1

    clear_caches(CacheGroup.DEFAULT)
    describe({"a": 2, "b": 1})
    assert len(calls) == 2

    with pytest.raises(TypeError):
        ttl_cache("not a group")


def test_cache_stats(monkeypatch):
    monkeypatch.setattr(configs, "CACHE_STATS", True)
    cache = new_ttl_cache(CacheGroup.INDEXER, ttl=60)
    assert isinstance(cache, TTLCacheStats)

    cache["a"] = 1
    assert cache["a"] == 1
    with pytest.raises(KeyError):
        cache["b"]
    assert cache.stats() == {"n_hit": 1, "n_miss": 1, "n_hit_total": 1, "n_miss_total": 1}

    cache.clear()
    assert cache.stats()["n_hit"] == 0 and cache.stats()["n_hit_total"] == 1
    assert get_stats()["n_miss_total"] >= 1


def test_get_stats_disabled(monkeypatch):
    monkeypatch.setattr(configs, "CACHE_STATS", False)
    with pytest.raises(Exception):
        get_stats()
