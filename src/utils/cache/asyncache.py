"""
Adapted from https://github.com/hephex/asyncache/blob/master/asyncache/__init__.py
"""
import functools
import inspect

from cachetools import keys

from .in_flight import InFlight


def cached(cache, key=keys.hashkey):
    """
    Decorator to wrap a function or a coroutine with a memoizing callable
    that saves results in a cache.

    For coroutines, concurrent calls with the same key while the first one is
    still running await that same call instead of starting a new one. Exceptions
    are propagated to every waiter and nothing is cached for them.
    """

    def decorator(func):
        if inspect.iscoroutinefunction(func):
            in_flight: InFlight = InFlight()

            async def async_wrapper(*args, **kwargs):
                k = key(*args, **kwargs)
                try:
                    return cache[k]
                except KeyError:
                    pass  # key not found

                val = await in_flight.run(k, functools.partial(func, *args, **kwargs))
                try:
                    cache[k] = val
                except ValueError:
                    pass  # val too large
                return val

            async_wrapper.in_flight = in_flight  # type: ignore
            return functools.update_wrapper(async_wrapper, func)

        def sync_wrapper(*args, **kwargs):
            k = key(*args, **kwargs)
            try:
                return cache[k]
            except KeyError:
                pass  # key not found

            val = func(*args, **kwargs)
            try:
                cache[k] = val
            except ValueError:
                pass  # val too large
            return val

        return functools.update_wrapper(sync_wrapper, func)

    return decorator
