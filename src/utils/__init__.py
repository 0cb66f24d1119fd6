from . import ahttp, async_, cache, logger

__all__ = [
    "ahttp",
    "async_",
    "cache",
    "logger",
]
